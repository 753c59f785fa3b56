"""
Input Package
=============

Command-line parsing and YAML configuration loading.
"""
