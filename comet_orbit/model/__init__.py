"""
Model Package
=============

Constants, state types, time and frame conversions, the Kepler solver,
planet ephemerides, and the force model.
"""
