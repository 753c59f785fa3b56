"""
Validation Package
==================

Test suite for the comet trajectory generator.

Modules:
--------
- test_dynamics         : Unit tests for the force model
- test_orbit_converter  : Tests for the Kepler solver and element conversions
- test_frame_converter  : Tests for frame transformations and RA/Dec
- test_integrator       : Tests for the RK4 integrator
- test_propagator       : Tests for the trajectory generator
- test_configuration    : Tests for YAML loading and run configuration
- test_main             : End-to-end command-line runs

Usage:
------
Run all tests:
  python -m pytest comet_orbit/validation/ -v

Run a specific test module:
  python -m pytest comet_orbit/validation/test_dynamics.py -v

Run a specific test class:
  python -m pytest comet_orbit/validation/test_dynamics.py::TestSolarGravity -v
"""
