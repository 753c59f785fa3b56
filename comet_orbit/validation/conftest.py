"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for all validation tests.
"""
import pytest
import numpy as np

from datetime import datetime, timezone

from comet_orbit.input.configuration import PropagationSettings
from comet_orbit.model.ephemeris     import StaticEphemeris
from comet_orbit.model.state         import OrbitalElements, StateVector


@pytest.fixture
def atlas_perihelion_time():
  """Perihelion time of 3I/ATLAS."""
  return datetime(2025, 10, 29, 11, 33, 16, tzinfo=timezone.utc)


@pytest.fixture
def atlas_elements(atlas_perihelion_time):
  """Published heliocentric orbital elements of 3I/ATLAS (hyperbolic)."""
  return OrbitalElements(
    name                  = '3I/ATLAS',
    epoch                 = datetime(2025, 7, 18, tzinfo=timezone.utc),
    e                     = 6.13941774,
    q                     = 1.35638454,
    i                     = 175.11310480,
    argument_of_periapsis = 128.01051367,
    ascending_node        = 322.15684249,
    perihelion_time       = atlas_perihelion_time,
  )


@pytest.fixture
def elliptic_elements():
  """Inclined ellipse, e = 0.5, q = 1 AU (a = 2 AU)."""
  return OrbitalElements(
    name                  = 'test ellipse',
    epoch                 = datetime(2025, 1, 1, tzinfo=timezone.utc),
    e                     = 0.5,
    q                     = 1.0,
    i                     = 30.0,
    argument_of_periapsis = 45.0,
    ascending_node        = 60.0,
    perihelion_time       = datetime(2025, 1, 1, tzinfo=timezone.utc),
  )


@pytest.fixture
def parabolic_elements():
  """Exactly parabolic orbit, q = 0.5 AU."""
  return OrbitalElements(
    name                  = 'test parabola',
    epoch                 = datetime(2025, 6, 1, tzinfo=timezone.utc),
    e                     = 1.0,
    q                     = 0.5,
    i                     = 80.0,
    argument_of_periapsis = 200.0,
    ascending_node        = 10.0,
    perihelion_time       = datetime(2025, 6, 1, tzinfo=timezone.utc),
  )


@pytest.fixture
def circular_state():
  """State on a circular 1 AU orbit in the ecliptic plane."""
  gp = 2.9591220828559115e-04
  return StateVector(
    time     = datetime(2025, 1, 1, tzinfo=timezone.utc),
    position = [1.0, 0.0, 0.0],
    velocity = [0.0, np.sqrt(gp), 0.0],
  )


@pytest.fixture
def static_ephemeris():
  """Fixed planet positions, one per default perturbing body."""
  return StaticEphemeris({
    'JUPITER' : [5.2, 0.0, 0.0],
    'SATURN'  : [0.0, 9.5, 0.0],
    'EARTH'   : [1.0, 0.0, 0.0],
  })


@pytest.fixture
def settings():
  """Default propagation settings."""
  return PropagationSettings()
