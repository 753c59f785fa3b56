"""
Trajectory Generator Tests
==========================

Tests for state-vector mode, elements mode, sky positions, and metadata.

Tests:
------
TestStateVectorMode
  - test_known_solution_trail_uncertainty     : 30 day trail ends at sqrt(100² * 30) km
  - test_sanity_check_uncertainty_units       : km to AU conversion follows the constants record
  - test_sanity_check_trail_order             : trail runs backward from the start
  - test_sanity_check_projection_order        : projection runs forward, forward rate
  - test_sanity_check_visualization_cutoff    : 10 year hyperbolic projection is truncated at 50 AU
  - test_sanity_check_perturbations_small     : planets shift a 60 day trail only slightly

TestElementsMode
  - test_known_solution_sample_count          : num_points + 1 chronological dates
  - test_sanity_check_elements_cutoff         : samples beyond 50 AU are dropped, order kept
  - test_known_solution_perihelion_sample     : middle sample sits at q
  - test_known_solution_day_range             : window width follows eccentricity
  - test_sanity_check_reference_uncertainty   : backward and forward rates around the reference
  - test_sanity_check_orbit_path              : ellipse path spans q to Q, hyperbola stays on its branch
  - test_edge_case_missing_perihelion_time    : empty output with a warning

TestSkyPosition
  - test_known_solution_atlas_discovery       : 3I/ATLAS in Sagittarius on 2025-07-01
  - test_edge_case_no_ephemeris               : ValueError without an Earth position

TestMetadata
  - test_sanity_check_gravity_only            : no ephemeris, no non-gravitational model
  - test_sanity_check_full_model              : ephemeris and non-gravitational model reported

Usage:
------
  python -m pytest comet_orbit/validation/test_propagator.py -v
"""
import math
import pytest
import numpy as np

from dataclasses import replace
from datetime    import datetime, timedelta, timezone

from comet_orbit.model.constants       import CONVERTER, PhysicalConstants
from comet_orbit.model.ephemeris       import AnalyticalEphemeris
from comet_orbit.model.orbit_converter import OrbitConverter
from comet_orbit.model.state           import NonGravitationalParams
from comet_orbit.propagation           import TrajectoryGenerator, auto_day_range


class TestStateVectorMode:
  """Tests for trail() and projection()."""

  def test_known_solution_trail_uncertainty(self, atlas_elements):
    """After 30 days backward the uncertainty is sqrt(100² * 30) km."""
    generator     = TrajectoryGenerator()
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    points        = generator.trail(initial_state, 30.0)

    expected = math.sqrt(100.0**2 * 30.0) * CONVERTER.AU_PER_KM
    assert points[0].uncertainty == 0.0
    assert np.isclose(points[-1].uncertainty, expected, rtol=1e-9)

  def test_sanity_check_uncertainty_units(self):
    """The km to AU conversion follows the injected constants record."""
    constants = PhysicalConstants(km_per_au=1.0e8)
    generator = TrajectoryGenerator(constants=constants)

    assert np.isclose(generator.uncertainty(-30.0), math.sqrt(100.0**2 * 30.0) / 1.0e8, rtol=1e-12)
    assert np.isclose(TrajectoryGenerator().uncertainty(-30.0), math.sqrt(100.0**2 * 30.0) * CONVERTER.AU_PER_KM, rtol=1e-12)

  def test_sanity_check_trail_order(self, atlas_elements):
    """The trail starts at the initial state and steps back every 2 days."""
    generator     = TrajectoryGenerator()
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    points        = generator.trail(initial_state, 30.0)

    assert len(points) == 16
    assert points[0].date == initial_state.time
    assert points[-1].date == initial_state.time - timedelta(days=30)
    assert all(b.date < a.date for a, b in zip(points[:-1], points[1:]))
    assert all(b.uncertainty > a.uncertainty for a, b in zip(points[:-1], points[1:]))

  def test_sanity_check_projection_order(self, atlas_elements):
    """The projection steps forward and uses the forward rate."""
    generator     = TrajectoryGenerator()
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    points        = generator.projection(initial_state, 30.0)

    assert len(points) == 16
    assert all(b.date > a.date for a, b in zip(points[:-1], points[1:]))
    assert np.isclose(points[-1].uncertainty, math.sqrt(150.0**2 * 30.0) * CONVERTER.AU_PER_KM, rtol=1e-9)

  def test_sanity_check_visualization_cutoff(self, atlas_elements):
    """A decade forward on the hyperbola leaves the 50 AU sphere; output stops before it."""
    generator     = TrajectoryGenerator()
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    points        = generator.from_state(initial_state, 3650.0, step=1.0)

    assert all(point.distance_from_sun <= 50.0 for point in points)
    assert points[-1].distance_from_sun > 40.0
    assert points[-1].date < initial_state.time + timedelta(days=3650)

  def test_sanity_check_perturbations_small(self, atlas_elements):
    """Planetary perturbations move a 60 day trail by far less than an AU."""
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    points_kepler = TrajectoryGenerator().trail(initial_state, 60.0)
    points_planet = TrajectoryGenerator(ephemeris=AnalyticalEphemeris()).trail(initial_state, 60.0)

    offset = np.linalg.norm(
      np.array([points_kepler[-1].x, points_kepler[-1].y, points_kepler[-1].z])
      - np.array([points_planet[-1].x, points_planet[-1].y, points_planet[-1].z])
    )
    assert 0.0 < offset < 1e-3


class TestElementsMode:
  """Tests for from_elements() and orbit_path()."""

  def test_known_solution_sample_count(self, atlas_elements):
    """121 chronological samples within a year of perihelion."""
    points = TrajectoryGenerator().from_elements(atlas_elements)

    assert len(points) == 121
    assert all(b.date > a.date for a, b in zip(points[:-1], points[1:]))
    assert all(point.distance_from_sun <= 50.0 for point in points)
    assert all(point.uncertainty is None for point in points)

  def test_sanity_check_elements_cutoff(self, atlas_elements):
    """A 20000 day window leaves 50 AU; only the inner samples survive, still in order."""
    points = TrajectoryGenerator().from_elements(atlas_elements, num_points=120, day_range=20000.0)

    assert 0 < len(points) < 121
    assert all(point.distance_from_sun <= 50.0 for point in points)
    assert all(b.date > a.date for a, b in zip(points[:-1], points[1:]))
    assert min(point.distance_from_sun for point in points) == pytest.approx(atlas_elements.q, rel=1e-6)

  def test_known_solution_perihelion_sample(self, atlas_elements):
    """The middle sample falls on perihelion."""
    points = TrajectoryGenerator().from_elements(atlas_elements, num_points=120)
    assert np.isclose(points[60].distance_from_sun, atlas_elements.q, rtol=1e-6)
    assert min(point.distance_from_sun for point in points) == points[60].distance_from_sun

  @pytest.mark.parametrize("ecc, expected", [
    (6.139, 365.0),
    (1.0,   365.0),
    (0.999, 730.0),
    (0.993, 548.0),
    (0.5,   365.0),
  ])
  def test_known_solution_day_range(self, ecc, expected):
    """Near-parabolic ellipses get wider windows."""
    assert auto_day_range(ecc) == expected

  def test_sanity_check_reference_uncertainty(self, atlas_elements):
    """Points before the reference use the backward rate, after it the forward rate."""
    reference = atlas_elements.perihelion_time
    points    = TrajectoryGenerator().from_elements(atlas_elements, num_points=10, day_range=50.0, reference_date=reference)

    first, last = points[0], points[-1]
    assert np.isclose(first.uncertainty, math.sqrt(100.0**2 * 50.0) * CONVERTER.AU_PER_KM, rtol=1e-9)
    assert np.isclose(last.uncertainty,  math.sqrt(150.0**2 * 50.0) * CONVERTER.AU_PER_KM, rtol=1e-9)

  def test_sanity_check_orbit_path(self, elliptic_elements, atlas_elements):
    """Ellipse spans q to Q; the hyperbola never crosses its asymptotes."""
    generator = TrajectoryGenerator()

    ellipse_distances = [np.linalg.norm(pos_vec) for pos_vec in generator.orbit_path(elliptic_elements)]
    assert len(ellipse_distances) == 121
    assert np.isclose(min(ellipse_distances), 1.0)
    assert np.isclose(max(ellipse_distances), 3.0)

    hyperbola_distances = [np.linalg.norm(pos_vec) for pos_vec in generator.orbit_path(atlas_elements)]
    assert 0 < len(hyperbola_distances) < 121
    assert all(atlas_elements.q * (1.0 - 1e-12) <= r <= 50.0 for r in hyperbola_distances)

  def test_edge_case_missing_perihelion_time(self, atlas_elements):
    """Elements without a perihelion time give an empty trajectory."""
    elements = replace(atlas_elements, perihelion_time=None)
    with pytest.warns(UserWarning):
      assert TrajectoryGenerator().from_elements(elements) == []


class TestSkyPosition:
  """Tests for sky_position()."""

  def test_known_solution_atlas_discovery(self, atlas_elements):
    """At discovery 3I/ATLAS was near RA 272 deg, Dec -18.6 deg, about 3.5 AU away."""
    generator = TrajectoryGenerator(ephemeris=AnalyticalEphemeris())
    sky       = generator.sky_position(atlas_elements, datetime(2025, 7, 1, tzinfo=timezone.utc))

    assert abs(sky.ra  - 271.9) < 1.0
    assert abs(sky.dec - -18.6) < 1.0
    assert 3.3 < sky.delta < 3.7
    assert set(sky.to_dict()) == {'ra', 'dec', 'delta', 'last_updated'}

  def test_edge_case_no_ephemeris(self, atlas_elements):
    """Without an ephemeris there is no Earth position."""
    with pytest.raises(ValueError):
      TrajectoryGenerator().sky_position(atlas_elements, atlas_elements.perihelion_time)


class TestMetadata:
  """Tests for metadata()."""

  def test_sanity_check_gravity_only(self):
    """Gravity-only runs say so."""
    metadata = TrajectoryGenerator().metadata()

    assert metadata['integrator'] == 'RK4 (4th-order Runge-Kutta)'
    assert metadata['includes_planetary_perturbations'] is False
    assert metadata['includes_non_gravitational_forces'] is False
    assert metadata['ephemeris_source'] is None
    assert metadata['typical_accuracy_km'] == 15000.0
    assert 'conservative' in metadata['note']

  def test_sanity_check_full_model(self, static_ephemeris):
    """An ephemeris and a (zero) non-gravitational model are both reported."""
    nongrav  = NonGravitationalParams(a1=0.0, a2=0.0, a3=0.0)
    metadata = TrajectoryGenerator(ephemeris=static_ephemeris).metadata(nongrav)

    assert metadata['includes_planetary_perturbations'] is True
    assert metadata['includes_non_gravitational_forces'] is True
    assert metadata['perturbing_bodies'] == ['JUPITER', 'SATURN', 'EARTH']
    assert metadata['ephemeris_source'] == 'static'
    assert metadata['note'] == 'Includes outgassing rocket effect'
