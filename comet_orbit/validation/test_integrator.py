"""
Integrator Tests
================

Tests for the fixed-step RK4 integrator.

Tests:
------
TestPropagateState
  - test_known_solution_backward_step_count : 30 days back at 0.25 day gives 120 states from either start
  - test_known_solution_partial_last_step   : a non-multiple duration ends exactly on time
  - test_known_solution_kepler_agreement    : two-body RK4 matches the Kepler solution
  - test_physical_laws_energy_conservation  : two-body energy is conserved
  - test_physical_laws_orbit_closure        : an ellipse closes after one period
  - test_sanity_check_reversibility         : forward then backward returns to the start
  - test_sanity_check_stop_distance         : run ends after the first state beyond the stop distance
  - test_edge_case_zero_duration            : empty output
  - test_edge_case_invalid_step             : zero or non-finite step rejected

Usage:
------
  python -m pytest comet_orbit/validation/test_integrator.py -v
"""
import pytest
import numpy as np

from datetime import datetime, timedelta, timezone

from comet_orbit.model.constants       import SOLARSYSTEMCONSTANTS
from comet_orbit.model.dynamics        import Acceleration
from comet_orbit.model.orbit_converter import OrbitConverter
from comet_orbit.model.state           import StateVector
from comet_orbit.propagation           import propagate_state


GP = SOLARSYSTEMCONSTANTS.SUN.GP


def specific_energy(state):
  return 0.5 * state.speed**2 - GP / state.distance_from_sun


class TestPropagateState:
  """Tests for propagate_state()."""

  @pytest.mark.parametrize("start", ['atlas_perihelion', 'sunward_state'])
  def test_known_solution_backward_step_count(self, start, atlas_elements):
    """Backward 30 days at 0.25 day: 120 states, strictly decreasing in time."""
    if start == 'atlas_perihelion':
      initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    else:
      initial_state = StateVector(
        time     = datetime(2025, 10, 29, tzinfo=timezone.utc),
        position = [1.0, 0.0,  0.0],
        velocity = [0.0, 0.02, 0.0],
      )
    states = propagate_state(initial_state, -30.0, 0.25, Acceleration())

    assert len(states) == 120
    times = [state.time for state in states]
    assert all(t_next < t_prev for t_prev, t_next in zip([initial_state.time] + times[:-1], times))
    assert states[-1].time == initial_state.time - timedelta(days=30)
    if start == 'sunward_state':
      assert states[-1].time == datetime(2025, 9, 29, tzinfo=timezone.utc)

  def test_known_solution_partial_last_step(self, circular_state):
    """10.1 days at 0.5 day: 20 full steps plus one 0.1 day step."""
    states = propagate_state(circular_state, 10.1, 0.5, Acceleration())

    assert len(states) == 21
    assert abs((states[-1].time - circular_state.time).total_seconds() - 10.1 * 86400.0) < 1e-3

  def test_known_solution_kepler_agreement(self, atlas_elements):
    """Pure solar gravity reproduces the hyperbolic Kepler solution."""
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    states        = propagate_state(initial_state, 30.0, 0.25, Acceleration())

    kepler_state = OrbitConverter.state_at(atlas_elements, states[-1].time)
    assert np.linalg.norm(states[-1].position - kepler_state.position) < 1e-6
    assert np.linalg.norm(states[-1].velocity - kepler_state.velocity) < 1e-8

  def test_physical_laws_energy_conservation(self, atlas_elements):
    """Two-body specific energy drifts negligibly over 60 days."""
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time - timedelta(days=30))
    states        = propagate_state(initial_state, 60.0, 0.25, Acceleration())

    energy_o = specific_energy(initial_state)
    energy_f = specific_energy(states[-1])
    assert abs(energy_f - energy_o) / abs(energy_o) < 1e-7

  def test_physical_laws_orbit_closure(self, elliptic_elements):
    """After one period the ellipse returns to its starting position."""
    period        = OrbitConverter.orbital_period(elliptic_elements)
    initial_state = OrbitConverter.state_at(elliptic_elements, elliptic_elements.perihelion_time)
    states        = propagate_state(initial_state, period, 0.5, Acceleration())

    assert np.linalg.norm(states[-1].position - initial_state.position) < 1e-5

  def test_sanity_check_reversibility(self, atlas_elements):
    """Propagating forward then backward recovers the initial state."""
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    forward       = propagate_state(initial_state, 30.0, 0.25, Acceleration())
    backward      = propagate_state(forward[-1], -30.0, 0.25, Acceleration())

    assert backward[-1].time == initial_state.time
    assert np.linalg.norm(backward[-1].position - initial_state.position) < 1e-7

  def test_sanity_check_stop_distance(self, atlas_elements):
    """The run ends with the first state beyond the stop distance."""
    initial_state = OrbitConverter.state_at(atlas_elements, atlas_elements.perihelion_time)
    states        = propagate_state(initial_state, 3650.0, 1.0, Acceleration(), stop_distance=20.0)

    assert states[-1].distance_from_sun > 20.0
    assert all(state.distance_from_sun <= 20.0 for state in states[:-1])
    assert len(states) < 3650

  def test_edge_case_zero_duration(self, circular_state):
    """Zero duration produces no states."""
    assert propagate_state(circular_state, 0.0, 0.5, Acceleration()) == []

  @pytest.mark.parametrize("step", [0.0, float('nan'), float('inf')])
  def test_edge_case_invalid_step(self, circular_state, step):
    """Zero and non-finite steps are rejected."""
    with pytest.raises(ValueError):
      propagate_state(circular_state, 10.0, step, Acceleration())
