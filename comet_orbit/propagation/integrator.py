"""
RK4 Integrator
==============

Fixed-step classical 4th-order Runge-Kutta propagation of a heliocentric
state under an acceleration model.

Notes:
------
  The step may be negative, which integrates backward in time with the same
  scheme. The stepper is a parameter of propagate_state() so another
  single-step scheme with the same signature can be slotted in.
"""
import math
import numpy as np

from typing import Callable, Optional

from comet_orbit.model.dynamics       import Acceleration
from comet_orbit.model.state          import StateVector
from comet_orbit.model.time_converter import add_days


def rk4_step(
  state        : StateVector,
  dt           : float,
  acceleration : Acceleration,
) -> StateVector:
  """
  Advance a state by one RK4 step.

  Input:
  ------
    state : StateVector
      State at the start of the step.
    dt : float
      Step size [day]. Negative steps integrate backward.
    acceleration : Acceleration
      Acceleration model, evaluated through compute(time, pos_vec, vel_vec).

  Output:
  -------
    state_next : StateVector
      State at state.time + dt.
  """
  time_o  = state.time
  time_m  = add_days(time_o, dt / 2.0)
  time_f  = add_days(time_o, dt)
  pos_vec = np.array(state.position)
  vel_vec = np.array(state.velocity)

  # Stage 1: start of interval
  k1_pos = vel_vec
  k1_vel = acceleration.compute(time_o, pos_vec, vel_vec)

  # Stage 2: midpoint from stage 1
  k2_pos = vel_vec + 0.5 * dt * k1_vel
  k2_vel = acceleration.compute(time_m, pos_vec + 0.5 * dt * k1_pos, k2_pos)

  # Stage 3: midpoint from stage 2
  k3_pos = vel_vec + 0.5 * dt * k2_vel
  k3_vel = acceleration.compute(time_m, pos_vec + 0.5 * dt * k2_pos, k3_pos)

  # Stage 4: end of interval
  k4_pos = vel_vec + dt * k3_vel
  k4_vel = acceleration.compute(time_f, pos_vec + dt * k3_pos, k4_pos)

  return StateVector(
    time     = time_f,
    position = pos_vec + dt / 6.0 * (k1_pos + 2.0 * k2_pos + 2.0 * k3_pos + k4_pos),
    velocity = vel_vec + dt / 6.0 * (k1_vel + 2.0 * k2_vel + 2.0 * k3_vel + k4_vel),
  )


def propagate_state(
  initial_state : StateVector,
  duration      : float,
  step          : float,
  acceleration  : Acceleration,
  stop_distance : Optional[float]                                      = None,
  stepper       : Callable[[StateVector, float, Acceleration], StateVector] = rk4_step,
) -> list[StateVector]:
  """
  Propagate a state with fixed steps over a signed duration.

  Input:
  ------
    initial_state : StateVector
      Starting state.
    duration : float
      Signed propagation span [day]. Negative for backward propagation.
    step : float
      Step magnitude [day]. Its sign is ignored; the direction follows duration.
    acceleration : Acceleration
      Acceleration model.
    stop_distance : float | None
      Heliocentric distance [AU]. The run ends after the first state beyond it.
    stepper : callable
      Single-step scheme, rk4_step by default.

  Output:
  -------
    states : list[StateVector]
      States after each step, excluding initial_state, in propagation order.
      The last state sits exactly at initial_state.time + duration unless the
      run was stopped by stop_distance.

  Raises:
  -------
    ValueError
      If step is zero or either argument is not finite.
  """
  if not (math.isfinite(duration) and math.isfinite(step)):
    raise ValueError(f"Duration and step must be finite, received duration={duration}, step={step}")
  if step == 0.0:
    raise ValueError("Step size must be non-zero")

  states = []
  if duration == 0.0:
    return states

  step_signed = math.copysign(abs(step), duration)
  num_full    = int(abs(duration) // abs(step))
  remainder   = duration - num_full * step_signed

  # Drop a remainder that is only floating-point residue of an exact multiple
  if abs(remainder) <= 1e-9 * abs(step):
    remainder = 0.0

  dt_list = [step_signed] * num_full
  if remainder != 0.0:
    dt_list.append(remainder)

  state = initial_state
  for dt in dt_list:
    state = stepper(state, dt, acceleration)
    states.append(state)
    if stop_distance is not None and state.distance_from_sun > stop_distance:
      break

  return states
