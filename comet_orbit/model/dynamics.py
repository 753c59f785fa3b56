"""
Comet Orbital Dynamics Module
=============================

Force model for heliocentric comet trajectory propagation.

Class Structure:
----------------
Acceleration Hierarchy:
    GeneralStateEquationsOfMotion (ODE interface)
    └── Acceleration (coordinator)
        ├── SolarGravity
        │   └── point_mass()
        ├── PlanetaryPerturbations
        │   ├── point_mass() (direct + indirect term)
        │   └── injected ephemeris (SPICE, analytical, static)
        └── NonGravitationalAcceleration
            └── Marsden-Sekanina g(r) law in the RTN frame

Main Components:
----------------
1. **GeneralStateEquationsOfMotion** - d/dt [r, v] = [v, a] for an integrator.

2. **Acceleration** - Top-level coordinator that computes:
   total = solar_gravity + planetary_perturbations + non_gravitational

3. **SolarGravity** - Keplerian point-mass attraction of the Sun.

4. **PlanetaryPerturbations** - Third-body attraction of the planets, expressed
   in the heliocentric (accelerating) frame, hence the indirect term.

5. **NonGravitationalAcceleration** - Outgassing recoil, A1 radial, A2
   transverse, A3 normal, scaled by g(r).

Usage Example:
--------------
  from comet_orbit.model.dynamics  import Acceleration
  from comet_orbit.model.ephemeris import AnalyticalEphemeris

  acceleration = Acceleration(
    enable_planetary_perturbations = True,
    perturbing_bodies              = ['JUPITER', 'SATURN', 'EARTH'],
    ephemeris                      = AnalyticalEphemeris(),
    nongrav                        = None,
  )
  acc_vec = acceleration.compute(time_dt, pos_vec, vel_vec)

Units:
------
- Position     : astronomical units [AU]
- Velocity     : [AU/day]
- Acceleration : [AU/day²]
- Time         : UTC datetime (coordinator), days past epoch (ODE interface)

Sources:
--------
- Marsden, B. G., Sekanina, Z., & Yeomans, D. K. (1973). Comets and nongravitational forces. V. AJ, 78, 211.
- Montenbruck, O., & Gill, E. (2000). Satellite Orbits: Models, Methods and Applications. Springer.
"""
import warnings
import numpy as np

from datetime import datetime
from typing   import Optional, Sequence

from comet_orbit.model.constants       import DEFAULT_CONSTANTS, PhysicalConstants
from comet_orbit.model.ephemeris       import EphemerisProvider
from comet_orbit.model.frame_converter import FrameConverter
from comet_orbit.model.state           import NonGravitationalParams
from comet_orbit.model.time_converter  import add_days
from comet_orbit.model.vector_helper   import unit_vector


DEFAULT_PERTURBING_BODIES = ('JUPITER', 'SATURN', 'EARTH')
DEFAULT_NONGRAV_CUTOFF    = 10.0  # [AU]


# =============================================================================
# Gravity Components
# =============================================================================

class SolarGravity:
  """
  Point-mass gravity of the Sun.
  """

  def __init__(
    self,
    gp : float = DEFAULT_CONSTANTS.mu_sun,
  ):
    """
    Input:
    ------
      gp : float
        Gravitational parameter of the Sun [AU³/day²]
    """
    self.gp = gp

  def point_mass(
    self,
    pos_vec : np.ndarray,
  ) -> np.ndarray:
    """
    Two-body point mass gravity, -gp * r / |r|³.

    Input:
    ------
      pos_vec : np.ndarray
        Heliocentric position vector [AU]

    Output:
    -------
      acc_vec : np.ndarray
        Acceleration vector [AU/day²]. Zero, with a RuntimeWarning, at the origin.
    """
    pos_mag = np.linalg.norm(pos_vec)
    if pos_mag == 0.0:
      warnings.warn("Solar gravity evaluated at zero heliocentric distance; returning zero acceleration", RuntimeWarning)
      return np.zeros(3)
    return -self.gp * np.asarray(pos_vec, dtype=float) / pos_mag**3


class PlanetaryPerturbations:
  """
  Third-body gravitational perturbations from the planets, heliocentric frame.
  """

  def __init__(
    self,
    ephemeris : EphemerisProvider,
    bodies    : Optional[Sequence[str]] = None,
    constants : PhysicalConstants       = DEFAULT_CONSTANTS,
  ):
    """
    Initialize planetary perturbation model.

    Input:
    ------
      ephemeris : EphemerisProvider
        Source of heliocentric planet positions.
      bodies : list[str] | None
        Which bodies to include (default: Jupiter, Saturn, Earth).
      constants : PhysicalConstants
        Source of the planetary gravitational parameters.

    Raises:
    -------
      ValueError
        If a body has no gravitational parameter.
    """
    self.ephemeris = ephemeris
    self.bodies    = [body.upper() for body in (bodies if bodies else DEFAULT_PERTURBING_BODIES)]
    self.gps       = {body: constants.body_gp(body) for body in self.bodies}

  def point_mass(
    self,
    time          : datetime,
    pos_comet_vec : np.ndarray,
  ) -> np.ndarray:
    """
    Compute planetary point-mass perturbations.

    Input:
    ------
      time : datetime
        Current UTC time.
      pos_comet_vec : np.ndarray
        Heliocentric comet position [AU].

    Output:
    -------
      acc_vec : np.ndarray
        Perturbing acceleration [AU/day²].

    Notes:
    ------
      For each body b:
        a += GP_b * ((r_b - r_c) / |r_b - r_c|³ - r_b / |r_b|³)
      The second (indirect) term is the planet's pull on the Sun, which the
      heliocentric frame must subtract. A body coincident with the comet or
      sitting at the origin contributes nothing.
    """
    acc_vec = np.zeros(3)
    for body in self.bodies:
      # Position of Sun to perturbing body [AU]
      pos_body_vec = self.ephemeris.heliocentric_position(body, time)
      pos_body_mag = np.linalg.norm(pos_body_vec)
      if pos_body_mag == 0.0:
        continue

      # Position of comet to perturbing body [AU]
      pos_comet_to_body_vec = pos_body_vec - pos_comet_vec
      pos_comet_to_body_mag = np.linalg.norm(pos_comet_to_body_vec)
      if pos_comet_to_body_mag == 0.0:
        continue

      gp = self.gps[body]
      acc_vec += (
        gp * pos_comet_to_body_vec / pos_comet_to_body_mag**3
        - gp * pos_body_vec / pos_body_mag**3
      )

    return acc_vec


# =============================================================================
# Non-Gravitational Accelerations
# =============================================================================

class NonGravitationalAcceleration:
  """
  Marsden-Sekanina non-gravitational acceleration from cometary outgassing.
  """

  def __init__(
    self,
    params : NonGravitationalParams,
    cutoff : float = DEFAULT_NONGRAV_CUTOFF,
  ):
    """
    Input:
    ------
      params : NonGravitationalParams
        A1, A2, A3 scales [AU/day²] and g(r) shape parameters.
      cutoff : float
        Heliocentric distance beyond which outgassing is switched off [AU].
    """
    self.params = params
    self.cutoff = cutoff

  def g_of_r(
    self,
    pos_mag : float,
  ) -> float:
    """
    Sublimation law g(r) = (r0/r)^m * (1 + (r/r0)^n)^-k, with no normalization factor.
    """
    ratio = pos_mag / self.params.r0
    return ratio**(-self.params.m) * (1.0 + ratio**self.params.n)**(-self.params.k)

  def compute(
    self,
    pos_vec : np.ndarray,
    vel_vec : np.ndarray,
  ) -> np.ndarray:
    """
    Compute the non-gravitational acceleration.

    Input:
    ------
      pos_vec : np.ndarray
        Heliocentric position [AU].
      vel_vec : np.ndarray
        Heliocentric velocity [AU/day].

    Output:
    -------
      acc_vec : np.ndarray
        g(r) * (A1 r_hat + A2 t_hat + A3 n_hat) [AU/day²]. Zero at the origin
        and beyond the cutoff distance.

    Notes:
    ------
      The RTN basis is r_hat = r/|r|, n_hat = (r x v)/|r x v|, t_hat = n_hat x r_hat.
      When r and v are parallel the transverse and normal directions are
      undefined; only the radial component is applied.
    """
    pos_mag = np.linalg.norm(pos_vec)
    if pos_mag == 0.0 or pos_mag > self.cutoff:
      return np.zeros(3)

    g = self.g_of_r(pos_mag)

    rot_mat_xyz_to_rtn = FrameConverter.xyz_to_rtn(pos_vec, vel_vec)
    if rot_mat_xyz_to_rtn is None:
      return g * self.params.a1 * unit_vector(pos_vec)

    acc_rtn_vec = np.array([self.params.a1, self.params.a2, self.params.a3])
    return g * (rot_mat_xyz_to_rtn.T @ acc_rtn_vec)


# =============================================================================
# Coordinator
# =============================================================================

class Acceleration:
  """
  Acceleration coordinator - orchestrates all acceleration components

  Computes total acceleration as:
    total = solar_gravity + planetary_perturbations + non_gravitational
  """

  def __init__(
    self,
    constants                      : PhysicalConstants                = DEFAULT_CONSTANTS,
    enable_planetary_perturbations : bool                             = False,
    perturbing_bodies              : Optional[Sequence[str]]          = None,
    ephemeris                      : Optional[EphemerisProvider]      = None,
    nongrav                        : Optional[NonGravitationalParams] = None,
    nongrav_cutoff                 : float                            = DEFAULT_NONGRAV_CUTOFF,
  ):
    """
    Initialize acceleration coordinator

    Input:
    ------
      constants : PhysicalConstants
        Physical constants record.
      enable_planetary_perturbations : bool
        Enable planetary third-body perturbations.
      perturbing_bodies : list[str] | None
        Which planets to include (default: Jupiter, Saturn, Earth).
      ephemeris : EphemerisProvider | None
        Planet position provider, required when perturbations are enabled.
      nongrav : NonGravitationalParams | None
        Non-gravitational parameters. None means no non-gravitational model.
      nongrav_cutoff : float
        Distance beyond which the non-gravitational force vanishes [AU].

    Raises:
    -------
      ValueError
        If perturbations are enabled without an ephemeris.
    """
    self.constants     = constants
    self.solar_gravity = SolarGravity(gp=constants.mu_sun)

    self.enable_planetary_perturbations = enable_planetary_perturbations
    if self.enable_planetary_perturbations:
      if ephemeris is None:
        raise ValueError("Planetary perturbations require an ephemeris provider.")
      self.planetary = PlanetaryPerturbations(
        ephemeris = ephemeris,
        bodies    = perturbing_bodies,
        constants = constants,
      )
    else:
      self.planetary = None

    if nongrav is not None:
      self.nongrav = NonGravitationalAcceleration(
        params = nongrav,
        cutoff = nongrav_cutoff,
      )
    else:
      self.nongrav = None

  @property
  def includes_planetary_perturbations(self) -> bool:
    return self.planetary is not None

  @property
  def includes_non_gravitational_forces(self) -> bool:
    return self.nongrav is not None

  @property
  def perturbing_bodies(self) -> list:
    return list(self.planetary.bodies) if self.planetary is not None else []

  def compute(
    self,
    time    : datetime,
    pos_vec : np.ndarray,
    vel_vec : np.ndarray,
  ) -> np.ndarray:
    """
    Compute total acceleration from all components

    Input:
    ------
      time : datetime
        Current UTC time
      pos_vec : np.ndarray
        Heliocentric position vector [AU]
      vel_vec : np.ndarray
        Heliocentric velocity vector [AU/day]

    Output:
    -------
      acc_vec : np.ndarray
        Total acceleration [AU/day²]
    """
    # Solar gravity (always)
    acc_vec = self.solar_gravity.point_mass(pos_vec)

    # Planetary perturbations (optional)
    if self.planetary is not None:
      acc_vec = acc_vec + self.planetary.point_mass(time, pos_vec)

    # Non-gravitational force (optional)
    if self.nongrav is not None:
      acc_vec = acc_vec + self.nongrav.compute(pos_vec, vel_vec)

    return acc_vec


def gravitational_acceleration(
  pos_vec : np.ndarray,
  gp      : float = DEFAULT_CONSTANTS.mu_sun,
) -> np.ndarray:
  return SolarGravity(gp).point_mass(pos_vec)


def planetary_perturbation(
  time          : datetime,
  pos_comet_vec : np.ndarray,
  ephemeris     : EphemerisProvider,
  bodies        : Optional[Sequence[str]] = None,
  constants     : PhysicalConstants       = DEFAULT_CONSTANTS,
) -> np.ndarray:
  return PlanetaryPerturbations(ephemeris, bodies, constants).point_mass(time, pos_comet_vec)


def non_gravitational_acceleration(
  pos_vec : np.ndarray,
  vel_vec : np.ndarray,
  params  : Optional[NonGravitationalParams],
  cutoff  : float = DEFAULT_NONGRAV_CUTOFF,
) -> np.ndarray:
  """
  Non-gravitational acceleration [AU/day²]; zero when no model is supplied.
  """
  if params is None:
    return np.zeros(3)
  return NonGravitationalAcceleration(params, cutoff).compute(pos_vec, vel_vec)


# =============================================================================
# Equations of Motion
# =============================================================================

class GeneralStateEquationsOfMotion:
  """
  General state equations of motion, in the form scipy-style integrators expect
  """

  def __init__(
    self,
    acceleration : Acceleration,
    epoch        : datetime,
  ):
    """
    Input:
    ------
      acceleration : Acceleration
        Acceleration coordinator instance
      epoch : datetime
        UTC time corresponding to time = 0
    """
    self.acceleration = acceleration
    self.epoch        = epoch

  def state_time_derivative(
    self,
    time      : float,
    state_vec : np.ndarray,
  ) -> np.ndarray:
    """
    Compute state time derivative for ODE integration

    Input:
    ------
      time : float
        Days past epoch
      state_vec : np.ndarray
        Current state vector [pos, vel] [AU, AU/day]

    Output:
    -------
      state_dot_vec : np.ndarray
        Time derivative of state vector [vel, acc] [AU/day, AU/day²]
    """
    pos_vec = state_vec[0:3]
    vel_vec = state_vec[3:6]
    acc_vec = self.acceleration.compute(add_days(self.epoch, time), pos_vec, vel_vec)

    state_dot_vec      = np.zeros(6)
    state_dot_vec[0:3] = vel_vec
    state_dot_vec[3:6] = acc_vec

    return state_dot_vec
