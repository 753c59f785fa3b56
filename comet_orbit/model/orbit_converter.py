import math
import warnings
import numpy as np

from datetime import datetime
from typing   import Optional

from comet_orbit.model.constants       import CONVERTER, DEFAULT_CONSTANTS, PhysicalConstants, SOLARSYSTEMCONSTANTS
from comet_orbit.model.frame_converter import FrameConverter
from comet_orbit.model.state           import OrbitalElements, OrbitFamily, StateVector
from comet_orbit.model.time_converter  import add_days, days_between


class KeplerSolver:
  """
  Root solvers for Kepler's equation on each conic family.
  """

  @staticmethod
  def elliptic(
    ma       : float,
    ecc      : float,
    tol      : float = 1e-12,
    max_iter : int   = 30,
  ) -> float:
    """
    Solve Kepler's equation ma = ea - ecc*sin(ea) for eccentric anomaly ea.

    Input:
    ------
      ma : float
        Mean anomaly [rad]. Any value; it is wrapped to [-pi, pi).
      ecc : float
        Eccentricity (0 <= ecc < 1)
      tol : float
        Convergence tolerance on the Newton step [rad]
      max_iter : int
        Maximum iterations

    Output:
    -------
      ea : float
        Eccentric anomaly [rad]. The last iterate is returned if the
        iteration cap is reached.
    """
    ma = (ma + np.pi) % (2.0 * np.pi) - np.pi

    # Initial guess
    ea = ma + ecc * np.sin(ma) * (1.0 + ecc * np.cos(ma))

    # Newton-Raphson iteration
    for i in range(max_iter+1):
      func       = ea - ecc * np.sin(ea) - ma
      func_prime = 1.0 - ecc * np.cos(ea)
      delta_ea   = -func / func_prime
      if abs(delta_ea) < tol:
        return float(ea)
      if i == max_iter:
        warnings.warn(f"Elliptic Kepler equation not converged for ma={ma}, ecc={ecc}", RuntimeWarning)
        break
      ea = ea + delta_ea

    return float(ea)

  @staticmethod
  def hyperbolic(
    mha      : float,
    ecc      : float,
    tol      : float = 1e-12,
    max_iter : int   = 30,
  ) -> float:
    """
    Solve the hyperbolic Kepler equation mha = ecc*sinh(ha) - ha for hyperbolic anomaly ha.

    Input:
    ------
      mha : float
        Mean hyperbolic anomaly [rad]
      ecc : float
        Eccentricity (ecc > 1)
      tol : float
        Convergence tolerance on the Newton step
      max_iter : int
        Maximum iterations

    Output:
    -------
      ha : float
        Hyperbolic anomaly [rad]

    Notes:
    ------
      For |mha| > 1 the logarithmic starting value sign(mha)*ln(2|mha|/ecc + 1.85)
      is used. For small |mha|, the linear guess mha/(ecc-1) works well far from
      the parabola, and the cubic guess (6|mha|/ecc)^(1/3) near it.
    """
    if abs(mha) > 1.0:
      ha = np.sign(mha) * np.log(2.0 * abs(mha) / ecc + 1.85)
    elif ecc >= 1.6:
      ha = mha / (ecc - 1.0)
    else:
      ha = np.sign(mha) * (6.0 * abs(mha) / ecc) ** (1.0 / 3.0)

    for i in range(max_iter+1):
      dha = (ecc * np.sinh(ha) - ha - mha) / (ecc * np.cosh(ha) - 1.0)
      if abs(dha) < tol:
        return float(ha)
      if i == max_iter:
        warnings.warn(f"Hyperbolic Kepler equation not converged for mha={mha}, ecc={ecc}", RuntimeWarning)
        break
      ha += -dha

    return float(ha)

  @staticmethod
  def parabolic(
    mpa : float,
  ) -> float:
    """
    Solve Barker's equation mpa = pa + pa**3/3 for the parabolic anomaly pa = tan(ta/2).

    Closed form: with y = cbrt(3*|mpa|/2 + sqrt(9*mpa**2/4 + 1)), pa = sign(mpa)*(y - 1/y).
    The root is odd in mpa; solving for |mpa| avoids cancellation inside the root.
    """
    half = 1.5 * abs(mpa)
    y    = np.cbrt(half + np.sqrt(half * half + 1.0))
    return math.copysign(float(y - 1.0 / y), mpa)


class OrbitConverter:
  """
  Position and velocity of a comet from its perihelion-based orbital elements,
  and the reverse conversion from a state to osculating elements.
  """

  @staticmethod
  def mean_motion(
    elements : OrbitalElements,
    gp       : float = SOLARSYSTEMCONSTANTS.SUN.GP,
  ) -> float:
    """
    Mean motion [rad/day]. For the parabola, the Barker rate sqrt(gp / (2 q³)).
    """
    if elements.family is OrbitFamily.PARABOLIC:
      return math.sqrt(gp / (2.0 * elements.q**3))
    return math.sqrt(gp / abs(elements.semi_major_axis)**3)

  @staticmethod
  def orbital_period(
    elements : OrbitalElements,
    gp       : float = SOLARSYSTEMCONSTANTS.SUN.GP,
  ) -> float:
    """
    Orbital period [day]; infinite for open orbits.
    """
    if elements.family.is_open:
      return math.inf
    return 2.0 * math.pi / OrbitConverter.mean_motion(elements, gp)

  @staticmethod
  def conic_radius(
    q   : float,
    ecc : float,
    ta  : float,
  ) -> float:
    """
    Conic equation r = q(1 + ecc) / (1 + ecc*cos(ta)).

    Input:
    ------
      q : float
        Perihelion distance [AU]
      ecc : float
        Eccentricity
      ta : float
        True anomaly [rad]

    Output:
    -------
      pos_mag : float
        Heliocentric distance [AU]
    """
    return q * (1.0 + ecc) / (1.0 + ecc * np.cos(ta))

  @staticmethod
  def true_anomaly_at(
    elements : OrbitalElements,
    date     : datetime,
    gp       : float = SOLARSYSTEMCONSTANTS.SUN.GP,
  ) -> Optional[float]:
    """
    True anomaly at a date.

    Input:
    ------
      elements : OrbitalElements
        Orbital elements; perihelion_time is required.
      date : datetime
        UTC date of interest.
      gp : float
        Gravitational parameter of the Sun [AU³/day²].

    Output:
    -------
      ta : float | None
        True anomaly [rad], or None when the elements carry no perihelion time.
    """
    if elements.perihelion_time is None:
      warnings.warn(f"No perihelion time for {elements.name}; cannot place the object on its orbit", UserWarning)
      return None

    ecc = elements.e
    ma  = OrbitConverter.mean_motion(elements, gp) * days_between(elements.perihelion_time, date)

    if elements.family is OrbitFamily.ELLIPTIC:
      ea = KeplerSolver.elliptic(ma, ecc)
      return 2.0 * math.atan2(
        math.sqrt(1.0 + ecc) * math.sin(ea / 2.0),
        math.sqrt(1.0 - ecc) * math.cos(ea / 2.0),
      )
    elif elements.family is OrbitFamily.HYPERBOLIC:
      ha = KeplerSolver.hyperbolic(ma, ecc)
      return 2.0 * math.atan(math.sqrt((ecc + 1.0) / (ecc - 1.0)) * math.tanh(ha / 2.0))
    else:
      pa = KeplerSolver.parabolic(ma)
      return 2.0 * math.atan(pa)

  @staticmethod
  def perifocal_state(
    q   : float,
    ecc : float,
    ta  : float,
    gp  : float = SOLARSYSTEMCONSTANTS.SUN.GP,
  ) -> tuple[np.ndarray, np.ndarray]:
    """
    Position [AU] and velocity [AU/day] in the orbital plane at true anomaly ta [rad].
    """
    slr     = q * (1.0 + ecc)
    pos_mag = OrbitConverter.conic_radius(q, ecc, ta)
    pos_vec = pos_mag * np.array([np.cos(ta), np.sin(ta), 0.0])
    vel_vec = math.sqrt(gp / slr) * np.array([-np.sin(ta), ecc + np.cos(ta), 0.0])
    return pos_vec, vel_vec

  @staticmethod
  def position_at(
    elements  : OrbitalElements,
    date      : datetime,
    constants : PhysicalConstants = DEFAULT_CONSTANTS,
  ) -> Optional[np.ndarray]:
    """
    Heliocentric ecliptic J2000 position at a date.

    Input:
    ------
      elements : OrbitalElements
        Orbital elements of the object.
      date : datetime
        UTC date of interest.
      constants : PhysicalConstants
        Physical constants record.

    Output:
    -------
      pos_vec : np.ndarray | None
        Position [AU], or None when the elements carry no perihelion time.
    """
    state = OrbitConverter.state_at(elements, date, constants)
    return None if state is None else np.array(state.position)

  @staticmethod
  def state_at(
    elements  : OrbitalElements,
    date      : datetime,
    constants : PhysicalConstants = DEFAULT_CONSTANTS,
  ) -> Optional[StateVector]:
    """
    Heliocentric ecliptic J2000 state at a date, from the two-body conic.
    """
    ta = OrbitConverter.true_anomaly_at(elements, date, constants.mu_sun)
    if ta is None:
      return None

    pos_vec_orbital, vel_vec_orbital = OrbitConverter.perifocal_state(elements.q, elements.e, ta, constants.mu_sun)

    rot_mat = FrameConverter.orbital_to_ecliptic_matrix(
      inc  = elements.i,
      argp = elements.argument_of_periapsis,
      raan = elements.ascending_node,
    )

    return StateVector(
      time     = date,
      position = rot_mat @ pos_vec_orbital,
      velocity = rot_mat @ vel_vec_orbital,
    )

  @staticmethod
  def pv_to_elements(
    state : StateVector,
    gp    : float = SOLARSYSTEMCONSTANTS.SUN.GP,
    name  : str   = 'osculating',
    eps   : float = 1e-12,
  ) -> OrbitalElements:
    """
    Convert a heliocentric state to osculating perihelion-based orbital elements.

    Input:
    ------
      state : StateVector
        Heliocentric ecliptic state [AU, AU/day].
      gp : float
        Gravitational parameter of the Sun [AU³/day²].
      name : str
        Designation given to the resulting elements.
      eps : float
        Small number for numerical comparisons.

    Output:
    -------
      elements : OrbitalElements
        Osculating elements at state.time, with the perihelion time recovered
        from the mean anomaly.

    Raises:
    -------
      ValueError
        For rectilinear motion, where the orbit plane is undefined.

    Source:
    -------
      Modified from
      Analytical Mechanics of Space Systems, Fourth Edition
      Hanspeter Schaub and John L. Junkins
      DOI: https://doi.org/10.2514/4.105210
    """
    pos_vec = np.asarray(state.position, dtype=float)
    vel_vec = np.asarray(state.velocity, dtype=float)

    pos_mag = np.linalg.norm(pos_vec)
    pos_dir = pos_vec / pos_mag

    # Angular momentum vector
    ang_mom_vec = np.cross(pos_vec, vel_vec)
    ang_mom_mag = np.linalg.norm(ang_mom_vec)
    if ang_mom_mag < eps:
      raise ValueError("Rectilinear motion: orbital elements are undefined")
    ang_mom_dir = ang_mom_vec / ang_mom_mag

    # Eccentricity vector
    ecc_vec = np.cross(vel_vec, ang_mom_vec) / gp - pos_dir
    ecc_mag = np.linalg.norm(ecc_vec)
    ecc_dir = ecc_vec / ecc_mag if ecc_mag > eps else pos_dir.copy()

    # Snap to the parabola when the energy vanishes
    sma_inv = 2.0 / pos_mag - np.dot(vel_vec, vel_vec) / gp
    if abs(sma_inv) <= eps:
      ecc_mag = 1.0

    periapsis_dir = np.cross(ang_mom_dir, ecc_dir)

    # 3-1-3 orbit plane orientation angles
    raan = np.arctan2(ang_mom_dir[0], -ang_mom_dir[1])
    inc  = np.arccos(np.clip(ang_mom_dir[2], -1.0, 1.0))
    argp = np.arctan2(ecc_dir[2], periapsis_dir[2])

    # True anomaly
    ta = np.arctan2(np.dot(np.cross(ecc_dir, pos_dir), ang_mom_dir), np.dot(ecc_dir, pos_dir))

    # Perihelion distance from the semi-latus rectum
    q = ang_mom_mag**2 / gp / (1.0 + ecc_mag)

    # Mean anomaly and mean motion for the perihelion time
    family = OrbitFamily.from_eccentricity(ecc_mag)
    if family is OrbitFamily.ELLIPTIC:
      ea = 2.0 * np.arctan2(np.sqrt(1.0 - ecc_mag) * np.sin(ta / 2.0), np.sqrt(1.0 + ecc_mag) * np.cos(ta / 2.0))
      ma = ea - ecc_mag * np.sin(ea)
      mm = np.sqrt(gp * (1.0 - ecc_mag)**3 / q**3)
    elif family is OrbitFamily.HYPERBOLIC:
      ha = 2.0 * np.arctanh(np.sqrt((ecc_mag - 1.0) / (ecc_mag + 1.0)) * np.tan(ta / 2.0))
      ma = ecc_mag * np.sinh(ha) - ha
      mm = np.sqrt(gp * (ecc_mag - 1.0)**3 / q**3)
    else:
      pa = np.tan(ta / 2.0)
      ma = pa + pa**3 / 3.0
      mm = np.sqrt(gp / (2.0 * q**3))

    return OrbitalElements(
      name                  = name,
      epoch                 = state.time,
      e                     = float(ecc_mag),
      q                     = float(q),
      i                     = float(inc * CONVERTER.DEG_PER_RAD),
      argument_of_periapsis = float((argp * CONVERTER.DEG_PER_RAD) % 360.0),
      ascending_node        = float((raan * CONVERTER.DEG_PER_RAD) % 360.0),
      perihelion_time       = add_days(state.time, -float(ma / mm)),
    )
