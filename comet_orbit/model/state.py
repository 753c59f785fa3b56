"""
State Records
=============

Immutable records exchanged between the force model, the solvers, and the
trajectory generator.

Summary:
--------
  StateVector            : heliocentric ecliptic J2000 position/velocity at a UTC instant
  OrbitalElements        : perihelion-based classical elements of a comet
  NonGravitationalParams : Marsden-Sekanina outgassing parameters
  TrajectoryPoint        : one output sample of a trajectory
  SkyPosition            : geocentric right ascension / declination
  OrbitFamily            : conic-section tag used to dispatch the Kepler solvers
"""
import math
import numpy as np

from dataclasses import dataclass, field
from datetime    import datetime
from enum        import Enum
from typing      import Optional

from comet_orbit.model.time_converter import ensure_utc


class OrbitFamily(Enum):
  ELLIPTIC   = 'elliptic'
  PARABOLIC  = 'parabolic'
  HYPERBOLIC = 'hyperbolic'

  @classmethod
  def from_eccentricity(
    cls,
    ecc : float,
  ) -> 'OrbitFamily':
    if ecc < 1.0:
      return cls.ELLIPTIC
    if ecc > 1.0:
      return cls.HYPERBOLIC
    return cls.PARABOLIC

  @property
  def is_open(self) -> bool:
    return self is not OrbitFamily.ELLIPTIC


def _as_vec3(
  values,
  name : str,
) -> np.ndarray:
  vec = np.array(values, dtype=float).flatten()
  if vec.shape != (3,):
    raise ValueError(f"{name} must have exactly 3 components, received shape {vec.shape}")
  vec.setflags(write=False)
  return vec


@dataclass(frozen=True, eq=False)
class StateVector:
  """
  Heliocentric ecliptic J2000 state of a body.

  Attributes:
  -----------
    time : datetime
      UTC instant.
    position : np.ndarray
      Position vector [AU].
    velocity : np.ndarray
      Velocity vector [AU/day].
    uncertainty : float | None
      1-sigma position uncertainty [AU], if known.
  """
  time        : datetime
  position    : np.ndarray
  velocity    : np.ndarray
  uncertainty : Optional[float] = None

  def __post_init__(self):
    object.__setattr__(self, 'time',     ensure_utc(self.time))
    object.__setattr__(self, 'position', _as_vec3(self.position, 'position'))
    object.__setattr__(self, 'velocity', _as_vec3(self.velocity, 'velocity'))

  @property
  def distance_from_sun(self) -> float:
    return float(np.linalg.norm(self.position))

  @property
  def speed(self) -> float:
    return float(np.linalg.norm(self.velocity))


@dataclass(frozen=True)
class NonGravitationalParams:
  """
  Marsden-Sekanina non-gravitational parameters.

  A1, A2, A3 are the radial, transverse, and normal acceleration scales at
  r = r0 [AU/day²]; r0, m, n, k shape the g(r) sublimation law. An instance
  with zero A-coefficients means the model is applied and yields no force;
  the absence of a model is represented by None, never by zeros.
  """
  a1 : float
  a2 : float
  a3 : float
  r0 : float = 2.808
  m  : float = 2.15
  n  : float = 5.093
  k  : float = 4.6142


@dataclass(frozen=True)
class OrbitalElements:
  """
  Classical orbital elements of a comet referenced to perihelion.

  Attributes:
  -----------
    name : str
      Designation of the object.
    epoch : datetime
      Osculation epoch (UTC).
    e : float
      Eccentricity, e >= 0.
    q : float
      Perihelion distance [AU], q > 0.
    i : float
      Inclination [deg].
    argument_of_periapsis : float
      Argument of perihelion [deg].
    ascending_node : float
      Longitude of the ascending node [deg].
    perihelion_time : datetime | None
      Time of perihelion passage (UTC). Required for position queries.
  """
  name                  : str
  epoch                 : datetime
  e                     : float
  q                     : float
  i                     : float
  argument_of_periapsis : float
  ascending_node        : float
  perihelion_time       : Optional[datetime] = None

  def __post_init__(self):
    if not (math.isfinite(self.e) and self.e >= 0.0):
      raise ValueError(f"Eccentricity must be finite and non-negative, received e = {self.e}")
    if not (math.isfinite(self.q) and self.q > 0.0):
      raise ValueError(f"Perihelion distance must be positive, received q = {self.q}")
    object.__setattr__(self, 'epoch', ensure_utc(self.epoch))
    if self.perihelion_time is not None:
      object.__setattr__(self, 'perihelion_time', ensure_utc(self.perihelion_time))

  @property
  def family(self) -> OrbitFamily:
    return OrbitFamily.from_eccentricity(self.e)

  @property
  def semi_major_axis(self) -> float:
    """
    a = q / (1 - e) [AU]. Positive for ellipses, negative for hyperbolas,
    infinite for the parabola.
    """
    if self.family is OrbitFamily.PARABOLIC:
      return math.inf
    return self.q / (1.0 - self.e)

  @property
  def semi_latus_rectum(self) -> float:
    return self.q * (1.0 + self.e)


@dataclass(frozen=True)
class TrajectoryPoint:
  """
  One sample of a generated trajectory, heliocentric ecliptic J2000 [AU].
  """
  date              : datetime
  x                 : float
  y                 : float
  z                 : float
  distance_from_sun : float
  uncertainty       : Optional[float] = None

  @classmethod
  def from_position(
    cls,
    date        : datetime,
    pos_vec     : np.ndarray,
    uncertainty : Optional[float] = None,
  ) -> 'TrajectoryPoint':
    return cls(
      date              = ensure_utc(date),
      x                 = float(pos_vec[0]),
      y                 = float(pos_vec[1]),
      z                 = float(pos_vec[2]),
      distance_from_sun = float(np.linalg.norm(pos_vec)),
      uncertainty       = uncertainty,
    )

  def to_dict(self) -> dict:
    point = {
      'date'              : self.date.isoformat().replace('+00:00', 'Z'),
      'x'                 : self.x,
      'y'                 : self.y,
      'z'                 : self.z,
      'distance_from_sun' : self.distance_from_sun,
    }
    if self.uncertainty is not None:
      point['uncertainty'] = self.uncertainty
    return point


@dataclass(frozen=True)
class SkyPosition:
  """
  Geocentric equatorial sky position.

  Attributes:
  -----------
    ra : float
      Right ascension [deg], in [0, 360).
    dec : float
      Declination [deg], in [-90, 90].
    delta : float
      Geocentric distance [AU].
    date : datetime
      UTC instant of the position.
  """
  ra    : float
  dec   : float
  delta : float
  date  : datetime = field(compare=False)

  def to_dict(self) -> dict:
    return {
      'ra'           : self.ra,
      'dec'          : self.dec,
      'delta'        : self.delta,
      'last_updated' : self.date.isoformat().replace('+00:00', 'Z'),
    }
