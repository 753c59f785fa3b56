"""
Constants
=========

Unit conversions, NAIF identifiers, and solar-system constants used by the
comet propagation engine.

Units:
------
- Distance     : astronomical units [AU]
- Time         : days [day]
- Velocity     : [AU/day]
- Acceleration : [AU/day²]
- GM           : [AU³/day²]
- Angles       : degrees at interfaces, radians internally
"""
from dataclasses import dataclass, field
from types       import MappingProxyType
from typing      import Mapping


class CONVERTER:
  # Angle Conversions
  RAD_PER_DEG    = 3.141592653589793 / 180.0  # [radian] per [degree]
  DEG_PER_RAD    = 180.0 / 3.141592653589793  # [degree] per [radian]
  ARCSEC_PER_RAD = 206264.806247              # [arcsecond] per [radian]

  # Time Conversions
  SEC_PER_DAY  = 86400.0                      # [seconds] per [day]

  # Distance Conversions
  KM_PER_AU = 1.495978707e8                   # [kilometers] per [astronomical unit]
  AU_PER_KM = 1.0 / KM_PER_AU                 # [astronomical units] per [kilometer]

  # Gravitational Parameter Conversions
  AU3_PER_DAY2__PER__KM3_PER_SEC2 = SEC_PER_DAY**2 / KM_PER_AU**3  # [AU³/day²] per [km³/s²]


class NAIFIDS:
  """
  NAIF ID codes for the bodies the ephemeris providers can serve.

  Notes:
  ------
  Outer planets use system barycenters, which is what the generic DE44x kernels carry.
  """
  SUN     = 10
  MERCURY = 199
  VENUS   = 299
  EARTH   = 399
  MARS    = 4
  JUPITER = 5
  SATURN  = 6
  URANUS  = 7
  NEPTUNE = 8

  NAME_TO_ID = {
    'SUN'     : SUN,
    'MERCURY' : MERCURY,
    'VENUS'   : VENUS,
    'EARTH'   : EARTH,
    'MARS'    : MARS,
    'JUPITER' : JUPITER,
    'SATURN'  : SATURN,
    'URANUS'  : URANUS,
    'NEPTUNE' : NEPTUNE,
  }


class SOLARSYSTEMCONSTANTS:
  """
  Gravitational parameters, stored in [km³/s²] as published and exposed in [AU³/day²].
  """
  class SUN:
    GP = 2.9591220828559115e-04             # Sun's gravitational parameter [AU³/day²]

  class MERCURY:
    GP_KM = 2.2031868e4                     # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2

  class VENUS:
    GP_KM = 3.24858592e5                    # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2

  class EARTH:
    GP_KM = 3.986004418e5                   # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2

  class MARS:
    GP_KM = 4.282837e4                      # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2

  class JUPITER:
    GP_KM = 1.26686534e8                    # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2

  class SATURN:
    GP_KM = 3.7931187e7                     # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2

  class URANUS:
    GP_KM = 5.793939e6                      # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2

  class NEPTUNE:
    GP_KM = 6.836529e6                      # [km³/s²]
    GP    = GP_KM * CONVERTER.AU3_PER_DAY2__PER__KM3_PER_SEC2


# Mean obliquity of the ecliptic at J2000 [deg]
OBLIQUITY_J2000 = 23.43929


# Keplerian elements and rates for the approximate positions of the planets,
# valid 1800 AD - 2050 AD, mean ecliptic and equinox of J2000.
#   (a [AU], e, i [deg], L [deg], long. peri. [deg], long. node [deg])
#   each followed by its rate per julian century
# Source: E. M. Standish, "Keplerian Elements for Approximate Positions of the Major Planets", JPL SSD
PLANET_MEAN_ELEMENTS = {
  'MERCURY' : ((0.38709927,  0.00000037), (0.20563593,  0.00001906), (7.00497902, -0.00594749),
               (252.25032350, 149472.67411175), ( 77.45779628,  0.16047689), ( 48.33076593, -0.12534081)),
  'VENUS'   : ((0.72333566,  0.00000390), (0.00677672, -0.00004107), (3.39467605, -0.00078890),
               (181.97909950,  58517.81538729), (131.60246718,  0.00268329), ( 76.67984255, -0.27769418)),
  'EARTH'   : ((1.00000261,  0.00000562), (0.01671123, -0.00004392), (-0.00001531, -0.01294668),
               (100.46457166,  35999.37244981), (102.93768193,  0.32327364), (  0.0,          0.0       )),
  'MARS'    : ((1.52371034,  0.00001847), (0.09339410,  0.00007882), (1.84969142, -0.00813131),
               ( -4.55343205,  19140.30268499), (-23.94362959,  0.44441088), ( 49.55953891, -0.29257343)),
  'JUPITER' : ((5.20288700, -0.00011607), (0.04838624, -0.00013253), (1.30439695, -0.00183714),
               ( 34.39644051,   3034.74612775), ( 14.72847983,  0.21252668), (100.47390909,  0.20469106)),
  'SATURN'  : ((9.53667594, -0.00125060), (0.05386179, -0.00050991), (2.48599187,  0.00193609),
               ( 49.95424423,   1222.49362201), ( 92.59887831, -0.41897216), (113.66242448, -0.28867794)),
  'URANUS'  : ((19.18916464, -0.00196176), (0.04725744, -0.00004397), (0.77263783, -0.00242939),
               (313.23810451,    428.48202785), (170.95427630,  0.40805281), ( 74.01692503,  0.04240589)),
  'NEPTUNE' : ((30.06992276,  0.00026291), (0.00859048,  0.00005105), (1.77004347,  0.00035372),
               (-55.12002969,    218.45945325), ( 44.96476227, -0.32241464), (131.78422574, -0.00508664)),
}


def _default_body_gps() -> Mapping[str, float]:
  return MappingProxyType({
    'MERCURY' : SOLARSYSTEMCONSTANTS.MERCURY.GP,
    'VENUS'   : SOLARSYSTEMCONSTANTS.VENUS.GP,
    'EARTH'   : SOLARSYSTEMCONSTANTS.EARTH.GP,
    'MARS'    : SOLARSYSTEMCONSTANTS.MARS.GP,
    'JUPITER' : SOLARSYSTEMCONSTANTS.JUPITER.GP,
    'SATURN'  : SOLARSYSTEMCONSTANTS.SATURN.GP,
    'URANUS'  : SOLARSYSTEMCONSTANTS.URANUS.GP,
    'NEPTUNE' : SOLARSYSTEMCONSTANTS.NEPTUNE.GP,
  })


@dataclass(frozen=True)
class PhysicalConstants:
  """
  Immutable record of the physical constants handed to the force model and solvers.

  Attributes:
  -----------
    mu_sun : float
      Solar gravitational parameter [AU³/day²].
    body_gps : Mapping[str, float]
      Planetary gravitational parameters keyed by upper-case body name [AU³/day²].
    km_per_au : float
      Length of the astronomical unit [km].
    obliquity : float
      Obliquity of the ecliptic [deg].
  """
  mu_sun    : float                = SOLARSYSTEMCONSTANTS.SUN.GP
  body_gps  : Mapping[str, float]  = field(default_factory=_default_body_gps)
  km_per_au : float                = CONVERTER.KM_PER_AU
  obliquity : float                = OBLIQUITY_J2000

  def body_gp(
    self,
    body_name : str,
  ) -> float:
    """
    Gravitational parameter of a perturbing body [AU³/day²].

    Raises:
    -------
      ValueError
        If the body is not in the record.
    """
    body_upper = body_name.upper()
    if body_upper not in self.body_gps:
      raise ValueError(f"Unknown perturbing body: {body_name}. Supported bodies: {list(self.body_gps.keys())}")
    return self.body_gps[body_upper]


DEFAULT_CONSTANTS = PhysicalConstants()
