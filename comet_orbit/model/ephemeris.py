"""
Planetary Ephemerides
=====================

Providers of heliocentric ecliptic J2000 planet positions for the
planetary-perturbation term of the force model.

Providers:
----------
  SpiceEphemeris      : SPICE SPK kernels (DE44x), high accuracy
  AnalyticalEphemeris : JPL mean Keplerian elements with linear rates, no data files
  StaticEphemeris     : fixed positions supplied by the caller

Every provider exposes

  heliocentric_position(body_name, date) -> np.ndarray [AU]

and a short `source` label that is reported in the calculation metadata.
"""
import math
import numpy    as np
import spiceypy as spice

from datetime import datetime
from pathlib  import Path
from typing   import Mapping, Optional, Protocol

from comet_orbit.model.constants       import CONVERTER, NAIFIDS, PLANET_MEAN_ELEMENTS
from comet_orbit.model.frame_converter import FrameConverter
from comet_orbit.model.orbit_converter import KeplerSolver
from comet_orbit.model.time_converter  import J2000_UTC, days_between, utc_to_et


class EphemerisProvider(Protocol):
  source : str

  def heliocentric_position(
    self,
    body_name : str,
    date      : datetime,
  ) -> np.ndarray:
    ...


class SpiceEphemeris:
  """
  Planet positions from SPICE kernels.

  Notes:
  ------
    The SPICE kernel pool is process-global. Kernels are furnished when the
    provider is built and released with unload().
  """
  source = 'spice'

  def __init__(
    self,
    spice_kernels_folderpath : Path,
  ):
    """
    Load the required SPICE kernels.

    Input:
    ------
      spice_kernels_folderpath : Path
        Directory holding the leap second kernel (naif0012.tls) and a planetary
        ephemeris (de*.bsp).

    Raises:
    -------
      FileNotFoundError
        If the folder or one of the required kernels is missing.
    """
    kernel_dir = Path(spice_kernels_folderpath)
    if not kernel_dir.exists():
      raise FileNotFoundError(
        f"SPICE kernel directory not found: {kernel_dir}\n"
        f"Please download kernels from https://naif.jpl.nasa.gov/pub/naif/generic_kernels/\n"
        f"Required files:\n"
        f"  - lsk/naif0012.tls\n"
        f"  - spk/planets/de440.bsp (or de430.bsp)"
      )

    lsk_filepath = kernel_dir / 'naif0012.tls'
    if not lsk_filepath.exists():
      raise FileNotFoundError(f"LSK file not found: {lsk_filepath}")

    spk_filepaths = sorted(kernel_dir.glob('de*.bsp'))
    if not spk_filepaths:
      raise FileNotFoundError(f"No SPK files (de*.bsp) found in {kernel_dir}")

    self.kernel_filepaths = [lsk_filepath, spk_filepaths[-1]]
    for kernel_filepath in self.kernel_filepaths:
      spice.furnsh(str(kernel_filepath))

  def unload(self) -> None:
    for kernel_filepath in self.kernel_filepaths:
      spice.unload(str(kernel_filepath))

  def heliocentric_position(
    self,
    body_name : str,
    date      : datetime,
  ) -> np.ndarray:
    """
    Heliocentric ecliptic J2000 position of a body [AU].
    """
    body_upper = body_name.upper()
    if body_upper not in NAIFIDS.NAME_TO_ID:
      raise ValueError(f"Unknown body name for NAIF ID lookup: {body_name}")

    state, _ = spice.spkez(
      targ   = NAIFIDS.NAME_TO_ID[body_upper],
      et     = utc_to_et(date),
      ref    = 'ECLIPJ2000',
      abcorr = 'NONE',
      obs    = NAIFIDS.SUN,
    )
    # SPICE returns km, convert to AU
    return np.array(state[0:3]) * CONVERTER.AU_PER_KM


class AnalyticalEphemeris:
  """
  Approximate planet positions from mean Keplerian elements.

  Accuracy is of order 1e-4 to 1e-3 AU for the inner planets and a few
  1e-3 AU for the giants over 1800-2050, well below what matters for a
  perturbation term. 'EARTH' is the Earth-Moon barycenter.

  Source:
  -------
    E. M. Standish, "Keplerian Elements for Approximate Positions of the
    Major Planets", JPL Solar System Dynamics.
  """
  source = 'analytical'

  def heliocentric_position(
    self,
    body_name : str,
    date      : datetime,
  ) -> np.ndarray:
    """
    Heliocentric ecliptic J2000 position of a planet [AU].

    Input:
    ------
      body_name : str
        Planet name (e.g. 'JUPITER').
      date : datetime
        UTC date.

    Output:
    -------
      pos_vec : np.ndarray
        Position vector [AU].
    """
    body_upper = body_name.upper()
    if body_upper not in PLANET_MEAN_ELEMENTS:
      raise ValueError(f"No mean elements for body: {body_name}. Supported bodies: {list(PLANET_MEAN_ELEMENTS.keys())}")

    # Julian centuries past J2000
    centuries = days_between(J2000_UTC, date) / 36525.0

    sma, ecc, inc, mean_lon, peri_lon, raan = (
      value + rate * centuries for value, rate in PLANET_MEAN_ELEMENTS[body_upper]
    )
    argp = peri_lon - raan
    ma   = ((mean_lon - peri_lon + 180.0) % 360.0 - 180.0) * CONVERTER.RAD_PER_DEG

    ea = KeplerSolver.elliptic(ma, ecc)
    pos_vec_orbital = np.array([
      sma * (math.cos(ea) - ecc),
      sma * math.sqrt(1.0 - ecc * ecc) * math.sin(ea),
      0.0,
    ])

    return FrameConverter.orbital_to_ecliptic(pos_vec_orbital, inc, argp, raan)


class StaticEphemeris:
  """
  Fixed planet positions, independent of date.

  Useful when the host already holds planet positions for the epoch of
  interest, and for tests.
  """
  source = 'static'

  def __init__(
    self,
    positions : Mapping[str, np.ndarray],
  ):
    self.positions = {
      name.upper(): np.array(pos_vec, dtype=float) for name, pos_vec in positions.items()
    }

  def heliocentric_position(
    self,
    body_name : str,
    date      : Optional[datetime] = None,
  ) -> np.ndarray:
    body_upper = body_name.upper()
    if body_upper not in self.positions:
      raise ValueError(f"No position for body: {body_name}")
    return self.positions[body_upper].copy()
