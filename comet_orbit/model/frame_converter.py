"""
Frame Converter
===============

Rotations between the orbital plane, the heliocentric ecliptic J2000 frame,
and the equatorial frame, plus the sky-coordinate conversions built on them.

Frames:
-------
  orbital    : x toward perihelion, z along the orbit normal
  ecliptic   : heliocentric ecliptic J2000 (the working frame of the engine)
  equatorial : ecliptic rotated about x by the obliquity
  RTN        : radial, transverse (in-plane, along motion), normal

Notes:
------
  The orbital-to-ecliptic rotation is a single composed 3-1-3 rotation
  R = Rz(raan) Rx(inc) Rz(argp), built once and applied as a matrix.
"""
import numpy as np

from scipy.spatial.transform import Rotation
from typing                  import Optional

from comet_orbit.model.constants     import CONVERTER, OBLIQUITY_J2000
from comet_orbit.model.vector_helper import cross


class FrameConverter:
  @staticmethod
  def orbital_to_ecliptic_matrix(
    inc  : float,
    argp : float,
    raan : float,
  ) -> np.ndarray:
    """
    Rotation matrix from the orbital plane to the ecliptic frame.

    Input:
    ------
      inc : float
        Inclination [deg].
      argp : float
        Argument of periapsis [deg].
      raan : float
        Longitude of the ascending node [deg].

    Output:
    -------
      rot_mat_orbital_to_ecliptic : np.ndarray
        3x3 rotation matrix such that: ecliptic_vec = rot_mat @ orbital_vec

    Usage:
    ------
      rot_mat = FrameConverter.orbital_to_ecliptic_matrix(
        inc  = elements.i,
        argp = elements.argument_of_periapsis,
        raan = elements.ascending_node,
      )
    """
    return Rotation.from_euler('ZXZ', [raan, inc, argp], degrees=True).as_matrix()

  @staticmethod
  def orbital_to_ecliptic(
    orbital_vec : np.ndarray,
    inc         : float,
    argp        : float,
    raan        : float,
  ) -> np.ndarray:
    rot_mat = FrameConverter.orbital_to_ecliptic_matrix(inc, argp, raan)
    return rot_mat @ np.asarray(orbital_vec, dtype=float)

  @staticmethod
  def ecliptic_to_equatorial(
    ecliptic_vec : np.ndarray,
    obliquity    : float = OBLIQUITY_J2000,
  ) -> np.ndarray:
    """
    Rotate a vector from the ecliptic frame to the equatorial frame.

    Input:
    ------
      ecliptic_vec : np.ndarray
        Vector in the ecliptic frame.
      obliquity : float
        Obliquity of the ecliptic [deg].

    Output:
    -------
      equatorial_vec : np.ndarray
        Vector in the equatorial frame.
    """
    rotation = Rotation.from_euler('x', obliquity, degrees=True)
    return rotation.apply(np.asarray(ecliptic_vec, dtype=float))

  @staticmethod
  def equatorial_to_ecliptic(
    equatorial_vec : np.ndarray,
    obliquity      : float = OBLIQUITY_J2000,
  ) -> np.ndarray:
    """
    Rotate a vector from the equatorial frame to the ecliptic frame.
    Inverse of ecliptic_to_equatorial().
    """
    rotation = Rotation.from_euler('x', obliquity, degrees=True)
    return rotation.inv().apply(np.asarray(equatorial_vec, dtype=float))

  @staticmethod
  def heliocentric_to_geocentric(
    helio_pos_vec : np.ndarray,
    earth_pos_vec : np.ndarray,
  ) -> np.ndarray:
    return np.asarray(helio_pos_vec, dtype=float) - np.asarray(earth_pos_vec, dtype=float)

  @staticmethod
  def cartesian_to_ra_dec(
    equatorial_vec : np.ndarray,
  ) -> tuple[float, float]:
    """
    Right ascension and declination of an equatorial direction.

    Input:
    ------
      equatorial_vec : np.ndarray
        Vector in the equatorial frame (any length).

    Output:
    -------
      ra : float
        Right ascension [deg], in [0, 360).
      dec : float
        Declination [deg], in [-90, 90].
    """
    x, y, z = np.asarray(equatorial_vec, dtype=float)

    ra  = np.arctan2(y, x) * CONVERTER.DEG_PER_RAD
    dec = np.arctan2(z, np.hypot(x, y)) * CONVERTER.DEG_PER_RAD

    ra = ra % 360.0
    if ra >= 360.0:
      ra = 0.0

    return float(ra), float(dec)

  @staticmethod
  def ra_dec_to_unit_vector(
    ra  : float,
    dec : float,
  ) -> np.ndarray:
    ra_rad  = ra  * CONVERTER.RAD_PER_DEG
    dec_rad = dec * CONVERTER.RAD_PER_DEG
    return np.array([
      np.cos(dec_rad) * np.cos(ra_rad),
      np.cos(dec_rad) * np.sin(ra_rad),
      np.sin(dec_rad),
    ])

  @staticmethod
  def ra_dec_to_heliocentric(
    ra                     : float,
    dec                    : float,
    delta                  : float,
    earth_ecliptic_pos_vec : np.ndarray,
    obliquity              : float = OBLIQUITY_J2000,
  ) -> np.ndarray:
    """
    Convert an observed sky position and geocentric distance to a heliocentric
    ecliptic position.

    Input:
    ------
      ra : float
        Right ascension [deg].
      dec : float
        Declination [deg].
      delta : float
        Geocentric distance [AU].
      earth_ecliptic_pos_vec : np.ndarray
        Heliocentric ecliptic position of the Earth [AU].
      obliquity : float
        Obliquity of the ecliptic [deg].

    Output:
    -------
      helio_pos_vec : np.ndarray
        Heliocentric ecliptic J2000 position [AU].
    """
    geo_equatorial_vec = FrameConverter.ra_dec_to_unit_vector(ra, dec) * delta
    geo_ecliptic_vec   = FrameConverter.equatorial_to_ecliptic(geo_equatorial_vec, obliquity)
    return np.asarray(earth_ecliptic_pos_vec, dtype=float) + geo_ecliptic_vec

  @staticmethod
  def xyz_to_rtn(
    xyz_ref_pos_vec : np.ndarray,
    xyz_ref_vel_vec : np.ndarray,
    eps             : float = 1e-14,
  ) -> Optional[np.ndarray]:
    """
    Calculate the rotation matrix from the inertial frame to the
    Radial-Transverse-Normal (RTN) frame.

    Input:
    ------
      xyz_ref_pos_vec : np.ndarray
        Reference position vector in inertial frame.
      xyz_ref_vel_vec : np.ndarray
        Reference velocity vector in inertial frame.
      eps : float
        Angular-momentum magnitude below which the frame is undefined.

    Output:
    -------
      rot_mat_xyz_to_rtn : np.ndarray | None
        3x3 rotation matrix whose rows are r_hat, t_hat, n_hat. None when the
        position is zero or the motion is purely radial.
    """
    pos_mag = np.linalg.norm(xyz_ref_pos_vec)
    if pos_mag == 0.0:
      return None

    # r_hat unit vector
    r_hat = xyz_ref_pos_vec / pos_mag

    # n_hat unit vector
    ang_mom_vec = cross(xyz_ref_pos_vec, xyz_ref_vel_vec)
    ang_mom_mag = np.linalg.norm(ang_mom_vec)
    if ang_mom_mag < eps:
      return None
    n_hat = ang_mom_vec / ang_mom_mag

    # t_hat unit vector
    t_hat = cross(n_hat, r_hat)

    return np.vstack((r_hat, t_hat, n_hat))

  @staticmethod
  def angular_separation(
    ra_1  : float,
    dec_1 : float,
    ra_2  : float,
    dec_2 : float,
  ) -> float:
    """
    Great-circle separation of two sky positions [arcsec], from the spherical
    law of cosines.
    """
    ra_1_rad  = ra_1  * CONVERTER.RAD_PER_DEG
    dec_1_rad = dec_1 * CONVERTER.RAD_PER_DEG
    ra_2_rad  = ra_2  * CONVERTER.RAD_PER_DEG
    dec_2_rad = dec_2 * CONVERTER.RAD_PER_DEG

    cos_angle = (
      np.sin(dec_1_rad) * np.sin(dec_2_rad)
      + np.cos(dec_1_rad) * np.cos(dec_2_rad) * np.cos(ra_1_rad - ra_2_rad)
    )
    angle_rad = np.arccos(np.clip(cos_angle, -1.0, 1.0))

    return float(angle_rad * CONVERTER.ARCSEC_PER_RAD)

  @staticmethod
  def angular_to_linear_distance(
    angle_arcsec : float,
    distance     : float,
  ) -> float:
    """
    Small-angle conversion of an angular offset [arcsec] seen at distance [AU]
    into a linear offset [AU].
    """
    return distance * angle_arcsec / CONVERTER.ARCSEC_PER_RAD
