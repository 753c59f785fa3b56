import spiceypy as spice

from astropy.time import Time as AstropyTime
from datetime     import datetime, timedelta, timezone

from comet_orbit.model.constants import CONVERTER


# J2000 epoch (2000-01-01T12:00:00 TT) expressed in UTC
J2000_UTC = datetime(2000, 1, 1, 11, 58, 55, 816000, tzinfo=timezone.utc)


def ensure_utc(
  utc_dt : datetime,
) -> datetime:
  """
  Attach the UTC timezone to a naive datetime, or convert an aware one to UTC.
  """
  if utc_dt.tzinfo is None:
    return utc_dt.replace(tzinfo=timezone.utc)
  return utc_dt.astimezone(timezone.utc)


def utc_to_jd(
  utc_dt : datetime,
) -> float:
  """
  Convert a UTC datetime object to a Julian date.

  Input:
  ------
    utc_dt : datetime
      The UTC datetime to convert. Naive datetimes are taken as UTC.

  Output:
  -------
    jd : float
      Julian date (UTC scale).
  """
  utc_dt = ensure_utc(utc_dt)
  return float(AstropyTime(utc_dt.replace(tzinfo=None), scale='utc').jd)


def jd_to_utc(
  jd : float,
) -> datetime:
  """
  Convert a Julian date (UTC scale) to a timezone-aware UTC datetime object.

  Input:
  ------
    jd : float
      Julian date.

  Output:
  -------
    utc_dt : datetime
      UTC time as a datetime object.
  """
  utc_dt = AstropyTime(jd, format='jd', scale='utc').to_datetime()
  return utc_dt.replace(tzinfo=timezone.utc)


def days_between(
  time_o_dt : datetime,
  time_f_dt : datetime,
) -> float:
  """
  Signed elapsed time from time_o_dt to time_f_dt [day].
  """
  return (ensure_utc(time_f_dt) - ensure_utc(time_o_dt)).total_seconds() / CONVERTER.SEC_PER_DAY


def add_days(
  utc_dt : datetime,
  days   : float,
) -> datetime:
  """
  Shift a UTC datetime by a (possibly fractional, possibly negative) number of days.
  """
  return ensure_utc(utc_dt) + timedelta(days=days)


def utc_to_et(
  utc_dt : datetime,
) -> float:
  """
  Convert a UTC datetime object to Ephemeris Time (ET) (seconds past J2000).

  Input:
  ------
    utc_dt : datetime
      The UTC datetime to convert.

  Output:
  -------
    et_float : float
      The corresponding Ephemeris Time (ET) in seconds past J2000.

  Notes:
  ------
    Requires a leap second kernel (LSK) to be loaded.
  """
  utc_str  = ensure_utc(utc_dt).strftime('%Y-%m-%dT%H:%M:%S.%f')
  et_float = float(spice.str2et(utc_str))
  return et_float
