"""
Time Utilities
==============

Utility functions for time parsing and formatting.
"""
from datetime import datetime, timezone


def format_day_offset(
  days : float,
) -> str:
  """
  Format a time offset in days as a human-readable string.

  Examples:
    12.5   -> "+12d 12h 00m"
   -30.25  -> "-30d 06h 00m"

  Input:
  ------
    days : float
      Time offset in days (can be positive or negative).

  Output:
  -------
    str
      Formatted string like "+47d 21h 30m".
  """
  sign     = '+' if days >= 0 else '-'
  abs_min  = round(abs(days) * 1440.0)

  whole_days = abs_min // 1440
  hours      = (abs_min % 1440) // 60
  minutes    = abs_min % 60

  return f"{sign}{whole_days}d {hours:02d}h {minutes:02d}m"


def format_time_iso(
  utc_dt : datetime,
) -> str:
  """
  ISO 8601 UTC string with a 'Z' suffix, e.g. "2025-10-29T11:33:16Z".
  """
  if utc_dt.tzinfo is not None:
    utc_dt = utc_dt.astimezone(timezone.utc).replace(tzinfo=None)
  return utc_dt.isoformat() + 'Z'


def parse_time(
  time_str : str,
) -> datetime:
  """
  Parse a time string into a timezone-aware UTC datetime object.

  Accepted formats include:
  - ISO 8601 with 'T' separator: "2025-10-01T00:00:00"
  - ISO 8601 with 'Z' suffix: "2025-10-01T00:00:00Z"
  - Date only: "2025-10-01"
  - Space-separated: "2025-10-01 00:00:00"
  - With microseconds: "2025-10-01 00:00:00.123456"

  Times without an offset are taken as UTC.

  Input:
  ------
    time_str : str
      Time string to parse.

  Output:
  -------
    datetime
      Parsed datetime object (UTC).

  Raises:
  -------
    ValueError
      If the string matches none of the accepted formats.
  """
  time_str = time_str.strip()
  if time_str.endswith('Z'):
    time_str = time_str[:-1] + '+00:00'

  try:
    parsed_dt = datetime.fromisoformat(time_str)
  except ValueError:
    formats = [
      "%Y-%m-%d %H:%M:%S",
      "%Y-%m-%d %H:%M:%S.%f",
    ]
    for fmt in formats:
      try:
        parsed_dt = datetime.strptime(time_str, fmt)
        break
      except ValueError:
        continue
    else:
      raise ValueError(f"Cannot parse time string: {time_str}")

  if parsed_dt.tzinfo is None:
    return parsed_dt.replace(tzinfo=timezone.utc)
  return parsed_dt.astimezone(timezone.utc)
