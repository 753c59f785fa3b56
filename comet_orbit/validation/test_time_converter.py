"""
Time Conversion Tests
=====================

Tests for UTC handling, Julian dates, and time string helpers.

Tests:
------
TestTimeConverter
  - test_known_solution_j2000_julian_date : J2000 (TT) is JD 2451545.0 less 64.184 s in UTC
  - test_sanity_check_julian_round_trip   : jd_to_utc undoes utc_to_jd
  - test_sanity_check_day_arithmetic      : add_days and days_between are inverses
  - test_sanity_check_naive_is_utc        : naive datetimes are treated as UTC

TestTimeHelper
  - test_sanity_check_parse_formats       : accepted input formats
  - test_edge_case_parse_failure          : unparsable strings raise ValueError
  - test_known_solution_day_offset        : offset formatting
  - test_known_solution_iso_format        : 'Z'-suffixed output

Usage:
------
  python -m pytest comet_orbit/validation/test_time_converter.py -v
"""
import pytest
import numpy as np

from datetime import datetime, timedelta, timezone

from comet_orbit.model.time_converter import J2000_UTC, add_days, days_between, ensure_utc, jd_to_utc, utc_to_jd
from comet_orbit.utility.time_helper  import format_day_offset, format_time_iso, parse_time


class TestTimeConverter:
  """Tests for time_converter."""

  def test_known_solution_j2000_julian_date(self):
    """The J2000 instant expressed on the UTC scale."""
    assert np.isclose(utc_to_jd(J2000_UTC), 2451545.0 - 64.184 / 86400.0, rtol=0.0, atol=1e-8)

  def test_sanity_check_julian_round_trip(self):
    """UTC -> JD -> UTC within a millisecond."""
    utc_dt = datetime(2025, 10, 29, 11, 33, 16, tzinfo=timezone.utc)
    assert abs((jd_to_utc(utc_to_jd(utc_dt)) - utc_dt).total_seconds()) < 1e-3

  def test_sanity_check_day_arithmetic(self):
    """Shifting by a number of days and measuring it back agree."""
    utc_dt = datetime(2025, 7, 1, tzinfo=timezone.utc)
    for days in (-365.25, -0.25, 0.0, 2.0, 1000.5):
      assert np.isclose(days_between(utc_dt, add_days(utc_dt, days)), days, atol=1e-10)

  def test_sanity_check_naive_is_utc(self):
    """Naive datetimes are taken as UTC; aware ones are converted."""
    naive = datetime(2025, 1, 1, 12, 0, 0)
    assert ensure_utc(naive).tzinfo == timezone.utc

    aware = datetime(2025, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(aware) == ensure_utc(naive)


class TestTimeHelper:
  """Tests for time_helper."""

  @pytest.mark.parametrize("time_str", [
    "2025-10-29T11:33:16",
    "2025-10-29T11:33:16Z",
    "2025-10-29 11:33:16",
    "2025-10-29T12:33:16+01:00",
  ])
  def test_sanity_check_parse_formats(self, time_str):
    """All accepted formats give the same aware UTC instant."""
    assert parse_time(time_str) == datetime(2025, 10, 29, 11, 33, 16, tzinfo=timezone.utc)

  def test_edge_case_parse_failure(self):
    """Garbage input raises ValueError."""
    with pytest.raises(ValueError):
      parse_time("next tuesday")

  @pytest.mark.parametrize("days, expected", [
    (12.5,   "+12d 12h 00m"),
    (-30.25, "-30d 06h 00m"),
    (0.0,    "+0d 00h 00m"),
  ])
  def test_known_solution_day_offset(self, days, expected):
    """Offsets in days, hours, and minutes."""
    assert format_day_offset(days) == expected

  def test_known_solution_iso_format(self):
    """UTC instants end in 'Z'."""
    assert format_time_iso(datetime(2025, 10, 29, 11, 33, 16, tzinfo=timezone.utc)) == "2025-10-29T11:33:16Z"
