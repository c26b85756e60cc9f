from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
import math
from typing import Literal, Optional, Tuple

from ..core.config import DEFAULT_EOP, EarthOrientation
from ..core.errors import UnsupportedDateError
from ..core.types import SECONDS_PER_DAY, TT_MINUS_TAI_SECONDS, TimeInstant


# First day of the Gregorian calendar; earlier civil dates are not supported.
GREGORIAN_EPOCH = date(1582, 10, 15)
_JD_GREGORIAN_EPOCH = 2299160.5


# ============================================================
# Basic JD / JDN helpers
# ============================================================

def jd_to_jdn(jd: float) -> int:
    """
    Convert Julian Date (JD, days from noon) to Julian Day Number (JDN, integer day starting at midnight).
      JDN = floor(JD + 0.5)
    """
    return int(math.floor(jd + 0.5))


def jdn_to_jd(jdn: int) -> float:
    """JD at midnight UTC of the given JDN (JD starts at noon, so JDN - 0.5)."""
    return float(jdn) - 0.5


# ============================================================
# Gregorian calendar <-> JD  (Fliegel–Van Flandern for the integer part)
# ============================================================

def date_to_jdn(d: date) -> int:
    """Gregorian date -> JDN."""
    if d < GREGORIAN_EPOCH:
        raise UnsupportedDateError(f"date before Gregorian epoch {GREGORIAN_EPOCH}: {d}")
    y = d.year
    m = d.month
    day = d.day

    a = (14 - m) // 12
    y2 = y + 4800 - a
    m2 = m + 12 * a - 3

    jdn = day + (153 * m2 + 2) // 5 + 365 * y2 + y2 // 4 - y2 // 100 + y2 // 400 - 32045
    return int(jdn)


def jdn_to_date(jdn: int) -> date:
    """JDN -> Gregorian date."""
    a = jdn + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4

    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153

    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + (m // 10)

    return date(int(year), int(month), int(day))


def calendar_to_jd(year: int, month: int, day: int, hour: float = 0.0) -> float:
    """
    Gregorian calendar date plus fractional hour (UT-like scale) -> JD.

    Raises UnsupportedDateError for dates before 1582-10-15 or invalid fields.
    """
    try:
        d = date(year, month, day)
    except ValueError as e:
        raise UnsupportedDateError(f"invalid calendar date {year}-{month}-{day}: {e}") from e
    return jdn_to_jd(date_to_jdn(d)) + hour / 24.0


def jd_to_calendar(jd: float) -> Tuple[int, int, int, float]:
    """JD -> (year, month, day, fractional hour)."""
    if jd < _JD_GREGORIAN_EPOCH:
        raise UnsupportedDateError(f"JD before Gregorian epoch: {jd}")
    jdn = jd_to_jdn(jd)
    d = jdn_to_date(jdn)
    hour = (jd - jdn_to_jd(jdn)) * 24.0
    return d.year, d.month, d.day, hour


def split_hour(hour: float, rounding: Literal["truncate", "nearest"] = "truncate") -> Tuple[int, int]:
    """
    Fractional hour -> (hh, mm).

    'truncate' drops the seconds (minutes = int(hour*60) % 60); 'nearest' rounds to the
    closest minute. A rounded 24:00 is returned as (24, 0) and left for the caller to carry.
    """
    if rounding == "truncate":
        total = int(hour * 60.0)
    elif rounding == "nearest":
        total = int(math.floor(hour * 60.0 + 0.5))
    else:
        raise ValueError("rounding must be one of: truncate, nearest")
    return total // 60, total % 60


# ============================================================
# datetime(UTC) <-> JD(UTC)
# ============================================================

_JD_UNIX_EPOCH = 2440587.5  # JD at 1970-01-01 00:00:00 UTC


def datetime_utc_to_jd(dt: datetime) -> float:
    """
    datetime -> JD (UTC). Requires timezone-aware datetime.
    """
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    dt_utc = dt.astimezone(timezone.utc)
    if dt_utc.date() < GREGORIAN_EPOCH:
        raise UnsupportedDateError(f"date before Gregorian epoch {GREGORIAN_EPOCH}: {dt_utc.date()}")
    t = (dt_utc - datetime(1970, 1, 1, tzinfo=timezone.utc)) / timedelta(seconds=1)
    return _JD_UNIX_EPOCH + t / SECONDS_PER_DAY


def jd_to_datetime_utc(jd: float) -> datetime:
    """
    JD (UTC) -> timezone-aware datetime in UTC.
    """
    if jd < _JD_GREGORIAN_EPOCH:
        raise UnsupportedDateError(f"JD before Gregorian epoch: {jd}")
    t = (jd - _JD_UNIX_EPOCH) * SECONDS_PER_DAY
    return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=t)


def jd_to_minute_utc(jd: float, rounding: Literal["truncate", "nearest"] = "truncate") -> datetime:
    """JD (UTC) -> UTC datetime at minute resolution."""
    y, m, d, hour = jd_to_calendar(jd)
    hh, mm = split_hour(hour, rounding)
    return datetime(y, m, d, tzinfo=timezone.utc) + timedelta(hours=hh, minutes=mm)


# ============================================================
# UTC -> TAI / TT / UT1
# ============================================================

def apply_leap_second_offset(jd_utc: float, leap_seconds: int) -> float:
    """JD(UTC) -> JD(TAI) using TAI - UTC = leap_seconds."""
    return jd_utc + leap_seconds / SECONDS_PER_DAY


def apply_dut1_offset(jd_utc: float, dut1_seconds: float) -> float:
    """JD(UTC) -> JD(UT1) using UT1 - UTC = dut1_seconds."""
    return jd_utc + dut1_seconds / SECONDS_PER_DAY


def jd_utc_to_jd_tt(jd_utc: float, leap_seconds: int = DEFAULT_EOP.leap_seconds) -> float:
    """TT = TAI + 32.184 s."""
    return apply_leap_second_offset(jd_utc, leap_seconds) + TT_MINUS_TAI_SECONDS / SECONDS_PER_DAY


def jd_tt_to_jd_utc(jd_tt: float, leap_seconds: int = DEFAULT_EOP.leap_seconds) -> float:
    return jd_tt - (leap_seconds + TT_MINUS_TAI_SECONDS) / SECONDS_PER_DAY


# ============================================================
# TimeInstant construction
# ============================================================

def make_instant(dt: datetime, eop: Optional[EarthOrientation] = None) -> TimeInstant:
    """
    Build a TimeInstant from a timezone-aware datetime.
    The Earth orientation values are carried on the instant, never read from globals.
    """
    eop = DEFAULT_EOP if eop is None else eop
    jd = datetime_utc_to_jd(dt)
    return TimeInstant(
        utc=dt.astimezone(timezone.utc),
        jd_utc=jd,
        leap_seconds=eop.leap_seconds,
        dut1_seconds=eop.dut1_seconds,
    )


def instant_from_jd(jd_utc: float, eop: Optional[EarthOrientation] = None) -> TimeInstant:
    eop = DEFAULT_EOP if eop is None else eop
    return TimeInstant(
        utc=jd_to_datetime_utc(jd_utc),
        jd_utc=jd_utc,
        leap_seconds=eop.leap_seconds,
        dut1_seconds=eop.dut1_seconds,
    )


def now(eop: Optional[EarthOrientation] = None) -> TimeInstant:
    return make_instant(datetime.now(timezone.utc), eop)


# ============================================================
# Local civil time helpers
# ============================================================

def local_to_utc(dt_local: datetime, tz_offset_hours: float) -> datetime:
    """
    Local civil time -> UTC, given a fixed timezone offset (hours).
    Example: tz_offset_hours = 1 for CET.
    """
    if dt_local.tzinfo is not None:
        return dt_local.astimezone(timezone.utc)
    return (dt_local - timedelta(hours=tz_offset_hours)).replace(tzinfo=timezone.utc)


def utc_to_local(dt_utc: datetime, tz_offset_hours: float) -> datetime:
    """
    UTC -> local civil time (naive), given a fixed timezone offset (hours).
    """
    if dt_utc.tzinfo is None:
        raise ValueError("dt_utc must be timezone-aware UTC")
    return (dt_utc.astimezone(timezone.utc) + timedelta(hours=tz_offset_hours)).replace(tzinfo=None)
