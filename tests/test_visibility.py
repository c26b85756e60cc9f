# tests/test_visibility.py

import random
from datetime import datetime, timezone

import pytest

from skyvis.core.types import (
    UNAVAILABLE,
    AlwaysAbove,
    Crossing,
    EquatorialPosition,
    GeodeticLocation,
    NeverRises,
    ObjectVisibility,
)
from skyvis.reference import astro_args as aa
from skyvis.reference import refraction
from skyvis.reference import time_scales as ts
from skyvis.reference.observer import make_frame
from skyvis.reference.tracks import altitude_track
from skyvis.reference.transform import hour_angle_deg, to_horizontal
from skyvis.reference.visibility import (
    compute_visibility,
    culmination_altitude_deg,
    crossing_altitude_deg,
    event_time,
    next_after,
)

# Bonn, 2025-01-15 18:00 UTC
BONN = GeodeticLocation(50.7374, 7.0982, 60.0)
REF = datetime(2025, 1, 15, 18, 0, tzinfo=timezone.utc)
P = aa.SIDEREAL_DAY


@pytest.fixture
def frame():
    return make_frame(BONN, REF)


def _in_window(jd, frame):
    ref = frame.instant.jd_utc
    return ref < jd <= ref + P + 1e-12


def test_next_after_is_strictly_after():
    assert next_after(10.0, 10.0, 1.0) == pytest.approx(11.0)
    assert next_after(9.3, 10.0, 1.0) == pytest.approx(10.3)
    assert next_after(12.7, 10.0, 1.0) == pytest.approx(10.7)
    assert next_after(-40.25, 10.0, 1.0) == pytest.approx(10.75)


def test_event_time_rounding():
    jd = ts.calendar_to_jd(2025, 1, 15, 10 + 30 / 60 + 59 / 3600)
    assert event_time(jd).hhmm == "10:30"
    assert event_time(jd, "nearest").hhmm == "10:31"
    assert event_time(jd).utc.tzinfo is timezone.utc


def test_circumpolar_target_at_bonn(frame):
    # Dec +45 exceeds 90 - 50.74: never sets
    info = compute_visibility(frame, EquatorialPosition(5.5, 45.0))
    assert isinstance(info, ObjectVisibility)
    assert isinstance(info.rise_set, AlwaysAbove)
    assert info.rise is None and info.set is None
    assert info.altitude > 0.0


def test_transit_is_upper_culmination(frame):
    pos = EquatorialPosition(5.5, 45.0)
    info = compute_visibility(frame, pos)
    t = info.transit.jd_utc
    assert _in_window(t, frame)

    # LST - RA ~ 0 at 21:21 UTC
    assert info.transit.utc.date() == REF.date()
    assert "21:10" <= info.transit.hhmm <= "21:30"
    assert hour_angle_deg(frame.at_jd(t), info.apparent.ra_deg) == pytest.approx(0.0, abs=1e-3)

    alt_t = to_horizontal(frame.at_jd(t), pos).alt_deg
    assert alt_t == pytest.approx(culmination_altitude_deg(frame.lat_deg, info.apparent.dec_deg), abs=1e-3)
    for dt in (-1 / 48, 1 / 48):
        assert to_horizontal(frame.at_jd(t + dt), pos).alt_deg < alt_t

    # highest point of the day
    track = altitude_track(frame, pos, hours=24, step_minutes=5)
    jd_max, alt_max = track.max_altitude()
    assert abs(jd_max - t) * 1440.0 <= 5.0
    assert alt_max <= alt_t + 1e-4


def test_never_rises(frame):
    info = compute_visibility(frame, EquatorialPosition(5.5, -60.0))
    assert isinstance(info.rise_set, NeverRises)
    assert info.altitude < 0.0
    # transit still reported
    assert _in_window(info.transit.jd_utc, frame)


def test_unknown_position_is_unavailable(frame):
    assert compute_visibility(frame, EquatorialPosition.from_optional(None, 10.0)) is UNAVAILABLE
    assert compute_visibility(frame, EquatorialPosition(None, None)) == UNAVAILABLE


def test_rise_set_crossing(frame):
    info = compute_visibility(frame, EquatorialPosition(10.0, 10.0))
    rs = info.rise_set
    assert isinstance(rs, Crossing)
    # north of the equator from a northern site: up for more than half a day
    assert rs.semi_arc_deg > 90.0

    rise, transit, set_ = rs.rise.jd_utc, info.transit.jd_utc, rs.set.jd_utc
    for jd in (rise, transit, set_):
        assert _in_window(jd, frame)

    dt = rs.semi_arc_deg / aa.SIDEREAL_DEG_PER_DAY
    assert (transit - rise) % P == pytest.approx(dt, abs=1e-9)
    assert (set_ - transit) % P == pytest.approx(dt, abs=1e-9)

    # the geometric altitude at the crossings is the refracted horizon
    h_rise = to_horizontal(frame.at_jd(rise), EquatorialPosition(10.0, 10.0))
    h_set = to_horizontal(frame.at_jd(set_), EquatorialPosition(10.0, 10.0))
    assert h_rise.alt_deg == pytest.approx(refraction.standard_horizon_altitude(), abs=0.02)
    assert h_set.alt_deg == pytest.approx(refraction.standard_horizon_altitude(), abs=0.02)
    assert h_rise.az_deg < 180.0 < h_set.az_deg


def test_event_ordering_random_targets(frame):
    random.seed(42)
    for _ in range(200):
        pos = EquatorialPosition(random.uniform(0.0, 24.0), random.uniform(-35.0, 35.0))
        info = compute_visibility(frame, pos)
        rs = info.rise_set
        assert isinstance(rs, Crossing)
        rise, transit, set_ = rs.rise.jd_utc, info.transit.jd_utc, rs.set.jd_utc
        assert all(_in_window(jd, frame) for jd in (rise, transit, set_))
        # cyclic order rise -> transit -> set
        a = (transit - rise) % P
        b = (set_ - transit) % P
        assert a == pytest.approx(b, abs=1e-9)
        assert 0.0 < a < P / 2.0
        # minute-resolution times never run ahead of the exact event
        assert rs.rise.utc <= ts.jd_to_datetime_utc(rise)


def test_horizon_and_refraction_options(frame):
    pos = EquatorialPosition(5.5, 45.0)
    # lower culmination ~ 5.7 deg, so a 30 deg horizon is crossed
    info = compute_visibility(frame, pos, horizon_deg=30.0)
    assert isinstance(info.rise_set, Crossing)

    pos = EquatorialPosition(10.0, 10.0)
    plain = compute_visibility(frame, pos, refract=False)
    refr = compute_visibility(frame, pos)
    assert plain.rise_set.semi_arc_deg < refr.rise_set.semi_arc_deg
    assert crossing_altitude_deg(0.0, refract=False) == 0.0
    assert plain.altitude == refr.altitude


def test_polar_observer():
    pole = make_frame(GeodeticLocation(90.0, 0.0), REF)
    assert isinstance(compute_visibility(pole, EquatorialPosition(3.0, 10.0)).rise_set, AlwaysAbove)
    assert isinstance(compute_visibility(pole, EquatorialPosition(3.0, -10.0)).rise_set, NeverRises)
    info = compute_visibility(pole, EquatorialPosition(3.0, 10.0), refract=False)
    assert info.azimuth == 0.0
    assert info.altitude == pytest.approx(info.apparent.dec_deg, abs=1e-9)


def test_equatorial_observer_half_day_arcs():
    eq = make_frame(GeodeticLocation(0.0, 0.0), REF)
    info = compute_visibility(eq, EquatorialPosition(7.0, 30.0), refract=False)
    assert info.rise_set.semi_arc_deg == pytest.approx(90.0, abs=1e-9)
