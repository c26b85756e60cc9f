# tests/test_api.py

import logging
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

import skyvis
from skyvis import (
    UNAVAILABLE,
    AlwaysAbove,
    EquatorialPosition,
    LunarState,
    ObjectVisibility,
    Settings,
    Target,
    Unavailable,
)
from skyvis.reference import time_scales as ts
from skyvis.reference.separation import separation
from skyvis.reference.visibility import compute_visibility as real_compute_visibility

BONN = Settings(latitude_deg=50.7374, longitude_deg=7.0982, elevation_m=60.0)
WHEN = datetime(2025, 1, 15, 18, 0, tzinfo=timezone.utc)

TARGETS = [
    Target("Capella-ish", EquatorialPosition(5.5, 45.0)),
    Target("Regulus-ish", EquatorialPosition(10.0, 13.0)),
    Target("no coords", EquatorialPosition.from_optional(None, None)),
    Target("Canopus-ish", EquatorialPosition(6.4, -52.7)),
    Target("Polaris", EquatorialPosition(2.53, 89.26)),
]


def test_object_visibility():
    info = skyvis.object_visibility(5.5, 45.0, settings=BONN, when=WHEN)
    assert isinstance(info, ObjectVisibility)
    assert isinstance(info.rise_set, AlwaysAbove)

    assert skyvis.object_visibility(None, 45.0, settings=BONN, when=WHEN) is UNAVAILABLE
    assert skyvis.object_visibility(5.5, None, settings=BONN, when=WHEN) is UNAVAILABLE


def test_frame_for_accepts_instant():
    inst = ts.make_instant(WHEN, BONN.eop)
    frame = skyvis.frame_for(BONN, inst)
    assert frame.instant is inst
    assert frame.location == BONN.location


@pytest.mark.parametrize("workers", [1, 4, None])
def test_visibility_table_keeps_order(workers):
    rows = skyvis.visibility_table(TARGETS, settings=BONN, when=WHEN, max_workers=workers)
    assert [r.target.name for r in rows] == [t.name for t in TARGETS]
    assert isinstance(rows[2].result, Unavailable)
    assert all(isinstance(r.result, ObjectVisibility) for i, r in enumerate(rows) if i != 2)


def test_visibility_table_matches_single_queries():
    rows = skyvis.visibility_table(TARGETS[:2], settings=BONN, when=WHEN)
    for row in rows:
        p = row.target.position
        assert row.result == skyvis.object_visibility(p.ra_hours, p.dec_deg, settings=BONN, when=WHEN)


def test_visibility_table_isolates_failures(caplog):
    def flaky(frame, position, **kw):
        if position.dec_deg == 13.0:
            raise RuntimeError("boom")
        return real_compute_visibility(frame, position, **kw)

    with caplog.at_level(logging.WARNING, logger="skyvis.api"):
        with patch("skyvis.api.compute_visibility", side_effect=flaky):
            rows = skyvis.visibility_table(TARGETS, settings=BONN, when=WHEN, max_workers=2)

    assert isinstance(rows[1].result, Unavailable)
    assert "boom" in rows[1].result.reason
    assert isinstance(rows[0].result, ObjectVisibility)
    assert isinstance(rows[4].result, ObjectVisibility)
    assert any("Regulus-ish" in rec.getMessage() for rec in caplog.records)


def test_visibility_table_empty():
    assert skyvis.visibility_table([], settings=BONN, when=WHEN) == []


def test_sky_markers_only_above_horizon():
    rows = skyvis.visibility_table(TARGETS, settings=BONN, when=WHEN)
    markers = skyvis.sky_markers(rows)
    names = [m.name for m in markers]
    assert "Capella-ish" in names
    assert "Polaris" in names
    assert "Canopus-ish" not in names
    assert "no coords" not in names
    assert all(m.alt_deg > 0.0 for m in markers)


def test_sky_markers_use_geometric_altitude():
    # a target just below the geometric horizon would show above it once refracted
    pos = EquatorialPosition(10.0, 10.0)
    frame = skyvis.frame_for(BONN, WHEN)
    info = real_compute_visibility(frame, pos, horizon_deg=-0.3, refract=False)
    jd = info.rise_set.rise.jd_utc

    target = Target("low", pos)
    rows = skyvis.visibility_table([target], settings=BONN, when=ts.instant_from_jd(jd, BONN.eop))
    assert rows[0].result.altitude == pytest.approx(-0.3, abs=0.02)
    assert skyvis.sky_markers(rows) == []


def test_moon_state_and_separation():
    topo = skyvis.moon_state(WHEN, settings=BONN)
    geo = skyvis.moon_state(WHEN, settings=BONN, topocentric=False)
    assert isinstance(topo, LunarState)
    assert topo.position != geo.position
    assert 0.0 <= topo.illuminated_fraction <= 100.0

    assert skyvis.session_moon(WHEN, BONN) == topo

    target = EquatorialPosition(5.5, 45.0)
    assert skyvis.moon_separation(target, topo) == pytest.approx(separation(target, topo.position))
    assert skyvis.moon_separation(target, topo.position) == skyvis.moon_separation(target, topo)
    assert skyvis.moon_separation(EquatorialPosition.from_optional(None, 1.0), topo) is None


def test_constellation_segments():
    segs = skyvis.constellation_segments(settings=BONN, when=WHEN)
    assert segs
    assert all(s.start.alt_deg >= 0.0 and s.end.alt_deg >= 0.0 for s in segs)
