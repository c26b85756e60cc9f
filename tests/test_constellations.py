# tests/test_constellations.py

from datetime import datetime, timezone

import pytest

from skyvis.core.types import GeodeticLocation
from skyvis.reference.constellations import (
    ConstellationLine,
    load_constellation_lines,
    parse_constellation_rows,
    project_lines,
)
from skyvis.reference.observer import make_frame


@pytest.fixture
def bonn_frame():
    return make_frame(GeodeticLocation(50.7374, 7.0982), datetime(2025, 1, 15, 18, tzinfo=timezone.utc))


def test_parse_skips_bad_rows():
    rows = [
        ["Ori", "88.79", "7.41", "81.28", "6.35"],
        ["Ori", "88.79", "7.41", "81.28"],           # arity
        ["Ori", "x", "7.41", "81.28", "6.35"],       # not a number
        ["Ori", "88.79", "97.0", "81.28", "6.35"],   # dec out of range
        [],
        [" Cas ", "2.29", "59.15", "10.13", "56.54"],
    ]
    lines = parse_constellation_rows(rows)
    assert [ln.name for ln in lines] == ["Ori", "Cas"]
    assert lines[1] == ConstellationLine("Cas", 2.29, 59.15, 10.13, 56.54)


def test_bundled_snapshot():
    lines = load_constellation_lines()
    assert len(lines) == 22
    assert {ln.name for ln in lines} == {"Ori", "UMa", "Cas", "Cyg"}
    # RA is stored in degrees
    a, b = lines[0].ends
    assert a.ra_hours == pytest.approx(88.7929 / 15.0)
    # Betelgeuse - Bellatrix
    assert lines[0].length_deg == pytest.approx(7.5, abs=0.2)


def test_load_from_file(tmp_path):
    p = tmp_path / "lines.csv"
    p.write_text("Lyr,279.2347,38.7837,281.1931,37.6051\nbroken,row\n", encoding="utf-8")
    lines = load_constellation_lines(p)
    assert len(lines) == 1
    assert lines[0].name == "Lyr"


def test_projection_keeps_circumpolar_figures(bonn_frame):
    lines = load_constellation_lines()
    segs = project_lines(bonn_frame, lines)
    names = [s.name for s in segs]
    # never set at 50.7 N
    assert names.count("Cas") == 4
    assert names.count("UMa") == 7
    for s in segs:
        assert 0.0 <= s.start.alt_deg <= 90.0
        assert 0.0 <= s.end.alt_deg <= 90.0
        assert 0.0 <= s.start.az_deg < 360.0


def test_projection_drops_segments_below_horizon():
    # from the south pole nothing north of the equator is ever up
    frame = make_frame(GeodeticLocation(-90.0, 0.0), datetime(2025, 1, 15, 18, tzinfo=timezone.utc))
    segs = project_lines(frame, load_constellation_lines())
    assert {s.name for s in segs} <= {"Ori"}
    # Orion straddles the equator: kept segments are clamped at the horizon
    assert segs
    assert any(s.start.alt_deg == 0.0 or s.end.alt_deg == 0.0 for s in segs)
