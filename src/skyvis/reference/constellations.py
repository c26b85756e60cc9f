"""
skyvis.reference.constellations
-------------------------------
Constellation stick figures for the sky plot.

Line data is a headerless CSV with five columns:
  name, ra1_deg, dec1_deg, ra2_deg, dec2_deg
Right ascension is in *degrees* here (unlike catalog objects, which use hours).
Rows with the wrong arity or non-numeric fields are skipped.

The package ships a small snapshot:
  skyvis/reference/data/constellations.csv
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import csv
import logging

from ..core.types import EquatorialPosition, HorizontalPosition
from .observer import ObserverFrame
from .separation import separation_deg
from .transform import to_horizontal

logger = logging.getLogger(__name__)

_DEFAULT_DATA = Path(__file__).resolve().parent / "data" / "constellations.csv"


@dataclass(frozen=True)
class ConstellationLine:
    name: str
    ra1_deg: float
    dec1_deg: float
    ra2_deg: float
    dec2_deg: float

    @property
    def ends(self) -> Tuple[EquatorialPosition, EquatorialPosition]:
        return (
            EquatorialPosition.from_degrees(self.ra1_deg, self.dec1_deg),
            EquatorialPosition.from_degrees(self.ra2_deg, self.dec2_deg),
        )

    @property
    def length_deg(self) -> float:
        return separation_deg(self.ra1_deg, self.dec1_deg, self.ra2_deg, self.dec2_deg)


@dataclass(frozen=True)
class ProjectedSegment:
    name: str
    start: HorizontalPosition
    end: HorizontalPosition


def parse_constellation_rows(rows: Iterable[Sequence[str]]) -> List[ConstellationLine]:
    lines: List[ConstellationLine] = []
    for r in rows:
        if len(r) != 5:
            continue
        try:
            ra1, dec1, ra2, dec2 = (float(x) for x in r[1:])
        except ValueError:
            continue
        if not (-90.0 <= dec1 <= 90.0 and -90.0 <= dec2 <= 90.0):
            continue
        lines.append(ConstellationLine(r[0].strip(), ra1, dec1, ra2, dec2))
    return lines


def load_constellation_lines(path: Optional[str | Path] = None) -> List[ConstellationLine]:
    """Load line segments from `path`, or the bundled snapshot when omitted."""
    if path is None:
        path = _DEFAULT_DATA
    with open(path, "r", encoding="utf-8", newline="") as f:
        lines = parse_constellation_rows(csv.reader(f))
    logger.debug("loaded %d constellation segments", len(lines))
    return lines


def project_lines(frame: ObserverFrame, lines: Iterable[ConstellationLine]) -> List[ProjectedSegment]:
    """
    Project segments to horizontal coordinates. Segments with both ends below the
    horizon are dropped; an end below the horizon is clamped to altitude 0.
    """
    out: List[ProjectedSegment] = []
    for line in lines:
        p1, p2 = line.ends
        h1 = to_horizontal(frame, p1)
        h2 = to_horizontal(frame, p2)
        if h1 is None or h2 is None:
            continue
        if h1.alt_deg < 0.0 and h2.alt_deg < 0.0:
            continue
        out.append(ProjectedSegment(
            name=line.name,
            start=HorizontalPosition(h1.az_deg, max(0.0, h1.alt_deg)),
            end=HorizontalPosition(h2.az_deg, max(0.0, h2.alt_deg)),
        ))
    return out
