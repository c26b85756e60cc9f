from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Union

from .core.config import Settings
from .core.types import (
    EquatorialPosition,
    LunarState,
    TimeInstant,
    Unavailable,
    VisibilityResult,
)
from .reference import time_scales as ts
from .reference.constellations import ProjectedSegment, load_constellation_lines, project_lines
from .reference.lunar import compute_moon_state
from .reference.observer import ObserverFrame, make_frame
from .reference.separation import separation
from .reference.visibility import Rounding, compute_visibility

logger = logging.getLogger(__name__)

When = Union[datetime, TimeInstant, None]


@dataclass(frozen=True)
class Target:
    name: str
    position: EquatorialPosition


@dataclass(frozen=True)
class VisibilityRow:
    target: Target
    result: VisibilityResult


@dataclass(frozen=True)
class Marker:
    name: str
    az_deg: float
    alt_deg: float


def _settings(settings: Optional[Settings]) -> Settings:
    return Settings.from_env() if settings is None else settings


def frame_for(settings: Optional[Settings] = None, when: When = None) -> ObserverFrame:
    s = _settings(settings)
    if when is None:
        when = ts.now(s.eop)
    return make_frame(s.location, when, s.eop)


def object_visibility(
    ra_hours: Optional[float],
    dec_deg: Optional[float],
    *,
    settings: Optional[Settings] = None,
    when: When = None,
    horizon_deg: float = 0.0,
    refract: bool = True,
    rounding: Rounding = "truncate",
) -> VisibilityResult:
    """Visibility of one catalog object; either coordinate may be None (unknown)."""
    frame = frame_for(settings, when)
    return compute_visibility(
        frame,
        EquatorialPosition.from_optional(ra_hours, dec_deg),
        horizon_deg=horizon_deg,
        refract=refract,
        rounding=rounding,
    )


def moon_state(
    when: When = None,
    *,
    settings: Optional[Settings] = None,
    topocentric: bool = True,
) -> LunarState:
    frame = frame_for(settings, when)
    return compute_moon_state(frame.instant, frame if topocentric else None)


def session_moon(start: datetime, settings: Optional[Settings] = None) -> LunarState:
    """Moon snapshot stored with an observing session (RA in hours)."""
    return moon_state(start, settings=settings, topocentric=True)


def moon_separation(
    target: EquatorialPosition,
    moon: Union[EquatorialPosition, LunarState],
) -> Optional[float]:
    """
    Target-Moon distance in degrees; None when either side has no coordinates.
    Both sides are catalog-frame (J2000) positions.
    """
    pos = moon.position if isinstance(moon, LunarState) else moon
    return separation(target, pos)


def _one(frame: ObserverFrame, target: Target, kwargs: dict) -> VisibilityRow:
    try:
        result = compute_visibility(frame, target.position, **kwargs)
    except Exception as e:
        # one bad row must not blank the whole table
        logger.warning("visibility failed for %r: %s", target.name, e, exc_info=True)
        result = Unavailable(reason=f"computation failed: {e}")
    return VisibilityRow(target=target, result=result)


def visibility_table(
    targets: Sequence[Target],
    *,
    settings: Optional[Settings] = None,
    when: When = None,
    max_workers: Optional[int] = None,
    horizon_deg: float = 0.0,
    refract: bool = True,
    rounding: Rounding = "truncate",
) -> List[VisibilityRow]:
    """
    Per-object visibility for a table refresh. All rows share one frame (one instant);
    rows come back in input order. max_workers=1 runs sequentially.
    """
    frame = frame_for(settings, when)
    kwargs = dict(horizon_deg=horizon_deg, refract=refract, rounding=rounding)
    if not targets:
        return []
    if max_workers == 1:
        return [_one(frame, t, kwargs) for t in targets]
    with ThreadPoolExecutor(max_workers=max_workers or min(32, len(targets))) as pool:
        return list(pool.map(lambda t: _one(frame, t, kwargs), targets))


def sky_markers(rows: Sequence[VisibilityRow]) -> List[Marker]:
    """Polar-plot markers: only objects currently above the horizon."""
    out: List[Marker] = []
    for row in rows:
        r = row.result
        if isinstance(r, Unavailable):
            continue
        if r.horizontal.is_above_horizon:
            out.append(Marker(row.target.name, r.azimuth, r.altitude))
    return out


def constellation_segments(
    *,
    settings: Optional[Settings] = None,
    when: When = None,
    path: Optional[str] = None,
) -> List[ProjectedSegment]:
    frame = frame_for(settings, when)
    return project_lines(frame, load_constellation_lines(path))
