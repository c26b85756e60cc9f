from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.types import EquatorialPosition, TimeInstant
from . import astro_args as aa
from .observer import ObserverFrame
from .transform import apparent_place


@dataclass(frozen=True)
class AltitudeTrack:
    """Sampled path of a target over a time span (arrays share one length)."""
    jd_utc: np.ndarray
    az_deg: np.ndarray
    alt_deg: np.ndarray

    @property
    def hours(self) -> np.ndarray:
        return (self.jd_utc - self.jd_utc[0]) * 24.0

    def max_altitude(self) -> tuple[float, float]:
        """(jd_utc, altitude) of the highest sample."""
        i = int(np.argmax(self.alt_deg))
        return float(self.jd_utc[i]), float(self.alt_deg[i])


def altitude_track(
    frame: ObserverFrame,
    position: EquatorialPosition,
    *,
    hours: float = 24.0,
    step_minutes: float = 10.0,
) -> Optional[AltitudeTrack]:
    """
    Geometric altitude/azimuth sampled from the frame's instant over `hours`.
    The apparent place is computed once at the start. None for unknown positions.
    """
    if not position.is_known:
        return None
    inst: TimeInstant = frame.instant
    app = apparent_place(position, inst.jd_tt)

    n = int(np.floor(hours * 60.0 / step_minutes)) + 1
    jd = inst.jd_utc + np.arange(n) * (step_minutes / 1440.0)

    # GAST advances at the sidereal rate; anchor it on the frame's own value
    lst = np.radians((frame.lst_deg + aa.SIDEREAL_DEG_PER_DAY * (jd - inst.jd_utc)) % 360.0)
    H = lst - np.radians(app.ra_deg)
    dec = np.radians(app.dec_deg)
    lat = np.radians(frame.lat_deg)

    sin_alt = np.clip(np.sin(dec) * np.sin(lat) + np.cos(dec) * np.cos(lat) * np.cos(H), -1.0, 1.0)
    alt = np.arcsin(sin_alt)
    y = -np.sin(H) * np.cos(dec) * np.cos(lat)
    x = np.sin(dec) - sin_alt * np.sin(lat)
    az = np.degrees(np.arctan2(y, x)) % 360.0
    degenerate = (np.cos(alt) < 1e-12) | (np.cos(lat) < 1e-12)
    az = np.where(degenerate, 0.0, az)

    return AltitudeTrack(jd_utc=jd, az_deg=az, alt_deg=np.degrees(alt))
