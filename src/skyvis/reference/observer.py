"""
skyvis.reference.observer
-------------------------
A topocentric observing site pinned to one time instant. Every position
calculation is made relative to an ObserverFrame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime
from functools import cached_property
from typing import Optional

from ..core.config import DEFAULT_EOP, EarthOrientation
from ..core.types import GeodeticLocation, TimeInstant
from . import astro_args as aa
from . import time_scales as ts


@dataclass(frozen=True)
class ObserverFrame:
    location: GeodeticLocation
    instant: TimeInstant
    xp_mas: float = 0.0
    yp_mas: float = 0.0

    @property
    def lat_deg(self) -> float:
        """Latitude corrected for polar motion."""
        lam = math.radians(self.location.lon_deg)
        dphi = self.xp_mas * math.cos(lam) - self.yp_mas * math.sin(lam)
        return max(-90.0, min(90.0, self.location.lat_deg + aa.mas_to_deg(dphi)))

    @property
    def lon_deg(self) -> float:
        """East longitude corrected for polar motion."""
        lam = math.radians(self.location.lon_deg)
        cphi = math.cos(math.radians(self.location.lat_deg))
        if cphi < 1e-12:
            return self.location.lon_deg
        tphi = math.sin(math.radians(self.location.lat_deg)) / cphi
        dlam = (self.xp_mas * math.sin(lam) + self.yp_mas * math.cos(lam)) * tphi
        return self.location.lon_deg + aa.mas_to_deg(dlam)

    @cached_property
    def gast_deg(self) -> float:
        return aa.gast_deg(self.instant.jd_ut1, self.instant.jd_tt)

    @property
    def lst_deg(self) -> float:
        """Local apparent sidereal time (degrees)."""
        return aa.wrap_deg(self.gast_deg + self.lon_deg)

    @property
    def lst_hours(self) -> float:
        return self.lst_deg / 15.0

    def at(self, instant: TimeInstant) -> "ObserverFrame":
        """Same site, another instant."""
        return replace(self, instant=instant)

    def at_jd(self, jd_utc: float) -> "ObserverFrame":
        i = self.instant
        return self.at(TimeInstant(
            utc=ts.jd_to_datetime_utc(jd_utc),
            jd_utc=jd_utc,
            leap_seconds=i.leap_seconds,
            dut1_seconds=i.dut1_seconds,
        ))


def make_frame(
    location: GeodeticLocation,
    when: datetime | TimeInstant,
    eop: Optional[EarthOrientation] = None,
) -> ObserverFrame:
    eop = DEFAULT_EOP if eop is None else eop
    instant = when if isinstance(when, TimeInstant) else ts.make_instant(when, eop)
    return ObserverFrame(location=location, instant=instant, xp_mas=eop.xp_mas, yp_mas=eop.yp_mas)
