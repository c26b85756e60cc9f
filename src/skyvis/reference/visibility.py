"""
skyvis.reference.visibility
---------------------------
Transit, rise and set of a fixed (sidereal) target for one observer.

All events are solved in closed form from the hour-angle relation: the target's
apparent place is taken at the reference instant and held fixed over the
following sidereal day (the drift from precession is a fraction of a second).
Every returned event is the next occurrence strictly after the reference instant.

Rise/set is a tagged outcome:
  Crossing     -- cos(H0) in [-1, 1]
  AlwaysAbove  -- cos(H0) < -1, circumpolar
  NeverRises   -- cos(H0) > 1
"""

from __future__ import annotations

import logging
import math
from typing import Literal

from ..core.types import (
    UNAVAILABLE,
    AlwaysAbove,
    Crossing,
    EquatorialPosition,
    EventTime,
    NeverRises,
    ObjectVisibility,
    RiseSet,
    VisibilityResult,
)
from . import astro_args as aa
from . import refraction
from . import time_scales as ts
from .observer import ObserverFrame
from .transform import apparent_place, hour_angle_deg, horizontal_of_date

logger = logging.getLogger(__name__)

Rounding = Literal["truncate", "nearest"]

_EPS = 1e-12


def next_after(jd_event: float, jd_ref: float, period: float = aa.SIDEREAL_DAY) -> float:
    """Shift a periodic event by whole periods so that it falls in (jd_ref, jd_ref + period]."""
    k = math.floor((jd_ref - jd_event) / period) + 1
    return jd_event + k * period


def event_time(jd_utc: float, rounding: Rounding = "truncate") -> EventTime:
    return EventTime(jd_utc=jd_utc, utc=ts.jd_to_minute_utc(jd_utc, rounding))


def next_transit_jd(frame: ObserverFrame, ra_deg: float) -> float:
    """
    JD(UTC) of the next upper culmination: local sidereal time equals RA.
    """
    jd_ref = frame.instant.jd_utc
    ha = hour_angle_deg(frame, ra_deg)
    return next_after(jd_ref - ha / aa.SIDEREAL_DEG_PER_DAY, jd_ref)


def crossing_altitude_deg(horizon_deg: float = 0.0, refract: bool = True) -> float:
    """Geometric altitude at which the target is considered to cross `horizon_deg`."""
    return refraction.true_altitude_deg(horizon_deg) if refract else horizon_deg


def semi_diurnal_arc_cos(lat_deg: float, dec_deg: float, alt0_deg: float) -> float:
    """
    cos(H0) = (sin(alt0) - sin(lat) sin(dec)) / (cos(lat) cos(dec)), unclamped.

    When the denominator vanishes (observer or target at a pole) the altitude is
    constant; the result is pushed to -inf (always above) or +inf (never rises).
    """
    lat = math.radians(lat_deg)
    dec = math.radians(dec_deg)
    num = math.sin(math.radians(alt0_deg)) - math.sin(lat) * math.sin(dec)
    den = math.cos(lat) * math.cos(dec)
    if den < _EPS:
        return -math.inf if num < 0.0 else math.inf
    return num / den


def rise_set(
    frame: ObserverFrame,
    apparent: EquatorialPosition,
    jd_transit: float,
    *,
    alt0_deg: float,
    rounding: Rounding = "truncate",
) -> RiseSet:
    cos_h0 = semi_diurnal_arc_cos(frame.lat_deg, apparent.dec_deg, alt0_deg)

    if cos_h0 < -1.0:
        logger.debug("dec %.4f always above %.3f deg at lat %.4f", apparent.dec_deg, alt0_deg, frame.lat_deg)
        return AlwaysAbove()
    if cos_h0 > 1.0:
        logger.debug("dec %.4f never rises above %.3f deg at lat %.4f", apparent.dec_deg, alt0_deg, frame.lat_deg)
        return NeverRises()

    h0 = math.degrees(math.acos(cos_h0))
    dt = h0 / aa.SIDEREAL_DEG_PER_DAY
    jd_ref = frame.instant.jd_utc
    jd_rise = next_after(jd_transit - dt, jd_ref)
    jd_set = next_after(jd_transit + dt, jd_ref)
    return Crossing(
        rise=event_time(jd_rise, rounding),
        set=event_time(jd_set, rounding),
        semi_arc_deg=h0,
    )


def compute_visibility(
    frame: ObserverFrame,
    position: EquatorialPosition,
    *,
    horizon_deg: float = 0.0,
    refract: bool = True,
    rounding: Rounding = "truncate",
) -> VisibilityResult:
    """
    Transit/rise/set after the frame's instant plus the current horizontal position.

    `refract` only moves the horizon-crossing threshold; the reported altitude is
    geometric, like constellation lines and altitude tracks.

    Unknown coordinates give UNAVAILABLE instead of raising.
    """
    if not position.is_known:
        logger.debug("visibility requested for unknown coordinates")
        return UNAVAILABLE

    app = apparent_place(position, frame.instant.jd_tt)
    horizontal = horizontal_of_date(frame, app)

    jd_transit = next_transit_jd(frame, app.ra_deg)
    rs = rise_set(
        frame,
        app,
        jd_transit,
        alt0_deg=crossing_altitude_deg(horizon_deg, refract),
        rounding=rounding,
    )

    return ObjectVisibility(
        transit=event_time(jd_transit, rounding),
        rise_set=rs,
        horizontal=horizontal,
        apparent=app,
    )


def culmination_altitude_deg(lat_deg: float, dec_deg: float) -> float:
    """Geometric altitude at upper culmination."""
    return 90.0 - abs(lat_deg - dec_deg)
