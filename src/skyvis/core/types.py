from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Union

SECONDS_PER_DAY = 86400.0
TT_MINUS_TAI_SECONDS = 32.184

@dataclass(frozen=True)
class GeodeticLocation:
    lat_deg: float        # geodetic latitude, north positive
    lon_deg: float        # longitude, east positive
    elev_m: float = 60.0

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat_deg <= 90.0:
            raise ValueError(f"latitude out of range [-90, 90]: {self.lat_deg}")
        if not -180.0 <= self.lon_deg <= 180.0:
            raise ValueError(f"longitude out of range [-180, 180]: {self.lon_deg}")

@dataclass(frozen=True)
class EquatorialPosition:
    """RA in hours, Dec in degrees. Both None means the coordinates are unknown."""
    ra_hours: Optional[float]
    dec_deg: Optional[float]

    def __post_init__(self) -> None:
        if self.ra_hours is not None and not 0.0 <= self.ra_hours <= 24.0:
            raise ValueError(f"RA out of range [0, 24] h: {self.ra_hours}")
        if self.dec_deg is not None and not -90.0 <= self.dec_deg <= 90.0:
            raise ValueError(f"Dec out of range [-90, 90] deg: {self.dec_deg}")

    @property
    def is_known(self) -> bool:
        return self.ra_hours is not None and self.dec_deg is not None

    @property
    def ra_deg(self) -> float:
        if self.ra_hours is None:
            raise ValueError("RA is unknown")
        return 15.0 * self.ra_hours

    @classmethod
    def from_degrees(cls, ra_deg: float, dec_deg: float) -> "EquatorialPosition":
        return cls(ra_hours=(ra_deg % 360.0) / 15.0, dec_deg=dec_deg)

    @classmethod
    def from_optional(cls, ra_hours: Optional[float], dec_deg: Optional[float]) -> "EquatorialPosition":
        """Repository rows may carry either value as NULL; one missing makes both unknown."""
        if ra_hours is None or dec_deg is None:
            return UNKNOWN_POSITION
        return cls(ra_hours=float(ra_hours), dec_deg=float(dec_deg))

UNKNOWN_POSITION = EquatorialPosition(ra_hours=None, dec_deg=None)

@dataclass(frozen=True)
class TimeInstant:
    utc: datetime           # timezone-aware UTC
    jd_utc: float
    leap_seconds: int       # TAI - UTC
    dut1_seconds: float     # UT1 - UTC

    # scale offsets live in reference.time_scales, which imports this module
    @property
    def jd_tai(self) -> float:
        from ..reference.time_scales import apply_leap_second_offset
        return apply_leap_second_offset(self.jd_utc, self.leap_seconds)

    @property
    def jd_tt(self) -> float:
        from ..reference.time_scales import jd_utc_to_jd_tt
        return jd_utc_to_jd_tt(self.jd_utc, self.leap_seconds)

    @property
    def jd_ut1(self) -> float:
        from ..reference.time_scales import apply_dut1_offset
        return apply_dut1_offset(self.jd_utc, self.dut1_seconds)

@dataclass(frozen=True)
class HorizontalPosition:
    az_deg: float   # from North, increasing eastward, [0, 360)
    alt_deg: float

    @property
    def is_above_horizon(self) -> bool:
        return self.alt_deg > 0.0

@dataclass(frozen=True)
class EventTime:
    jd_utc: float
    utc: datetime   # minute resolution, timezone-aware UTC

    @property
    def hhmm(self) -> str:
        return self.utc.strftime("%H:%M")

@dataclass(frozen=True)
class Crossing:
    rise: EventTime
    set: EventTime
    semi_arc_deg: float     # hour angle of the horizon crossing
    kind: Literal["crossing"] = "crossing"

@dataclass(frozen=True)
class AlwaysAbove:
    kind: Literal["always_above"] = "always_above"

@dataclass(frozen=True)
class NeverRises:
    kind: Literal["never_rises"] = "never_rises"

RiseSet = Union[Crossing, AlwaysAbove, NeverRises]

@dataclass(frozen=True)
class Unavailable:
    reason: str = "unknown coordinates"
    kind: Literal["unavailable"] = "unavailable"

UNAVAILABLE = Unavailable()

@dataclass(frozen=True)
class ObjectVisibility:
    transit: EventTime
    rise_set: RiseSet
    horizontal: HorizontalPosition
    apparent: EquatorialPosition
    kind: Literal["visibility"] = "visibility"

    @property
    def rise(self) -> Optional[EventTime]:
        return self.rise_set.rise if isinstance(self.rise_set, Crossing) else None

    @property
    def set(self) -> Optional[EventTime]:
        return self.rise_set.set if isinstance(self.rise_set, Crossing) else None

    @property
    def azimuth(self) -> float:
        return self.horizontal.az_deg

    @property
    def altitude(self) -> float:
        return self.horizontal.alt_deg

@dataclass(frozen=True)
class LunarState:
    illuminated_fraction: float     # percent, [0, 100]
    position: EquatorialPosition    # catalog frame (J2000), comparable with target positions
    apparent: EquatorialPosition    # true equator and equinox of date
    phase_angle_deg: float
    elongation_deg: float
    distance_km: float
    waxing: bool

VisibilityResult = Union[ObjectVisibility, Unavailable]
