from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, TypeVar

from .errors import ConfigError
from .types import GeodeticLocation, LunarState

T = TypeVar("T")


@dataclass(frozen=True)
class EarthOrientation:
    """
    Earth orientation corrections threaded into every TimeInstant.

    These drift: leap_seconds (TAI - UTC) changes when IERS announces a leap second,
    dut1_seconds (UT1 - UTC) is published weekly in IERS Bulletin A. The defaults are
    the values current when the reference tables were taken and are only approximate.
    """
    leap_seconds: int = 37
    dut1_seconds: float = 0.042
    xp_mas: float = 0.0     # polar motion x, milliarcseconds
    yp_mas: float = 0.0     # polar motion y, milliarcseconds

    def __post_init__(self) -> None:
        if abs(self.dut1_seconds) > 0.9:
            raise ConfigError(f"|UT1-UTC| must stay below 0.9 s, got {self.dut1_seconds}")


DEFAULT_EOP = EarthOrientation()


@dataclass(frozen=True)
class Settings:
    latitude_deg: float = 0.0
    longitude_deg: float = 0.0
    elevation_m: float = 60.0
    moon_illumination_warning_percent: int = 75
    moon_separation_warning_deg: int = 60
    eop: EarthOrientation = field(default_factory=EarthOrientation)

    @property
    def location(self) -> GeodeticLocation:
        return GeodeticLocation(self.latitude_deg, self.longitude_deg, self.elevation_m)

    # Thresholds are display policy; the engine never consults them.
    def illumination_warning(self, state: LunarState) -> bool:
        return state.illuminated_fraction > self.moon_illumination_warning_percent

    def separation_warning(self, separation_deg: Optional[float]) -> bool:
        return separation_deg is not None and separation_deg < self.moon_separation_warning_deg

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from SKYVIS_* variables; unset variables keep the defaults.
        """
        env = os.environ if environ is None else environ
        d = cls()
        e = d.eop
        try:
            eop = EarthOrientation(
                leap_seconds=_get(env, "SKYVIS_LEAP_SECONDS", int, e.leap_seconds),
                dut1_seconds=_get(env, "SKYVIS_DUT1", float, e.dut1_seconds),
                xp_mas=_get(env, "SKYVIS_XP_MAS", float, e.xp_mas),
                yp_mas=_get(env, "SKYVIS_YP_MAS", float, e.yp_mas),
            )
            s = cls(
                latitude_deg=_get(env, "SKYVIS_LATITUDE", float, d.latitude_deg),
                longitude_deg=_get(env, "SKYVIS_LONGITUDE", float, d.longitude_deg),
                elevation_m=_get(env, "SKYVIS_ELEVATION", float, d.elevation_m),
                moon_illumination_warning_percent=_get(
                    env, "SKYVIS_MOON_ILLUMINATION_WARNING", int, d.moon_illumination_warning_percent
                ),
                moon_separation_warning_deg=_get(
                    env, "SKYVIS_MOON_SEPARATION_WARNING", int, d.moon_separation_warning_deg
                ),
                eop=eop,
            )
            GeodeticLocation(s.latitude_deg, s.longitude_deg, s.elevation_m)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        return s


def _get(env: Mapping[str, str], key: str, conv: Callable[[str], T], default: T) -> T:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return conv(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{key}: cannot parse {raw!r}") from e
