# reference/refraction.py

from __future__ import annotations

import math
from typing import Callable

STANDARD_PRESSURE_HPA = 1010.0
STANDARD_TEMPERATURE_C = 10.0

# Below this altitude the empirical formulas are no longer fitted; the refraction
# fades linearly to zero over the next TAPER_WIDTH_DEG so altitudes stay continuous.
MIN_REFRACTED_ALT_DEG = -1.0
TAPER_WIDTH_DEG = 1.0


def _scale(pressure_hpa: float, temperature_c: float) -> float:
    return (pressure_hpa / 1010.0) * (283.0 / (273.0 + temperature_c))


def _saemundsson_arcmin(h: float) -> float:
    return 1.02 / math.tan(math.radians(h + 10.3 / (h + 5.11)))


def _bennett_arcmin(h0: float) -> float:
    return 1.0 / math.tan(math.radians(h0 + 7.31 / (h0 + 4.4)))


def _tapered_arcmin(formula: Callable[[float], float], alt_deg: float) -> float:
    if alt_deg >= 90.0 or alt_deg <= MIN_REFRACTED_ALT_DEG - TAPER_WIDTH_DEG:
        return 0.0
    if alt_deg >= MIN_REFRACTED_ALT_DEG:
        return formula(alt_deg)
    weight = (alt_deg - (MIN_REFRACTED_ALT_DEG - TAPER_WIDTH_DEG)) / TAPER_WIDTH_DEG
    return formula(MIN_REFRACTED_ALT_DEG) * weight


def refraction_from_true_deg(
    alt_true_deg: float,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
    temperature_c: float = STANDARD_TEMPERATURE_C,
) -> float:
    """
    Saemundsson (1986), Meeus (16.4): refraction (degrees) to add to a true altitude.
    Negligible (<4') above 15 deg, about 0.5 deg at the horizon. Between -1 and -2 deg
    the value at -1 deg is scaled down linearly; zero below -2 deg.
    """
    r_arcmin = _tapered_arcmin(_saemundsson_arcmin, alt_true_deg)
    return max(0.0, r_arcmin * _scale(pressure_hpa, temperature_c) / 60.0)


def refraction_from_apparent_deg(
    alt_app_deg: float,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
    temperature_c: float = STANDARD_TEMPERATURE_C,
) -> float:
    """
    Bennett (1982), Meeus (16.3): refraction (degrees) to subtract from an apparent altitude.
    Tapered below -1 deg the same way as refraction_from_true_deg.
    """
    r_arcmin = _tapered_arcmin(_bennett_arcmin, alt_app_deg)
    return max(0.0, r_arcmin * _scale(pressure_hpa, temperature_c) / 60.0)


def apparent_altitude_deg(alt_true_deg: float) -> float:
    return alt_true_deg + refraction_from_true_deg(alt_true_deg)


def true_altitude_deg(alt_app_deg: float) -> float:
    return alt_app_deg - refraction_from_apparent_deg(alt_app_deg)


def standard_horizon_altitude(apparent_deg: float = 0.0) -> float:
    """
    Geometric altitude at which a point source appears at `apparent_deg` under standard
    refraction; about -0.575 deg for the apparent horizon.
    """
    return true_altitude_deg(apparent_deg)
