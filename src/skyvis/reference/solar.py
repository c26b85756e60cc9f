# reference/solar.py

from __future__ import annotations

import math
from dataclasses import dataclass

from . import astro_args as aa

AU_KM = 149597870.7


@dataclass(frozen=True)
class SolarCoordinates:
    """Geocentric solar coordinates (degrees, AU)."""
    L_true_deg: float
    L_app_deg: float
    distance_au: float


def solar_position(jd_tt: float) -> SolarCoordinates:
    """
    True and apparent solar longitude plus Sun-Earth distance for a given JD(TT),
    truncated series accurate to ~0.01 deg (Meeus ch. 25).
    """
    T = aa.T_centuries(jd_tt)
    sm = aa.solar_mean_elements(T)
    fa = aa.fundamental_args(T)

    M_rad = math.radians(sm.M_deg)

    # Equation of center
    C_sun = (
        (1.914602 - 0.004817 * T - 0.000014 * T * T) * math.sin(M_rad)
        + (0.019993 - 0.000101 * T) * math.sin(2.0 * M_rad)
        + 0.000289 * math.sin(3.0 * M_rad)
    )

    L_true = aa.wrap_deg(sm.L0_deg + C_sun)

    # Apparent longitude: aberration and leading nutation
    Omega_rad = math.radians(fa.Omega_deg)
    L_app = aa.wrap_deg(L_true - 0.00569 - 0.00478 * math.sin(Omega_rad))

    nu = M_rad + math.radians(C_sun)
    R = 1.000001018 * (1.0 - sm.e * sm.e) / (1.0 + sm.e * math.cos(nu))

    return SolarCoordinates(L_true_deg=L_true, L_app_deg=L_app, distance_au=R)
