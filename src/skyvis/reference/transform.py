"""
skyvis.reference.transform
--------------------------
Catalog (ICRS/J2000) equatorial positions -> apparent place of date -> horizontal
coordinates for an ObserverFrame.

Reduced accuracy: precession (IAU 1976), four-term nutation and annual aberration.
Light deflection, parallax of stars and proper motion are ignored; the result is
good to a few arcseconds, far below what a visibility table displays.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from ..core.types import EquatorialPosition, HorizontalPosition
from . import astro_args as aa
from . import refraction
from .observer import ObserverFrame
from .solar import solar_position

# Constant of aberration (20.49552")
KAPPA_RAD = aa.arcsec_to_rad(20.49552)

_EPS = 1e-12


def aberration(v: aa.Vector, jd_tt: float, eps_deg: float) -> aa.Vector:
    """
    Annual aberration, first order: shift the unit vector toward Earth's orbital velocity,
    which points at ecliptic longitude (sun - 90 deg) for a circular orbit.
    """
    sun = math.radians(solar_position(jd_tt).L_true_deg)
    eps = math.radians(eps_deg)
    vx = math.sin(sun)
    vy = -math.cos(sun) * math.cos(eps)
    vz = -math.cos(sun) * math.sin(eps)
    w = (v[0] + KAPPA_RAD * vx, v[1] + KAPPA_RAD * vy, v[2] + KAPPA_RAD * vz)
    n = math.sqrt(w[0] * w[0] + w[1] * w[1] + w[2] * w[2])
    return (w[0] / n, w[1] / n, w[2] / n)


def apparent_place(position: EquatorialPosition, jd_tt: float) -> EquatorialPosition:
    """Mean J2000 catalog place -> apparent place (true equator and equinox of date)."""
    T = aa.T_centuries(jd_tt)
    nut = aa.nutation(T)
    M = aa.matmul(aa.nutation_matrix(nut), aa.precession_matrix(T))
    v = aa.apply_matrix(M, aa.radec_to_vector(position.ra_deg, position.dec_deg))
    v = aberration(v, jd_tt, nut.eps_true_deg)
    ra, dec = aa.vector_to_radec(v)
    return EquatorialPosition.from_degrees(ra, dec)


def hour_angle_deg(frame: ObserverFrame, ra_deg: float) -> float:
    """H = LST - RA, normalized to [-180, 180)."""
    return aa.wrap180(frame.lst_deg - ra_deg)


def equatorial_to_horizontal(ha_deg: float, dec_deg: float, lat_deg: float) -> Tuple[float, float]:
    """
    (hour angle, declination) -> (azimuth from North eastward, altitude), degrees.

      sin(alt) = sin(dec) sin(lat) + cos(dec) cos(lat) cos(H)
      sin(az)  = -sin(H) cos(dec) / cos(alt)
      cos(az)  = (sin(dec) - sin(alt) sin(lat)) / (cos(alt) cos(lat))

    At a pole or with the target at zenith/nadir the azimuth is undefined and
    reported as 0.
    """
    H = math.radians(ha_deg)
    dec = math.radians(dec_deg)
    lat = math.radians(lat_deg)

    sin_alt = aa.clamp(math.sin(dec) * math.sin(lat) + math.cos(dec) * math.cos(lat) * math.cos(H))
    alt = math.asin(sin_alt)
    cos_alt = math.cos(alt)
    cos_lat = math.cos(lat)

    if cos_lat < _EPS or cos_alt < _EPS:
        return 0.0, math.degrees(alt)

    # both ratios share the positive denominator cos(alt) cos(lat)
    y = -math.sin(H) * math.cos(dec) * cos_lat
    x = math.sin(dec) - sin_alt * math.sin(lat)
    az = aa.wrap_deg(math.degrees(math.atan2(y, x)))
    return az, math.degrees(alt)


def horizontal_of_date(
    frame: ObserverFrame,
    apparent: EquatorialPosition,
    *,
    refract: bool = False,
) -> HorizontalPosition:
    """Horizontal coordinates of a position already expressed as an apparent place of date."""
    ha = hour_angle_deg(frame, apparent.ra_deg)
    az, alt = equatorial_to_horizontal(ha, apparent.dec_deg, frame.lat_deg)
    if refract:
        alt = refraction.apparent_altitude_deg(alt)
    return HorizontalPosition(az_deg=az, alt_deg=alt)


def to_horizontal(
    frame: ObserverFrame,
    position: EquatorialPosition,
    *,
    refract: bool = False,
) -> Optional[HorizontalPosition]:
    """
    Catalog position -> horizontal coordinates at the frame's instant.
    Returns None when the position is unknown.
    """
    if not position.is_known:
        return None
    app = apparent_place(position, frame.instant.jd_tt)
    return horizontal_of_date(frame, app, refract=refract)
