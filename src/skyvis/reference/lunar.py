# reference/lunar.py

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.types import EquatorialPosition, LunarState, TimeInstant
from . import astro_args as aa
from .observer import ObserverFrame
from .solar import AU_KM, solar_position

EARTH_RADIUS_KM = 6378.14
EARTH_FLATTENING_RATIO = 0.99664719   # b/a


@dataclass(frozen=True)
class MoonOrbit:
    """Mean lunar orbital elements of date (degrees) plus fixed shape constants."""
    mean_longitude_deg: float       # L'
    mean_anomaly_deg: float         # M'
    argument_of_latitude_deg: float # F
    node_deg: float                 # Ω
    mean_elongation_deg: float      # D
    sun_mean_anomaly_deg: float     # M
    E: float                        # Earth eccentricity factor
    T: float
    eccentricity: float = 0.054900
    inclination_deg: float = 5.145396
    mean_distance_km: float = 385000.56


@dataclass(frozen=True)
class MoonCoordinates:
    """Geocentric ecliptic coordinates of date (degrees, km)."""
    lon_deg: float
    lat_deg: float
    distance_km: float


# Periodic terms (Meeus Table 47.A, leading rows), excluding the pure M' harmonics
# that the Keplerian equation of center already supplies.
# (D, M, M', F, longitude [1e-6 deg], distance [1e-3 km])
LUNAR_LON_DIST_TERMS = (
    (2, 0, -1, 0, 1274027, -3699111),
    (2, 0, 0, 0, 658314, -2955968),
    (0, 1, 0, 0, -185116, 48888),
    (0, 0, 0, 2, -114332, -3149),
    (2, 0, -2, 0, 58793, 246158),
    (2, -1, -1, 0, 57066, -152138),
    (2, 0, 1, 0, 53322, -170733),
    (2, -1, 0, 0, 45758, -204586),
    (0, 1, -1, 0, -40923, -129620),
    (1, 0, 0, 0, -34720, 108743),
    (0, 1, 1, 0, -30383, 104755),
    (2, 0, 0, -2, 15327, 10321),
    (0, 0, 1, 2, -12528, 0),
    (0, 0, 1, -2, 10980, 79661),
    (4, 0, -1, 0, 10675, -34782),
    (4, 0, -2, 0, 8548, -21636),
    (2, 1, -1, 0, -7888, 24208),
    (2, 1, 0, 0, -6766, 30824),
    (1, 0, -1, 0, -5163, -8379),
    (1, 1, 0, 0, 4987, -16675),
    (2, -1, 1, 0, 4036, -12831),
)

# Pure anomaly terms contribute to distance only: (M' multiple, distance [1e-3 km])
LUNAR_DIST_ANOMALY_TERMS = (
    (1, -20905355),
    (2, -569925),
    (3, -23210),
)

# Latitude perturbations (Meeus Table 47.B), without the main sin F inclination term.
# (D, M, M', F, latitude [1e-6 deg])
LUNAR_LAT_TERMS = (
    (0, 0, 1, 1, 280602),
    (0, 0, 1, -1, 277693),
    (2, 0, 0, -1, 173237),
    (2, 0, -1, 1, 55413),
    (2, 0, -1, -1, 46271),
    (2, 0, 0, 1, 32573),
    (0, 0, 2, 1, 17198),
    (2, 0, 1, -1, 9266),
    (0, 0, 2, -1, 8822),
    (2, -1, 0, -1, 8216),
    (2, 0, -2, -1, 4324),
    (2, 0, 1, 1, 4200),
    (2, 1, 0, -1, -3359),
)


def moon_orbital_elements(jd_tt: float) -> MoonOrbit:
    T = aa.T_centuries(jd_tt)
    fa = aa.fundamental_args(T)
    return MoonOrbit(
        mean_longitude_deg=fa.Lp_deg,
        mean_anomaly_deg=fa.Mp_deg,
        argument_of_latitude_deg=fa.F_deg,
        node_deg=fa.Omega_deg,
        mean_elongation_deg=fa.D_deg,
        sun_mean_anomaly_deg=fa.M_deg,
        E=aa.eccentricity_factor(T),
        T=T,
    )


def _e_scale(m: int, E: float) -> float:
    if abs(m) == 1:
        return E
    if abs(m) == 2:
        return E * E
    return 1.0


def moon_geocentric(jd_tt: float) -> MoonCoordinates:
    """
    Geocentric ecliptic longitude/latitude (mean equinox of date) and distance.

    Keplerian part from the mean elements (equation of center to e^3, inclined orbit),
    then the leading solar perturbations (evection, variation, annual equation, ...).
    Closed form; accurate to roughly 1-2 arcminutes.
    """
    o = moon_orbital_elements(jd_tt)
    e = o.eccentricity
    D = math.radians(o.mean_elongation_deg)
    M = math.radians(o.sun_mean_anomaly_deg)
    Mp = math.radians(o.mean_anomaly_deg)
    F = math.radians(o.argument_of_latitude_deg)
    Lp = math.radians(o.mean_longitude_deg)

    # 1. Keplerian orbit
    center = (
        (2.0 * e - 0.25 * e ** 3) * math.sin(Mp)
        + 1.25 * e * e * math.sin(2.0 * Mp)
        + (13.0 / 12.0) * e ** 3 * math.sin(3.0 * Mp)
    )
    lon = o.mean_longitude_deg + math.degrees(center)
    lat = math.degrees(math.asin(math.sin(math.radians(o.inclination_deg)) * math.sin(F)))
    dist = o.mean_distance_km + sum(c * math.cos(k * Mp) for k, c in LUNAR_DIST_ANOMALY_TERMS) * 1e-3

    # 2. Perturbations
    lon_sum = 0.0
    dist_sum = 0.0
    for d, m, mp, f, cl, cr in LUNAR_LON_DIST_TERMS:
        arg = d * D + m * M + mp * Mp + f * F
        s = _e_scale(m, o.E)
        lon_sum += cl * s * math.sin(arg)
        dist_sum += cr * s * math.cos(arg)

    lat_sum = 0.0
    for d, m, mp, f, cb in LUNAR_LAT_TERMS:
        arg = d * D + m * M + mp * Mp + f * F
        lat_sum += cb * _e_scale(m, o.E) * math.sin(arg)

    # Venus, Jupiter and flattening additive terms
    A1 = math.radians(119.75 + 131.849 * o.T)
    A2 = math.radians(53.09 + 479264.290 * o.T)
    A3 = math.radians(313.45 + 481266.484 * o.T)
    lon_sum += 3958.0 * math.sin(A1) + 1962.0 * math.sin(Lp - F) + 318.0 * math.sin(A2)
    lat_sum += (
        -2235.0 * math.sin(Lp)
        + 382.0 * math.sin(A3)
        + 175.0 * math.sin(A1 - F)
        + 175.0 * math.sin(A1 + F)
        + 127.0 * math.sin(Lp - Mp)
        - 115.0 * math.sin(Lp + Mp)
    )

    return MoonCoordinates(
        lon_deg=aa.wrap_deg(lon + lon_sum * 1e-6),
        lat_deg=lat + lat_sum * 1e-6,
        distance_km=dist + dist_sum * 1e-3,
    )


def _topocentric(ra_deg: float, dec_deg: float, distance_km: float, frame: ObserverFrame) -> tuple[float, float]:
    """Meeus ch. 40: shift a geocentric RA/Dec to the observer's site."""
    phi = math.radians(frame.lat_deg)
    u = math.atan(EARTH_FLATTENING_RATIO * math.tan(phi))
    h_ratio = frame.location.elev_m / (EARTH_RADIUS_KM * 1000.0)
    rho_sin = EARTH_FLATTENING_RATIO * math.sin(u) + h_ratio * math.sin(phi)
    rho_cos = math.cos(u) + h_ratio * math.cos(phi)

    sin_pi = EARTH_RADIUS_KM / distance_km
    H = math.radians(aa.wrap180(frame.lst_deg - ra_deg))
    dec = math.radians(dec_deg)

    den = math.cos(dec) - rho_cos * sin_pi * math.cos(H)
    d_ra = math.atan2(-rho_cos * sin_pi * math.sin(H), den)
    dec_t = math.atan2((math.sin(dec) - rho_sin * sin_pi) * math.cos(d_ra), den)
    return aa.wrap_deg(ra_deg + math.degrees(d_ra)), math.degrees(dec_t)


def compute_moon_state(instant: TimeInstant, frame: Optional[ObserverFrame] = None) -> LunarState:
    """
    Moon RA/Dec and illuminated fraction at `instant`.

    `position` is rotated back to the J2000 catalog frame (transpose of nutation x
    precession) so it can be compared with catalog targets; `apparent` keeps the
    true equator and equinox of date. With a frame both are topocentric for that
    site, otherwise geocentric.
    Illuminated fraction: (1 + cos i) / 2 in percent, i the Sun-Moon phase angle seen
    from the Moon.
    """
    jd_tt = instant.jd_tt
    T = aa.T_centuries(jd_tt)
    moon = moon_geocentric(jd_tt)
    sun = solar_position(jd_tt)
    nut = aa.nutation(T)

    lon_app = aa.wrap_deg(moon.lon_deg + nut.dpsi_deg)
    ra, dec = aa.ecliptic_to_equatorial(lon_app, moon.lat_deg, nut.eps_true_deg)
    if frame is not None:
        ra, dec = _topocentric(ra, dec, moon.distance_km, frame.at(instant))

    to_j2000 = aa.transpose(aa.matmul(aa.nutation_matrix(nut), aa.precession_matrix(T)))
    ra0, dec0 = aa.vector_to_radec(aa.apply_matrix(to_j2000, aa.radec_to_vector(ra, dec)))

    # geocentric elongation from the Sun
    beta = math.radians(moon.lat_deg)
    dlon = math.radians(moon.lon_deg - sun.L_true_deg)
    psi = math.acos(aa.clamp(math.cos(beta) * math.cos(dlon)))

    R = sun.distance_au * AU_KM
    phase_angle = math.atan2(R * math.sin(psi), moon.distance_km - R * math.cos(psi))
    fraction = 100.0 * (1.0 + math.cos(phase_angle)) / 2.0

    return LunarState(
        illuminated_fraction=min(100.0, max(0.0, fraction)),
        position=EquatorialPosition.from_degrees(ra0, dec0),
        apparent=EquatorialPosition.from_degrees(ra, dec),
        phase_angle_deg=math.degrees(phase_angle),
        elongation_deg=math.degrees(psi),
        distance_km=moon.distance_km,
        waxing=aa.wrap_deg(moon.lon_deg - sun.L_true_deg) < 180.0,
    )
