from __future__ import annotations

from dataclasses import dataclass
from math import fmod
from typing import Literal, Tuple

import math


# ------------------------------------------------------------
# Units & helpers
# ------------------------------------------------------------

Vector = Tuple[float, float, float]
Matrix = Tuple[Vector, Vector, Vector]

SIDEREAL_DEG_PER_DAY = 360.98564736629   # Earth rotation rate w.r.t. the equinox
SIDEREAL_DAY = 360.0 / SIDEREAL_DEG_PER_DAY  # solar days


def wrap_deg(x_deg: float) -> float:
    """Wrap degrees to [0,360)."""
    y = fmod(x_deg, 360.0)
    if y < 0:
        y += 360.0
    # fmod of a tiny negative number can land exactly on 360.0 after the add
    return 0.0 if y >= 360.0 else y

def wrap180(deg: float) -> float:
    """Wraps an angle in degrees to the range [-180.0, 180.0)."""
    return (deg + 180.0) % 360.0 - 180.0

def clamp(x: float, lo: float = -1.0, hi: float = 1.0) -> float:
    return lo if x < lo else hi if x > hi else x

def arcsec_to_deg(arcsec: float) -> float:
    return arcsec / 3600.0

def arcsec_to_rad(arcsec: float) -> float:
    return math.radians(arcsec_to_deg(arcsec))

def mas_to_deg(mas: float) -> float:
    return mas / 3.6e6

# ------------------------------------------------------------
# Time variable (TT)
# ------------------------------------------------------------

J2000_TT = 2451545.0  # JD(TT) at J2000.0


def T_centuries(jd: float) -> float:
    """Julian centuries from J2000.0 (in whatever scale jd is given)."""
    return (jd - J2000_TT) / 36525.0


# ------------------------------------------------------------
# Fundamental arguments (Meeus / ELP2000-style; degrees)
# ------------------------------------------------------------

@dataclass(frozen=True)
class FundamentalArgs:
    """Lunar/solar fundamental arguments in degrees, wrapped to [0,360)."""
    Lp_deg: float     # Moon mean longitude
    D_deg: float      # Moon mean elongation
    M_deg: float      # Sun mean anomaly
    Mp_deg: float     # Moon mean anomaly
    F_deg: float      # Moon argument of latitude
    Omega_deg: float  # longitude of the Moon's ascending node


def fundamental_args(T: float) -> FundamentalArgs:
    """
    Fundamental arguments, Meeus (47.1)-(47.5) with the node from (22):
      L' = 218.3164477 + 481267.88123421 T - 0.0015786 T^2 + T^3/538841 - T^4/65194000
      D  = 297.8501921 + 445267.1114034  T - 0.0018819 T^2 + T^3/545868  - T^4/113065000
      M  = 357.5291092 + 35999.0502909  T - 0.0001536 T^2 + T^3/24490000
      M' = 134.9633964 + 477198.8675055 T + 0.0087414 T^2 + T^3/69699   - T^4/14712000
      F  = 93.2720950  + 483202.0175233 T - 0.0036539 T^2 - T^3/3526000 + T^4/863310000
      Ω  = 125.04452   - 1934.136261    T + 0.0020708 T^2 + T^3/450000
    """
    T2 = T * T
    T3 = T2 * T
    T4 = T2 * T2

    Lp = 218.3164477 + 481267.88123421 * T - 0.0015786 * T2 + T3 / 538841.0 - T4 / 65194000.0
    D = 297.8501921 + 445267.1114034 * T - 0.0018819 * T2 + T3 / 545868.0 - T4 / 113065000.0
    M = 357.5291092 + 35999.0502909 * T - 0.0001536 * T2 + T3 / 24490000.0
    Mp = 134.9633964 + 477198.8675055 * T + 0.0087414 * T2 + T3 / 69699.0 - T4 / 14712000.0
    F = 93.2720950 + 483202.0175233 * T - 0.0036539 * T2 - T3 / 3526000.0 + T4 / 863310000.0
    Omega = 125.04452 - 1934.136261 * T + 0.0020708 * T2 + T3 / 450000.0

    return FundamentalArgs(
        Lp_deg=wrap_deg(Lp),
        D_deg=wrap_deg(D),
        M_deg=wrap_deg(M),
        Mp_deg=wrap_deg(Mp),
        F_deg=wrap_deg(F),
        Omega_deg=wrap_deg(Omega),
    )


def eccentricity_factor(T: float) -> float:
    """
    Eccentricity factor E for the Earth's orbit.
    Scales lunar perturbations that depend on the Sun's mean anomaly.
    """
    return 1.0 - 0.002516 * T - 0.0000074 * (T * T)


# ------------------------------------------------------------
# Obliquity & nutation
# ------------------------------------------------------------

def mean_obliquity_deg(T: float, model: Literal["iau2000", "iau1980"] = "iau2000") -> float:
    """
    Mean obliquity of the ecliptic (degrees).

    - 'iau2000': 84381.406" - 46.836769"T - 0.0001831"T^2 + 0.00200340"T^3
                 - 0.000000576"T^4 - 0.0000000434"T^5
    - 'iau1980': 23°26'21.448" - 46.8150"T - 0.00059"T^2 + 0.001813"T^3
    """
    if model == "iau2000":
        T2 = T * T
        T3 = T2 * T
        T4 = T2 * T2
        T5 = T4 * T
        eps_arcsec = (
            84381.406
            - 46.836769 * T
            - 0.0001831 * T2
            + 0.00200340 * T3
            - 0.000000576 * T4
            - 0.0000000434 * T5
        )
        return arcsec_to_deg(eps_arcsec)

    if model == "iau1980":
        eps0 = 23.0 + 26.0 / 60.0 + 21.448 / 3600.0
        return eps0 - arcsec_to_deg(46.8150 * T + 0.00059 * (T * T) - 0.001813 * (T * T * T))

    raise ValueError("model must be one of: iau2000, iau1980")


@dataclass(frozen=True)
class Nutation:
    dpsi_deg: float   # nutation in longitude
    deps_deg: float   # nutation in obliquity
    eps_mean_deg: float

    @property
    def eps_true_deg(self) -> float:
        return self.eps_mean_deg + self.deps_deg


def nutation(T: float) -> Nutation:
    """
    Leading four terms of the IAU 1980 series (Meeus ch. 22), good to ~0.5".
    """
    Omega = math.radians(125.04452 - 1934.136261 * T)
    L = math.radians(280.4665 + 36000.7698 * T)
    Lp = math.radians(218.3165 + 481267.8813 * T)

    dpsi = -17.20 * math.sin(Omega) - 1.32 * math.sin(2 * L) - 0.23 * math.sin(2 * Lp) + 0.21 * math.sin(2 * Omega)
    deps = 9.20 * math.cos(Omega) + 0.57 * math.cos(2 * L) + 0.10 * math.cos(2 * Lp) - 0.09 * math.cos(2 * Omega)

    return Nutation(
        dpsi_deg=arcsec_to_deg(dpsi),
        deps_deg=arcsec_to_deg(deps),
        eps_mean_deg=mean_obliquity_deg(T),
    )


# ------------------------------------------------------------
# Sidereal time
# ------------------------------------------------------------

def gmst_deg(jd_ut1: float) -> float:
    """
    Greenwich mean sidereal time (degrees), Meeus (12.4), from JD(UT1).
    """
    T = T_centuries(jd_ut1)
    theta = (
        280.46061837
        + SIDEREAL_DEG_PER_DAY * (jd_ut1 - J2000_TT)
        + 0.000387933 * T * T
        - (T * T * T) / 38710000.0
    )
    return wrap_deg(theta)


def gast_deg(jd_ut1: float, jd_tt: float) -> float:
    """Greenwich apparent sidereal time: GMST plus the equation of the equinoxes."""
    nut = nutation(T_centuries(jd_tt))
    eqeq = nut.dpsi_deg * math.cos(math.radians(nut.eps_true_deg))
    return wrap_deg(gmst_deg(jd_ut1) + eqeq)


# ------------------------------------------------------------
# Sun mean elements (Meeus-style)
# ------------------------------------------------------------

@dataclass(frozen=True)
class SolarMean:
    L0_deg: float   # mean longitude of Sun
    M_deg: float    # mean anomaly of Sun
    e: float        # eccentricity of Earth's orbit


def solar_mean_elements(T: float) -> SolarMean:
    """
    Meeus (25.2)-(25.4): geometric mean longitude, mean anomaly, eccentricity.
    """
    T2 = T * T
    L0 = 280.46646 + 36000.76983 * T + 0.0003032 * T2
    M = 357.52911 + 35999.05029 * T - 0.0001537 * T2
    e = 0.016708634 - 0.000042037 * T - 0.0000001267 * T2
    return SolarMean(L0_deg=wrap_deg(L0), M_deg=wrap_deg(M), e=e)


# ------------------------------------------------------------
# Rotation matrices & vectors
# ------------------------------------------------------------

def matmul(A: Matrix, B: Matrix) -> Matrix:
    return tuple(
        tuple(sum(A[i][k] * B[k][j] for k in range(3)) for j in range(3))
        for i in range(3)
    )  # type: ignore[return-value]

# Passive coordinate rotations
def R_x(a: float) -> Matrix:
    c, s = math.cos(a), math.sin(a)
    return ((1.0, 0.0, 0.0), (0.0, c, s), (0.0, -s, c))

def R_y(a: float) -> Matrix:
    c, s = math.cos(a), math.sin(a)
    return ((c, 0.0, -s), (0.0, 1.0, 0.0), (s, 0.0, c))

def R_z(a: float) -> Matrix:
    c, s = math.cos(a), math.sin(a)
    return ((c, s, 0.0), (-s, c, 0.0), (0.0, 0.0, 1.0))


def transpose(M: Matrix) -> Matrix:
    """Inverse of a rotation matrix."""
    return tuple(tuple(M[j][i] for j in range(3)) for i in range(3))  # type: ignore[return-value]


def apply_matrix(M: Matrix, v: Vector) -> Vector:
    """Applies a 3x3 matrix to a 3D vector."""
    return (
        M[0][0]*v[0] + M[0][1]*v[1] + M[0][2]*v[2],
        M[1][0]*v[0] + M[1][1]*v[1] + M[1][2]*v[2],
        M[2][0]*v[0] + M[2][1]*v[1] + M[2][2]*v[2]
    )


def precession_matrix(T: float) -> Matrix:
    """
    IAU 1976 precession: mean equator/equinox of J2000 -> mean equator/equinox of date.
    """
    zeta = arcsec_to_rad(2306.2181 * T + 0.30188 * (T**2) + 0.017998 * (T**3))
    z    = arcsec_to_rad(2306.2181 * T + 1.09468 * (T**2) + 0.018203 * (T**3))
    theta= arcsec_to_rad(2004.3109 * T - 0.42665 * (T**2) - 0.041833 * (T**3))
    return matmul(R_z(-z), matmul(R_y(theta), R_z(-zeta)))


def nutation_matrix(nut: Nutation) -> Matrix:
    """Mean equator of date -> true equator of date."""
    eps = math.radians(nut.eps_mean_deg)
    eps_t = math.radians(nut.eps_true_deg)
    dpsi = math.radians(nut.dpsi_deg)
    return matmul(R_x(-eps_t), matmul(R_z(-dpsi), R_x(eps)))


def radec_to_vector(ra_deg: float, dec_deg: float) -> Vector:
    a, d = math.radians(ra_deg), math.radians(dec_deg)
    cd = math.cos(d)
    return (cd * math.cos(a), cd * math.sin(a), math.sin(d))


def vector_to_radec(v: Vector) -> Tuple[float, float]:
    """Unit-agnostic: returns (ra_deg in [0,360), dec_deg)."""
    x, y, z = v
    rho = math.hypot(x, y)
    ra = wrap_deg(math.degrees(math.atan2(y, x))) if rho > 0.0 else 0.0
    dec = math.degrees(math.atan2(z, rho))
    return ra, dec


def ecliptic_to_equatorial(lon_deg: float, lat_deg: float, eps_deg: float) -> Tuple[float, float]:
    """(λ, β) -> (α, δ) in degrees, for obliquity eps."""
    v = radec_to_vector(lon_deg, lat_deg)
    return vector_to_radec(apply_matrix(R_x(-math.radians(eps_deg)), v))
