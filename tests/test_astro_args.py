# tests/test_astro_args.py

import math

import pytest
from skyvis.reference import astro_args as aa
from skyvis.reference import solar


def test_meeus_example_47a_lunar_fundamentals():
    """
    Jean Meeus, Astronomical Algorithms (2nd Ed), Example 47.a.
    Date: 1992 April 12, 0h TD (TT).
    JD: 2448724.5
    """
    jd_tt = 2448724.5
    T = aa.T_centuries(jd_tt)

    assert T == pytest.approx(-0.077221081451, abs=1e-12)

    fa = aa.fundamental_args(T)
    assert fa.Lp_deg == pytest.approx(134.290182, abs=1e-6)
    assert fa.D_deg  == pytest.approx(113.842304, abs=1e-6)
    assert fa.M_deg  == pytest.approx(97.643514, abs=1e-6)
    assert fa.Mp_deg == pytest.approx(5.150833, abs=1e-6)
    assert fa.F_deg  == pytest.approx(219.889721, abs=1e-6)

    E = aa.eccentricity_factor(T)
    assert E == pytest.approx(1.000194, abs=1e-6)


def test_meeus_example_25a_sun():
    """
    Meeus Example 25.a.
    Date: 1992 October 13, 0h TD (TT).
    """
    jd_tt = 2448908.5
    T = aa.T_centuries(jd_tt)
    assert T == pytest.approx(-0.072183436, abs=1e-9)

    sm = aa.solar_mean_elements(T)
    assert sm.L0_deg == pytest.approx(201.80720, abs=1e-5)
    assert sm.M_deg  == pytest.approx(278.99397, abs=1e-5)

    s = solar.solar_position(jd_tt)
    assert s.L_true_deg == pytest.approx(199.90988, abs=1e-4)
    assert s.L_app_deg == pytest.approx(199.90895, abs=1e-4)
    assert s.distance_au == pytest.approx(0.99766, abs=1e-5)


def test_meeus_example_22a_obliquity_and_nutation():
    """
    Meeus Example 22.a.
    Date: 1987 April 10, 0h TD (TT).
    """
    jd_tt = 2446895.5
    T = aa.T_centuries(jd_tt)
    assert T == pytest.approx(-0.127296372348, abs=1e-12)

    # IAU 1980 mean obliquity: 23deg 26' 27.407"
    target_eps0 = 23.0 + 26.0 / 60.0 + 27.407 / 3600.0
    assert aa.mean_obliquity_deg(T, model="iau1980") == pytest.approx(target_eps0, abs=1e-6)
    # both models agree to well under an arcsecond here
    assert aa.mean_obliquity_deg(T) == pytest.approx(target_eps0, abs=3e-4)

    fa = aa.fundamental_args(T)
    assert fa.Omega_deg == pytest.approx(11.2531, abs=1e-4)

    # Full series: dpsi = -3.788", deps = +9.443"; four terms hold to ~0.5"
    nut = aa.nutation(T)
    assert nut.dpsi_deg * 3600.0 == pytest.approx(-3.788, abs=0.5)
    assert nut.deps_deg * 3600.0 == pytest.approx(9.443, abs=0.2)
    assert nut.eps_true_deg == pytest.approx(target_eps0 + 9.443 / 3600.0, abs=1e-3)

    with pytest.raises(ValueError):
        aa.mean_obliquity_deg(T, model="iau2006")  # type: ignore[arg-type]


def test_meeus_example_12_sidereal_time():
    # 12.a: 1987 April 10, 0h UT -> 13h10m46.3668s
    assert aa.gmst_deg(2446895.5) == pytest.approx(197.693195, abs=1e-6)
    # 12.b: 1987 April 10, 19h21m00s UT -> 128.7378734 deg
    assert aa.gmst_deg(2446896.30625) == pytest.approx(128.7378734, abs=1e-6)

    # apparent = mean + dpsi cos(eps); Meeus gives 13h10m46.1351s at 0h
    gast = aa.gast_deg(2446895.5, 2446895.5)
    assert gast == pytest.approx((13 + 10 / 60 + 46.1351 / 3600) * 15.0, abs=1e-4)


def test_sidereal_rate_consistency():
    # one solar day advances GMST by ~0.9856 deg beyond a full turn
    g0 = aa.gmst_deg(2460000.5)
    g1 = aa.gmst_deg(2460001.5)
    assert aa.wrap_deg(g1 - g0) == pytest.approx(0.98564736629, abs=1e-6)
    assert aa.SIDEREAL_DAY * 86400.0 == pytest.approx(86164.0905, abs=1e-3)


def test_wrap_helpers():
    assert 0.0 <= aa.wrap_deg(-1e-15) < 360.0
    assert aa.wrap_deg(720.5) == pytest.approx(0.5)
    assert aa.wrap_deg(-90.0) == pytest.approx(270.0)
    assert aa.wrap180(190.0) == pytest.approx(-170.0)
    assert aa.wrap180(180.0) == pytest.approx(-180.0)
    assert aa.clamp(1.0000001) == 1.0
    assert aa.clamp(-3.0) == -1.0


def test_rotation_matrices_are_orthonormal():
    T = 0.25
    P = aa.precession_matrix(T)
    N = aa.nutation_matrix(aa.nutation(T))
    M = aa.matmul(N, P)
    for i in range(3):
        for j in range(3):
            dot = sum(M[i][k] * M[j][k] for k in range(3))
            assert dot == pytest.approx(1.0 if i == j else 0.0, abs=1e-12)


def test_precession_identity_at_j2000():
    v = aa.radec_to_vector(83.6, 22.0)
    w = aa.apply_matrix(aa.precession_matrix(0.0), v)
    ra, dec = aa.vector_to_radec(w)
    assert ra == pytest.approx(83.6, abs=1e-12)
    assert dec == pytest.approx(22.0, abs=1e-12)


def test_precession_moves_equinox_westward():
    # over a century the equinox shifts ~1.397 deg along the ecliptic
    lon0 = 0.0
    v = aa.radec_to_vector(*aa.ecliptic_to_equatorial(lon0, 0.0, aa.mean_obliquity_deg(0.0)))
    w = aa.apply_matrix(aa.precession_matrix(1.0), v)
    ra, dec = aa.vector_to_radec(w)
    eps = math.radians(aa.mean_obliquity_deg(1.0))
    a, d = math.radians(ra), math.radians(dec)
    lon = math.degrees(math.atan2(
        math.sin(a) * math.cos(eps) + math.tan(d) * math.sin(eps), math.cos(a)
    ))
    assert lon == pytest.approx(1.3969, abs=2e-3)


def test_ecliptic_to_equatorial_meeus_13a():
    # Meeus 13.a: Pollux, lambda 113.215630, beta 6.684170, eps 23.4392911
    ra, dec = aa.ecliptic_to_equatorial(113.215630, 6.684170, 23.4392911)
    assert ra == pytest.approx(116.328942, abs=1e-5)
    assert dec == pytest.approx(28.026183, abs=1e-5)
