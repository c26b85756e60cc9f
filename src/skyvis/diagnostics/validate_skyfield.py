#!/usr/bin/env python3
from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import numpy as np

from skyvis.core.config import Settings
from skyvis.core.types import EquatorialPosition
from skyvis.reference import astro_args as aa
from skyvis.reference.lunar import compute_moon_state
from skyvis.reference.observer import make_frame
from skyvis.reference.separation import separation_deg
from skyvis.reference.transform import to_horizontal


def _need_skyfield():
    try:
        from skyfield import api as sf
        return sf
    except ImportError as e:
        raise RuntimeError('Need skyfield. Install: pip install "skyvis[ephemeris]"') from e


def _need_matplotlib():
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "skyvis[diagnostics]"') from e


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Validate the analytical engine against skyfield + a JPL ephemeris.")
    p.add_argument("--ra", type=float, default=5.5, help="Test star RA (hours, J2000)")
    p.add_argument("--dec", type=float, default=45.0, help="Test star Dec (degrees, J2000)")
    p.add_argument("--start", default="2025-01-01T00:00:00")
    p.add_argument("--days", type=int, default=60)
    p.add_argument("--step-hours", type=float, default=6.0)
    p.add_argument("--bsp", default="de421.bsp", help="JPL kernel (downloaded by skyfield if missing)")
    p.add_argument("--out-png", default=None)
    args = p.parse_args(argv)

    sf = _need_skyfield()

    s = Settings.from_env()
    loc = s.location
    print(f"Loading {args.bsp} ...")
    eph = sf.load(args.bsp)
    sts = sf.load.timescale()
    earth, moon_body, sun = eph["earth"], eph["moon"], eph["sun"]
    site = earth + sf.wgs84.latlon(loc.lat_deg, loc.lon_deg, elevation_m=loc.elev_m)
    star = sf.Star(ra_hours=args.ra, dec_degrees=args.dec)
    pos = EquatorialPosition(args.ra, args.dec)

    t0 = datetime.fromisoformat(args.start).replace(tzinfo=timezone.utc)
    n = int(args.days * 24 / args.step_hours)
    times = [t0 + timedelta(hours=i * args.step_hours) for i in range(n)]

    err_alt, err_az, err_moon, err_illum = [], [], [], []
    for dt in times:
        frame = make_frame(loc, dt, s.eop)
        t = sts.from_datetime(dt)

        # star, geometric (no refraction) on both sides
        alt, az, _ = site.at(t).observe(star).apparent().altaz()
        h = to_horizontal(frame, pos)
        err_alt.append((h.alt_deg - alt.degrees) * 3600.0)
        err_az.append(aa.wrap180(h.az_deg - az.degrees) * 3600.0 * np.cos(np.radians(alt.degrees)))

        # Moon, geocentric apparent of date
        app = earth.at(t).observe(moon_body).apparent()
        ra, dec, _ = app.radec(epoch="date")
        st = compute_moon_state(frame.instant)
        err_moon.append(separation_deg(st.apparent.ra_deg, st.apparent.dec_deg, ra.hours * 15.0, dec.degrees) * 60.0)
        err_illum.append(st.illuminated_fraction - 100.0 * float(app.fraction_illuminated(sun)))

    err_alt = np.asarray(err_alt)
    err_az = np.asarray(err_az)
    err_moon = np.asarray(err_moon)
    err_illum = np.asarray(err_illum)

    print(f"Validated {n} instants from {times[0]:%Y-%m-%d} over {args.days} days")
    print(f"  star altitude   : rms {np.sqrt(np.mean(err_alt**2)):.2f}\"  max {np.max(np.abs(err_alt)):.2f}\"")
    print(f"  star azimuth    : rms {np.sqrt(np.mean(err_az**2)):.2f}\"  max {np.max(np.abs(err_az)):.2f}\"")
    print(f"  moon position   : rms {np.sqrt(np.mean(err_moon**2)):.2f}'  max {np.max(err_moon):.2f}'")
    print(f"  moon illuminated: rms {np.sqrt(np.mean(err_illum**2)):.3f}%  max {np.max(np.abs(err_illum)):.3f}%")

    if args.out_png:
        plt = _need_matplotlib()
        days = np.arange(n) * args.step_hours / 24.0
        fig, axs = plt.subplots(3, 1, figsize=(12, 9), sharex=True)
        axs[0].plot(days, err_alt, ".", ms=2, label="altitude")
        axs[0].plot(days, err_az, ".", ms=2, label="azimuth (on sky)")
        axs[0].set_ylabel("Star error (arcsec)")
        axs[0].legend()
        axs[1].plot(days, err_moon, ".", ms=2, color="blue")
        axs[1].set_ylabel("Moon error (arcmin)")
        axs[2].plot(days, err_illum, ".", ms=2, color="green")
        axs[2].set_ylabel("Illumination error (%)")
        axs[2].set_xlabel("Days")
        for ax in axs:
            ax.grid(True, alpha=0.3)
        plt.suptitle("Analytical engine vs skyfield")
        plt.tight_layout()
        plt.savefig(args.out_png, dpi=150)
        print(f"Plot saved to {args.out_png}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
