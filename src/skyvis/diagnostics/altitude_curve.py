#!/usr/bin/env python3
from __future__ import annotations

import argparse
from datetime import datetime, timezone
from typing import List, Optional

from skyvis.core.config import Settings
from skyvis.core.types import Crossing, EquatorialPosition, ObjectVisibility
from skyvis.reference.lunar import compute_moon_state
from skyvis.reference.observer import make_frame
from skyvis.reference.tracks import altitude_track
from skyvis.reference.visibility import compute_visibility


def _need_matplotlib():
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "skyvis[diagnostics]"') from e


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Plot a target's altitude over time with transit/rise/set marks.")
    p.add_argument("ra", type=float, help="Right ascension in hours")
    p.add_argument("dec", type=float, help="Declination in degrees")
    p.add_argument("--start", default=None, help="ISO start time, naive = UTC (default: now)")
    p.add_argument("--hours", type=float, default=24.0)
    p.add_argument("--step-minutes", type=float, default=5.0)
    p.add_argument("--out-png", default="altitude_curve.png")
    args = p.parse_args(argv)

    plt = _need_matplotlib()

    s = Settings.from_env()
    if args.start is None:
        start = datetime.now(timezone.utc)
    else:
        start = datetime.fromisoformat(args.start)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)

    frame = make_frame(s.location, start, s.eop)
    pos = EquatorialPosition(args.ra, args.dec)
    track = altitude_track(frame, pos, hours=args.hours, step_minutes=args.step_minutes)
    info = compute_visibility(frame, pos)
    moon = compute_moon_state(frame.instant, frame)

    fig, ax = plt.subplots(figsize=(11, 5))
    ax.plot(track.hours, track.alt_deg, color="navy", label=f"RA {args.ra:.3f}h Dec {args.dec:+.2f}")
    ax.axhline(0.0, color="black", lw=0.8)

    def mark(jd: float, label: str, color: str) -> None:
        h = (jd - frame.instant.jd_utc) * 24.0
        if 0.0 <= h <= args.hours:
            ax.axvline(h, color=color, ls="--", lw=0.8, label=label)

    if isinstance(info, ObjectVisibility):
        mark(info.transit.jd_utc, f"transit {info.transit.hhmm} UTC", "green")
        if isinstance(info.rise_set, Crossing):
            mark(info.rise_set.rise.jd_utc, f"rise {info.rise_set.rise.hhmm} UTC", "orange")
            mark(info.rise_set.set.jd_utc, f"set {info.rise_set.set.hhmm} UTC", "red")

    ax.set_xlabel(f"Hours after {frame.instant.utc:%Y-%m-%d %H:%M} UTC")
    ax.set_ylabel("Altitude (deg)")
    ax.set_ylim(-90, 90)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="lower right", fontsize=8)
    ax.set_title(
        f"lat {s.latitude_deg:.3f} lon {s.longitude_deg:.3f}  |  Moon {moon.illuminated_fraction:.0f}% lit"
    )

    plt.tight_layout()
    plt.savefig(args.out_png, dpi=150)
    print(f"Plot saved to {args.out_png}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
