from __future__ import annotations

import argparse
from dataclasses import replace
from datetime import datetime, timezone
import importlib
import inspect
import logging
import sys
from typing import Optional

from dotenv import load_dotenv


def _parse_when(s: Optional[str]) -> Optional[datetime]:
    """ISO timestamp; naive values are taken as UTC."""
    if s is None:
        return None
    dt = datetime.fromisoformat(s)
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _run_module_main(modpath: str, argv: list[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def add_site_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--lat", type=float, default=None, help="Observer latitude in degrees (default: SKYVIS_LATITUDE)")
    p.add_argument("--lon", type=float, default=None, help="Observer longitude in degrees, positive East (default: SKYVIS_LONGITUDE)")
    p.add_argument("--elev", type=float, default=None, help="Observer elevation in meters")
    p.add_argument("--when", default=None, help="ISO timestamp (naive = UTC); default: now")
    p.add_argument("--leap-seconds", type=int, default=None, help="TAI-UTC in seconds")
    p.add_argument("--dut1", type=float, default=None, help="UT1-UTC in seconds")


def settings_from_args(args: argparse.Namespace):
    from skyvis.core.config import Settings

    s = Settings.from_env()
    over = {}
    if args.lat is not None:
        over["latitude_deg"] = args.lat
    if args.lon is not None:
        over["longitude_deg"] = args.lon
    if args.elev is not None:
        over["elevation_m"] = args.elev
    eop = s.eop
    if args.leap_seconds is not None:
        eop = replace(eop, leap_seconds=args.leap_seconds)
    if args.dut1 is not None:
        eop = replace(eop, dut1_seconds=args.dut1)
    return replace(s, eop=eop, **over)


def _fmt(ev) -> str:
    return "--:--" if ev is None else f"{ev.utc:%Y-%m-%d %H:%M} UTC"


def cmd_visibility(argv: list[str]) -> int:
    import skyvis
    from skyvis.core.types import AlwaysAbove, NeverRises, Unavailable

    p = argparse.ArgumentParser(prog="skyvis visibility", description="Transit, rise, set and current alt/az of a catalog target.")
    p.add_argument("ra", type=float, help="Right ascension in hours")
    p.add_argument("dec", type=float, help="Declination in degrees")
    p.add_argument("--horizon", type=float, default=0.0, help="Horizon altitude in degrees")
    p.add_argument("--no-refraction", action="store_true")
    p.add_argument("--rounding", choices=["truncate", "nearest"], default="truncate")
    add_site_args(p)
    args = p.parse_args(argv)

    s = settings_from_args(args)
    info = skyvis.object_visibility(
        args.ra, args.dec,
        settings=s,
        when=_parse_when(args.when),
        horizon_deg=args.horizon,
        refract=not args.no_refraction,
        rounding=args.rounding,
    )
    if isinstance(info, Unavailable):
        print(f"Not computable: {info.reason}")
        return 1

    print(f"Site: lat {s.latitude_deg:.4f}, lon {s.longitude_deg:.4f}, elev {s.elevation_m:.0f} m")
    print(f"Apparent place: RA {info.apparent.ra_hours:.6f} h, Dec {info.apparent.dec_deg:.6f} deg")
    print(f"  Azimuth  = {info.azimuth:.4f} deg")
    print(f"  Altitude = {info.altitude:.4f} deg")
    print(f"  Transit  : {_fmt(info.transit)}")
    if isinstance(info.rise_set, AlwaysAbove):
        print("  Rise/Set : always above the horizon")
    elif isinstance(info.rise_set, NeverRises):
        print("  Rise/Set : never rises")
    else:
        print(f"  Rise     : {_fmt(info.rise)}")
        print(f"  Set      : {_fmt(info.set)}")
    return 0


def cmd_moon(argv: list[str]) -> int:
    import skyvis
    from skyvis.core.types import EquatorialPosition

    p = argparse.ArgumentParser(prog="skyvis moon", description="Moon RA/Dec and illuminated fraction.")
    p.add_argument("--geocentric", action="store_true", help="Skip the topocentric parallax correction")
    p.add_argument("--target", nargs=2, type=float, metavar=("RA_H", "DEC_DEG"), help="Also report the Moon separation of a target")
    add_site_args(p)
    args = p.parse_args(argv)

    s = settings_from_args(args)
    st = skyvis.moon_state(_parse_when(args.when), settings=s, topocentric=not args.geocentric)
    warn = " (!)" if s.illumination_warning(st) else ""

    print("Moon:")
    print(f"  RA  (J2000)         = {st.position.ra_hours:.4f} h")
    print(f"  Dec (J2000)         = {st.position.dec_deg:.4f} deg")
    print(f"  RA  (of date)       = {st.apparent.ra_hours:.4f} h")
    print(f"  Dec (of date)       = {st.apparent.dec_deg:.4f} deg")
    print(f"  Illumination        = {st.illuminated_fraction:.1f} %{warn}")
    print(f"  Phase angle         = {st.phase_angle_deg:.2f} deg ({'waxing' if st.waxing else 'waning'})")
    print(f"  Distance            = {st.distance_km:.0f} km")
    if args.target:
        sep = skyvis.moon_separation(EquatorialPosition(args.target[0], args.target[1]), st)
        warn = " (!)" if s.separation_warning(sep) else ""
        print(f"  Target separation   = {sep:.2f} deg{warn}")
    return 0


def cmd_separation(argv: list[str]) -> int:
    from skyvis.core.types import EquatorialPosition
    from skyvis.reference.separation import separation

    p = argparse.ArgumentParser(prog="skyvis separation", description="Angular separation of two equatorial positions.")
    p.add_argument("ra1", type=float, help="hours")
    p.add_argument("dec1", type=float, help="degrees")
    p.add_argument("ra2", type=float, help="hours")
    p.add_argument("dec2", type=float, help="degrees")
    args = p.parse_args(argv)

    d = separation(EquatorialPosition(args.ra1, args.dec1), EquatorialPosition(args.ra2, args.dec2))
    print(f"{d:.6f}")
    return 0


def cmd_lst(argv: list[str]) -> int:
    import skyvis
    from skyvis.reference.time_scales import split_hour

    p = argparse.ArgumentParser(prog="skyvis lst", description="Julian dates and local apparent sidereal time.")
    add_site_args(p)
    args = p.parse_args(argv)

    frame = skyvis.frame_for(settings_from_args(args), _parse_when(args.when))
    i = frame.instant
    hh, mm = split_hour(frame.lst_hours)
    print(f"UTC    = {i.utc.isoformat()}")
    print(f"JD_UTC = {i.jd_utc:.6f}")
    print(f"JD_TT  = {i.jd_tt:.6f}")
    print(f"JD_UT1 = {i.jd_ut1:.6f}")
    print(f"GAST   = {frame.gast_deg:.6f} deg")
    print(f"LST    = {frame.lst_deg:.6f} deg  ({hh:02d}:{mm:02d})")
    return 0


def cmd_constellations(argv: list[str]) -> int:
    import skyvis

    p = argparse.ArgumentParser(prog="skyvis constellations", description="Visible constellation segments in horizontal coordinates.")
    p.add_argument("--file", default=None, help="CSV: name,ra1_deg,dec1_deg,ra2_deg,dec2_deg")
    add_site_args(p)
    args = p.parse_args(argv)

    segs = skyvis.constellation_segments(settings=settings_from_args(args), when=_parse_when(args.when), path=args.file)
    for seg in segs:
        print(
            f"{seg.name:4s} az {seg.start.az_deg:7.2f} alt {seg.start.alt_deg:6.2f}"
            f"  ->  az {seg.end.az_deg:7.2f} alt {seg.end.alt_deg:6.2f}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    load_dotenv()

    p = argparse.ArgumentParser(prog="skyvis", description="Astronomical visibility toolkit CLI.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("visibility", help="Transit/rise/set and alt/az of a target")
    sub.add_parser("moon", help="Moon position and illuminated fraction")
    sub.add_parser("separation", help="Angular separation of two positions")
    sub.add_parser("lst", help="Julian dates and local sidereal time")
    sub.add_parser("constellations", help="Constellation segments above the horizon")

    p_diag = sub.add_parser("diag", help="Diagnostics tools")
    p_diag.add_argument(
        "tool",
        choices=["altitude-curve", "validate-skyfield"],
        help="Which diagnostic to run",
    )

    args, rest = p.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "visibility":
        return cmd_visibility(rest)

    if args.cmd == "moon":
        return cmd_moon(rest)

    if args.cmd == "separation":
        return cmd_separation(rest)

    if args.cmd == "lst":
        return cmd_lst(rest)

    if args.cmd == "constellations":
        return cmd_constellations(rest)

    if args.cmd == "diag":
        tool_map = {
            "altitude-curve": "skyvis.diagnostics.altitude_curve",
            "validate-skyfield": "skyvis.diagnostics.validate_skyfield",
        }
        return _run_module_main(tool_map[args.tool], rest)

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
