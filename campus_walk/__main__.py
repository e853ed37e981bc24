#!/usr/bin/env python3
"""
Campus Walk - shortest walking routes across a campus, with live progress

Usage:
    python -m campus_walk PATHS --to LAT LON [options]

Options:
    --boundary SRC    Campus boundary GeoJSON (file or URL); paths leaving it are ignored
    --from LAT LON    Starting point (default: GPS fix, then CONFIG["default_start"])
    --to LAT LON      Destination
    --radius METERS   Snapping radius (default: 1110)
    --preview         Print the route and exit
    --simulate        Walk the route virtually, one point per tick
    --record FILE     Record GPS trace to JSON file
    --playback FILE   Play back a recorded GPS trace instead of live GPS
    --speed FACTOR    Playback/simulation speed multiplier (default: 1.0)
    --html FILE       Write an HTML map of the route
    --gpx FILE        Export route to GPX file
    --log FILE        Log file path
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from .app import CampusNavigator
from .config import CONFIG
from .feed import SensorFeed, SimulatedWalker
from .geojson import GeoJSONLoader
from .geo import retry_with_backoff
from .gps import GPS, GPSRecorder, GPSPlayback


def _initial_fix(gps) -> tuple[float, float] | None:
    """Starting point from a position source, retried for up to 30 s"""
    print("Getting GPS fix...")
    location = retry_with_backoff(
        lambda: gps.get_location(timeout=10),
        max_time=30.0,
        initial_delay=1.0,
        max_delay=8.0,
        description="GPS fix"
    )
    if not location:
        return None
    print(f"Location: {location.lat:.6f}, {location.lon:.6f} (accuracy: {location.accuracy}m)")
    return location.lat, location.lon


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Campus Walk - shortest walking routes across a campus"
    )
    parser.add_argument("paths", help="Path geometry GeoJSON (file or URL)")
    parser.add_argument("--boundary", metavar="SRC",
                        help="Campus boundary GeoJSON (file or URL)")
    parser.add_argument("--from", dest="start", type=float, nargs=2, metavar=("LAT", "LON"),
                        help="Starting point (default: GPS fix)")
    parser.add_argument("--to", dest="end", type=float, nargs=2, metavar=("LAT", "LON"),
                        required=True, help="Destination")
    parser.add_argument("--radius", type=float, metavar="METERS",
                        help="Snapping radius in meters")
    parser.add_argument("--preview", action="store_true",
                        help="Print the route and exit")
    parser.add_argument("--simulate", action="store_true",
                        help="Walk the route virtually instead of using GPS")
    parser.add_argument("--record", metavar="FILE",
                        help="Record GPS trace to JSON file")
    parser.add_argument("--playback", metavar="FILE",
                        help="Playback GPS trace from JSON file")
    parser.add_argument("--speed", type=float, default=1.0,
                        help="Playback/simulation speed multiplier (default: 1.0)")
    parser.add_argument("--html", metavar="FILE",
                        help="Write route map to HTML file")
    parser.add_argument("--gpx", metavar="FILE",
                        help="Export route to GPX file")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: campus_walk_TIMESTAMP.log)")

    args = parser.parse_args(argv)

    if sum(bool(x) for x in (args.simulate, args.playback, args.record)) > 1:
        parser.error("--simulate, --playback and --record are mutually exclusive")
    if args.speed <= 0:
        parser.error("--speed must be positive")

    for source in (args.paths, args.boundary):
        if source and not GeoJSONLoader.is_url(source) and not Path(source).exists():
            print(f"GeoJSON file not found: {source}")
            return 1

    if args.playback and not Path(args.playback).exists():
        print(f"Playback file not found: {args.playback}")
        return 1

    # Position source
    if args.playback:
        source = GPSPlayback(args.playback, args.speed)
    elif args.record:
        source = GPSRecorder(GPS(), args.record)
    else:
        source = GPS()

    start = tuple(args.start) if args.start else None
    if start is None and not args.simulate and not args.preview:
        start = _initial_fix(source)
    if start is None and CONFIG["default_start"]:
        start = tuple(CONFIG["default_start"])
        print(f"Using default start: {start[0]:.6f}, {start[1]:.6f}")
    if start is None:
        print("No starting point: pass --from LAT LON")
        return 1

    log_path = args.log
    if not log_path:
        log_path = f"campus_walk_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    navigator = CampusNavigator(
        args.paths,
        boundary_source=args.boundary,
        log_path=log_path,
        html_output=args.html,
        gpx_output=args.gpx,
    )
    if args.simulate:
        navigator.set_feed(SimulatedWalker(speed=args.speed))
    else:
        navigator.set_feed(SensorFeed(source))

    ok = navigator.run(start, tuple(args.end), max_radius=args.radius, preview=args.preview)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
