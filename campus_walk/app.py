"""Main Campus Walk application."""

import time
from datetime import datetime
from typing import Optional

from .feed import PositionFeed, SensorFeed
from .geo import format_distance, walk_estimate
from .geojson import GeoJSONLoader, boundary_from_geojson, extract_polylines
from .gps import GPS, GPSRecorder
from .graph import PathGraph
from .logger import Logger
from .models import Coord, NavState, Progress, RouteResult
from .route_map import save_route_map
from .session import RouteSession


class CampusNavigator:
    """Loads campus geometry, routes between two points and follows the walk"""

    def __init__(self, paths_source: str, boundary_source: Optional[str] = None,
                 log_path: Optional[str] = None,
                 html_output: Optional[str] = None,
                 gpx_output: Optional[str] = None,
                 logger: Optional[Logger] = None):
        self.paths_source = paths_source
        self.boundary_source = boundary_source
        self.html_output = html_output  # HTML map of the route
        self.gpx_output = gpx_output  # GPX file for navigation apps
        self.logger = logger or Logger(log_path)

        self.session = RouteSession()
        self.feed: PositionFeed = SensorFeed(GPS())
        self.last_progress: Optional[Progress] = None
        self.fixes_received = 0
        self.fix_failures = 0

        self.walk_start_time = 0.0

    @property
    def graph(self) -> PathGraph:
        return self.session.graph

    def set_feed(self, feed: PositionFeed):
        """Choose the position feed (SensorFeed or SimulatedWalker) before navigating"""
        self.feed = feed

    def load_geometry(self) -> bool:
        """Build a fresh graph from the geometry sources and swap it in"""
        paths = GeoJSONLoader.load(self.paths_source)
        polylines = extract_polylines(paths)
        self.logger.log("Path geometry loaded", {"source": self.paths_source, "polylines": len(polylines)})

        contains = None
        if self.boundary_source:
            boundary = GeoJSONLoader.load(self.boundary_source)
            contains = boundary_from_geojson(boundary)
            if contains is None:
                self.logger.log("Boundary has no usable geometry, not filtering paths",
                                {"source": self.boundary_source})

        graph = PathGraph.from_polylines(polylines, contains)
        self.session.set_graph(graph)
        self.logger.log("Built graph", graph.stats())
        return not graph.is_empty()

    def get_state(self) -> dict:
        """Get current state as dict for logging"""
        state = {
            "nav_state": self.session.state.value,
            "fixes": self.fixes_received,
            "fix_failures": self.fix_failures,
            "feed_status": self.feed.get_status(),
        }
        progress = self.session.progress()
        if progress:
            state.update(progress.to_dict())
        location = self.session.current_location
        if location:
            state["location"] = {"lat": location.lat, "lon": location.lon, "accuracy": location.accuracy}
        return state

    def plan(self, start: Coord, end: Coord, max_radius: Optional[float] = None) -> RouteResult:
        """Compute the route and report it"""
        distance, minutes = walk_estimate(start, end)
        self.logger.log("Calculating route", {
            "start": list(start), "end": list(end),
            "straight_line": round(distance, 1), "straight_line_minutes": minutes,
        })

        result = self.session.compute_route(start, end, max_radius)
        if not result.ok:
            self.logger.log("Route failed", {"failure": result.failure.value, "detail": result.detail})
            print(f"{result.failure.message}: {result.detail}")
            return result

        progress = self.session.progress()
        self.logger.log("Route calculated", {
            "points": len(result.route),
            "distance": round(progress.total_distance, 1),
            "minutes": progress.remaining_minutes,
        })
        print(f"Route calculated: {len(result.route)} points, "
              f"{format_distance(progress.total_distance)}, {progress.remaining_minutes} min walk")
        return result

    def display_route_preview(self):
        """Print the computed route and write any requested exports"""
        progress = self.session.progress()
        if not progress:
            print("No route to preview")
            return

        print("\n" + "=" * 60)
        print("ROUTE PREVIEW")
        print("=" * 60)
        print(f"\nDistance: {format_distance(progress.total_distance)}")
        print(f"Walking time: {progress.remaining_minutes} min")
        print(f"Points: {len(self.session.route)}")
        print("-" * 60)
        for i, (lat, lon) in enumerate(self.session.route):
            print(f"  {i:>4}  {lat:.6f}, {lon:.6f}")
        print("=" * 60)

        self.write_exports()

    def write_exports(self, progress: Optional[Progress] = None):
        progress = progress or self.session.progress()
        if not progress:
            return
        if self.html_output:
            location = self.session.current_location
            current = (location.lat, location.lon) if location else None
            save_route_map(progress, self.html_output, current=current, paths=self.graph.polylines)
        if self.gpx_output:
            self.generate_route_gpx()

    def generate_route_gpx(self):
        """Write the route as a GPX 1.1 track with start and destination waypoints"""
        route = self.session.route
        if not route:
            print("No route to export")
            return
        progress = self.session.progress()
        timestamp = datetime.now().isoformat()

        gpx_lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<gpx version="1.1" creator="Campus Walk"',
            '     xmlns="http://www.topografix.com/GPX/1/1"',
            '     xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"',
            '     xsi:schemaLocation="http://www.topografix.com/GPX/1/1 http://www.topografix.com/GPX/1/1/gpx.xsd">',
            '  <metadata>',
            f'    <name>Campus Walk Route ({format_distance(progress.total_distance)})</name>',
            f'    <time>{timestamp}</time>',
            '  </metadata>',
        ]

        for (lat, lon), name in ((route[0], "Start"), (route[-1], "Destination")):
            gpx_lines.append(f'  <wpt lat="{lat:.6f}" lon="{lon:.6f}">')
            gpx_lines.append(f'    <name>{name}</name>')
            gpx_lines.append('  </wpt>')

        gpx_lines.append('  <trk>')
        gpx_lines.append('    <name>Campus Walk Route</name>')
        gpx_lines.append('    <trkseg>')
        for lat, lon in route:
            gpx_lines.append(f'      <trkpt lat="{lat:.6f}" lon="{lon:.6f}"/>')
        gpx_lines.append('    </trkseg>')
        gpx_lines.append('  </trk>')
        gpx_lines.append('</gpx>')

        with open(self.gpx_output, 'w') as f:
            f.write('\n'.join(gpx_lines))

        print(f"\nGPX route saved to: {self.gpx_output} ({len(route)} track points)")

    def start_navigation(self):
        self.session.attach_feed(self.feed)
        self.walk_start_time = time.time()
        self.last_progress = self.session.progress()
        self.logger.log("Navigation started", {"feed": type(self.feed).__name__})
        self.logger.state(self.get_state(), force=True)

    def periodic_update(self):
        self.logger.state(self.get_state())

    def update(self) -> bool:
        """One poll of the feed. Returns False once navigation is over."""
        self.periodic_update()

        if self.session.state is not NavState.NAVIGATING:
            return False

        location = self.feed.get_location()
        if not location:
            self.fix_failures += 1
            self.logger.log("Position fix failed", {"status": self.feed.get_status()})
            return True

        self.fixes_received += 1
        previous_index = self.session.index
        self.session.enqueue_fix(location)
        progress = self.session.process_pending()
        if progress is None:
            return False
        self.last_progress = progress

        if progress.index != previous_index:
            self.logger.log("Progress", progress.to_dict())
            print(f"{format_distance(progress.remaining_distance)} to go, "
                  f"about {progress.remaining_minutes} min")

        if self.session.state is NavState.COMPLETED:
            self.logger.log("Destination reached")
            print("You have arrived!")
            return False

        return True

    def run(self, start: Coord, end: Coord, max_radius: Optional[float] = None,
            preview: bool = False) -> bool:
        """Load, route and (unless previewing) navigate. False if no route was found."""
        print("\n=== Campus Walk ===")
        try:
            if not self.load_geometry():
                print("No walkable paths loaded")

            result = self.plan(start, end, max_radius)
            if not result.ok:
                return False

            if preview:
                self.display_route_preview()
                return True

            self.navigate()
            return True
        finally:
            self.logger.close()

    def navigate(self):
        """Follow the active route until arrival, feed exhaustion or Ctrl+C"""
        self.start_navigation()
        try:
            while self.update():
                if self.feed.is_finished():
                    print("\nPosition feed finished")
                    self.logger.log("Position feed finished")
                    break
                time.sleep(self.feed.get_poll_interval())
        except KeyboardInterrupt:
            print("\nNavigation interrupted")
            self.logger.log("Navigation cancelled by user")
        finally:
            if self.session.state is NavState.NAVIGATING:
                self.session.cancel()
                self.logger.log("Navigation cancelled", self.get_state())

            source = getattr(self.feed, "source", None)
            if isinstance(source, GPSRecorder):
                source.save()

            summary = {
                "state": self.session.state.value,
                "fixes": self.fixes_received,
                "progress_updates": self.logger.counts["Progress"],
                "duration": time.time() - self.walk_start_time if self.walk_start_time else 0,
            }
            if self.last_progress:
                summary["remaining_distance"] = round(self.last_progress.remaining_distance, 1)
            self.logger.log("Walk summary", summary)
            self.write_exports(self.last_progress)

            print("\nWalk summary:")
            print(f"  Result: {summary['state']}")
            print(f"  Fixes: {summary['fixes']}")
            print(f"  Duration: {summary['duration'] / 60:.1f} minutes")
