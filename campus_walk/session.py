"""Route session: the active route, navigation state and progress."""

import threading
from collections import deque
from typing import Optional, Sequence

from .geo import haversine_distance, polyline_length, vertex_key, walk_minutes
from .graph import PathGraph
from .feed import PositionFeed
from .models import Coord, Location, NavState, Progress, RouteFailure, RouteResult
from .snap import nearest_distance
from .solver import is_complete_path, shortest_path


class NavigationError(Exception):
    """Raised when the session is driven out of order (not a routing failure)"""


def split_route(route: Sequence[Coord], index: int) -> Progress:
    """Split a route at index into completed R[0..i] and remaining R[i..n-1].

    The point at index belongs to both halves. Everything is derived from
    (route, index) alone.
    """
    route = tuple(route)
    if not route:
        return Progress(index=0, completed=(), remaining=(), remaining_distance=0.0, remaining_minutes=0)
    index = max(0, min(index, len(route) - 1))
    completed = route[:index + 1]
    remaining = route[index:]
    remaining_distance = polyline_length(remaining)
    return Progress(
        index=index,
        completed=completed,
        remaining=remaining,
        remaining_distance=remaining_distance,
        remaining_minutes=walk_minutes(remaining_distance),
        total_distance=polyline_length(route),
    )


class RouteSession:
    """Owns one user's route and drives it through the navigation states.

    Idle -> RouteComputed -> Navigating -> (Completed | Cancelled) -> Idle.
    A successful compute_route re-enters RouteComputed from any state.

    Fixes are applied one at a time under a lock, and nothing touches the
    progress index once cancel() has returned.
    """

    def __init__(self, graph: Optional[PathGraph] = None):
        self.graph = graph if graph is not None else PathGraph()
        self.state = NavState.IDLE
        self.feed: Optional[PositionFeed] = None
        self.current_location: Optional[Location] = None
        self.last_result: Optional[RouteResult] = None
        self._route: tuple[Coord, ...] = ()
        self._index = 0
        self._pending: deque[Location] = deque()
        self._lock = threading.RLock()

    @property
    def route(self) -> tuple[Coord, ...]:
        return self._route

    @property
    def index(self) -> int:
        return self._index

    def set_graph(self, graph: PathGraph):
        """Swap in a freshly built graph. The active route, if any, is kept."""
        with self._lock:
            self.graph = graph

    # Routing

    def compute_route(self, start: Coord, end: Coord, max_radius: Optional[float] = None) -> RouteResult:
        """Route from start to end and install the result as the active route.

        Always stops any navigation in progress. On failure the session is
        left Idle with no route.
        """
        result = self.solve(start, end, max_radius)
        with self._lock:
            self._release_feed()
            self._route = result.route
            self._index = 0
            self.current_location = None
            self.last_result = result
            self.state = NavState.ROUTE_COMPUTED if result.ok else NavState.IDLE
        return result

    def solve(self, start: Coord, end: Coord, max_radius: Optional[float] = None) -> RouteResult:
        """Route between two coordinates without touching session state"""
        graph = self.graph
        if graph.is_empty():
            return RouteResult.failed(RouteFailure.EMPTY_GRAPH, "No path geometry loaded")

        snapped = []
        for label, (lat, lon) in (("start", start), ("end", end)):
            point = graph.snap(lat, lon, max_radius)
            if point is None:
                closest = nearest_distance(lat, lon, graph.snap_candidates())
                return RouteResult.failed(
                    RouteFailure.SNAP_FAILURE,
                    f"No path point near {label} ({lat:.6f}, {lon:.6f}); closest is {closest:.1f} m away",
                )
            snapped.append(point)

        start_key = vertex_key(*snapped[0])
        end_key = vertex_key(*snapped[1])
        for label, key in (("start", start_key), ("end", end_key)):
            if not graph.has_vertex(key):
                return RouteResult.failed(
                    RouteFailure.VERTEX_NOT_FOUND,
                    f"Snapped {label} [{key}] is not a graph vertex",
                )

        keys = shortest_path(graph, start_key, end_key)
        if not is_complete_path(keys, start_key):
            return RouteResult.failed(
                RouteFailure.NO_PATH,
                f"No connected path from [{start_key}] to [{end_key}]",
            )

        return RouteResult(route=tuple(graph.get_node_location(k) for k in keys))

    # Progress

    def progress(self) -> Optional[Progress]:
        """Completed/remaining split at the current index, or None without a route"""
        with self._lock:
            if not self._route:
                return None
            return split_route(self._route, self._index)

    def distance_to_next(self) -> Optional[float]:
        """Meters from the last fix to the next route point"""
        with self._lock:
            if not self._route or not self.current_location or self._index >= len(self._route) - 1:
                return None
            lat, lon = self._route[self._index + 1]
            return haversine_distance(self.current_location.lat, self.current_location.lon, lat, lon)

    # Navigation

    def attach_feed(self, feed: PositionFeed):
        """Start navigating the computed route with the given feed"""
        with self._lock:
            if self.state is not NavState.ROUTE_COMPUTED:
                raise NavigationError(f"Cannot start navigation from state {self.state.value}")
            self.feed = feed
            feed.attach(self._route)
            self.state = NavState.NAVIGATING

    def submit_fix(self, fix: Location) -> Optional[Progress]:
        """Apply one fix. Returns the new progress, or None if the fix was discarded."""
        with self._lock:
            if self.state is not NavState.NAVIGATING or self.feed is None:
                return None

            self.current_location = fix
            last = len(self._route) - 1
            new_index = self.feed.advance(fix, self._index)
            self._index = max(self._index, min(new_index, last))

            if self._index >= last:
                self.state = NavState.COMPLETED
                self._release_feed()

            return split_route(self._route, self._index)

    def enqueue_fix(self, fix: Location):
        """Queue a fix, possibly from a sensor callback thread; applied by process_pending()"""
        with self._lock:
            if self.state is NavState.NAVIGATING:
                self._pending.append(fix)

    def process_pending(self) -> Optional[Progress]:
        """Apply queued fixes in arrival order. Returns the last progress produced."""
        progress = None
        while True:
            with self._lock:
                if not self._pending:
                    return progress
                fix = self._pending.popleft()
                result = self.submit_fix(fix)
                if result is not None:
                    progress = result

    def cancel(self):
        """End navigation: release the feed, drop queued fixes, rewind to the start.

        Only a Navigating session is cancelled. A completed walk stays Completed
        and a computed route stays ready to navigate; use reset() to drop them.
        """
        with self._lock:
            if self.state is not NavState.NAVIGATING:
                return
            self._release_feed()
            self._index = 0
            self.state = NavState.CANCELLED

    def reset(self):
        """Back to Idle, discarding the route"""
        with self._lock:
            self.cancel()
            self._route = ()
            self._index = 0
            self.current_location = None
            self.state = NavState.IDLE

    def _release_feed(self):
        self._pending.clear()
        if self.feed is not None:
            self.feed.stop()
            self.feed = None
