"""Position feeds: turn position fixes into progress along a route."""

import time
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .config import CONFIG
from .geo import haversine_distance
from .models import Coord, Location


class PositionFeed(ABC):
    """A source of progress along a route.

    Subclasses implement advance(fix, index), returning the route index the
    fix corresponds to. The session clamps the answer so progress never goes
    backwards, so a feed does not need to guard against that itself.
    """

    def __init__(self):
        self.route: tuple[Coord, ...] = ()
        self.active = False

    def attach(self, route: Sequence[Coord]):
        """Bind the feed to a route and start it"""
        self.route = tuple(route)
        self.active = True

    def stop(self):
        """Stop producing progress. Safe to call more than once."""
        self.active = False

    @abstractmethod
    def advance(self, fix: Location, index: int) -> int:
        """Route index the fix corresponds to"""

    @abstractmethod
    def get_location(self, timeout: int = 30) -> Optional[Location]:
        """Next position fix, or None if there is none"""

    def get_poll_interval(self) -> float:
        return CONFIG["gps_poll_interval"]

    def is_finished(self) -> bool:
        return False

    def get_status(self) -> str:
        return "active" if self.active else "stopped"


class SensorFeed(PositionFeed):
    """Maps real position fixes onto the nearest route point at or after the current index"""

    def __init__(self, source=None):
        super().__init__()
        self.source = source  # GPS, GPSRecorder or GPSPlayback
        self.ignored_fixes = 0

    def advance(self, fix: Location, index: int) -> int:
        max_accuracy = CONFIG["max_fix_accuracy"]
        if max_accuracy and fix.accuracy is not None and fix.accuracy > max_accuracy:
            self.ignored_fixes += 1
            return index

        best_index = index
        best_dist = float("inf")
        for i in range(index, len(self.route)):
            lat, lon = self.route[i]
            dist = haversine_distance(fix.lat, fix.lon, lat, lon)
            if dist < best_dist:
                best_dist = dist
                best_index = i
        return best_index

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        if not self.active or self.source is None:
            return None
        return self.source.get_location(timeout)

    def get_poll_interval(self) -> float:
        if hasattr(self.source, "get_poll_interval"):
            return self.source.get_poll_interval()
        return CONFIG["gps_poll_interval"]

    def is_finished(self) -> bool:
        if hasattr(self.source, "is_finished"):
            return self.source.is_finished()
        return False

    def get_status(self) -> str:
        if self.source is None:
            return "No position source"
        return self.source.get_status()


class SimulatedWalker(PositionFeed):
    """Walks the route one point per tick, for demos and testing without GPS"""

    def __init__(self, tick: Optional[float] = None, speed: float = 1.0):
        super().__init__()
        self.tick = tick if tick is not None else CONFIG["simulation_tick"]
        self.speed = speed
        self.position = 0  # route index of the last fix produced

    def attach(self, route: Sequence[Coord]):
        super().attach(route)
        self.position = 0

    def advance(self, fix: Location, index: int) -> int:
        return min(index + 1, len(self.route) - 1)

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        """Fix at the next route point"""
        if not self.active or self.is_finished():
            return None
        self.position += 1
        lat, lon = self.route[self.position]
        return Location(lat=lat, lon=lon, accuracy=0, timestamp=time.time())

    def get_poll_interval(self) -> float:
        return self.tick / self.speed

    def is_finished(self) -> bool:
        return self.position >= len(self.route) - 1

    def get_status(self) -> str:
        progress = f"{self.position}/{max(len(self.route) - 1, 0)}"
        return f"Simulated walk ({progress})" if self.active else f"Simulation stopped ({progress})"
