"""Data classes for Campus Walk."""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

Coord = tuple[float, float]  # (lat, lon)


@dataclass
class Location:
    """A position fix"""
    lat: float
    lon: float
    accuracy: Optional[float] = None
    timestamp: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Location":
        return cls(**d)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lon rectangle, inclusive on every edge"""
    south: float
    west: float
    north: float
    east: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east

    @classmethod
    def around(cls, points: list[Coord]) -> Optional["BoundingBox"]:
        if not points:
            return None
        lats = [p[0] for p in points]
        lons = [p[1] for p in points]
        return cls(south=min(lats), west=min(lons), north=max(lats), east=max(lons))


class RouteFailure(Enum):
    EMPTY_GRAPH = "empty_graph"
    SNAP_FAILURE = "snap_failure"
    VERTEX_NOT_FOUND = "vertex_not_found"
    NO_PATH = "no_path"

    @property
    def message(self) -> str:
        """What the user is told. VERTEX_NOT_FOUND reads the same as SNAP_FAILURE."""
        if self is RouteFailure.EMPTY_GRAPH:
            return "Routing unavailable"
        if self is RouteFailure.NO_PATH:
            return "No route found"
        return "No nearby path"


@dataclass(frozen=True)
class RouteResult:
    """Outcome of a routing request: a route, or the reason there is none"""
    route: tuple[Coord, ...] = ()
    failure: Optional[RouteFailure] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(cls, failure: RouteFailure, detail: str = "") -> "RouteResult":
        return cls(failure=failure, detail=detail)


class NavState(Enum):
    IDLE = "idle"
    ROUTE_COMPUTED = "route_computed"
    NAVIGATING = "navigating"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Progress:
    """Snapshot of how far along the route the user is"""
    index: int
    completed: tuple[Coord, ...]
    remaining: tuple[Coord, ...]
    remaining_distance: float  # meters
    remaining_minutes: int
    total_distance: float = 0.0

    @property
    def is_finished(self) -> bool:
        return len(self.remaining) <= 1

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "completed_points": len(self.completed),
            "remaining_points": len(self.remaining),
            "remaining_distance": round(self.remaining_distance, 1),
            "remaining_minutes": self.remaining_minutes,
        }
