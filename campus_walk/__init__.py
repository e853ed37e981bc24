"""Campus Walk - Shortest walking routes across a campus, with live progress."""

from .config import CONFIG
from .models import (
    Location,
    BoundingBox,
    RouteFailure,
    RouteResult,
    NavState,
    Progress,
)
from .logger import Logger
from .geo import (
    haversine_distance,
    vertex_key,
    key_to_coord,
    point_in_polygon,
    point_in_any_polygon,
    polyline_length,
    walk_minutes,
    walk_estimate,
    format_distance,
    retry_with_backoff,
)
from .snap import nearest_path_point
from .graph import PathGraph
from .solver import shortest_path, path_weight
from .geojson import GeoJSONLoader, extract_polylines, boundary_from_geojson
from .gps import GPS, GPSRecorder, GPSPlayback
from .feed import PositionFeed, SensorFeed, SimulatedWalker
from .session import RouteSession, NavigationError, split_route
from .app import CampusNavigator
from .__main__ import main

__all__ = [
    "CONFIG",
    "Location",
    "BoundingBox",
    "RouteFailure",
    "RouteResult",
    "NavState",
    "Progress",
    "Logger",
    "haversine_distance",
    "vertex_key",
    "key_to_coord",
    "point_in_polygon",
    "point_in_any_polygon",
    "polyline_length",
    "walk_minutes",
    "walk_estimate",
    "format_distance",
    "retry_with_backoff",
    "nearest_path_point",
    "PathGraph",
    "shortest_path",
    "path_weight",
    "GeoJSONLoader",
    "extract_polylines",
    "boundary_from_geojson",
    "GPS",
    "GPSRecorder",
    "GPSPlayback",
    "PositionFeed",
    "SensorFeed",
    "SimulatedWalker",
    "RouteSession",
    "NavigationError",
    "split_route",
    "CampusNavigator",
    "main",
]
