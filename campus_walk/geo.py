"""Geographic utility functions."""

import math
import time
from typing import Optional, Sequence

from .config import CONFIG

EARTH_RADIUS = 6371000  # meters


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS * c


def vertex_key(lat: float, lon: float, precision: Optional[int] = None) -> str:
    """Canonical graph identity for a coordinate: "lat,lon" rounded to fixed decimals.

    Two coordinates share a key exactly when their rounded forms are identical.
    Adding 0.0 folds -0.0 into 0.0 so "-0.000000" never appears.
    """
    if precision is None:
        precision = CONFIG["key_precision"]
    lat = round(lat, precision) + 0.0
    lon = round(lon, precision) + 0.0
    return f"{lat:.{precision}f},{lon:.{precision}f}"


def key_to_coord(key: str) -> tuple[float, float]:
    """Convert a vertex key back to (lat, lon)"""
    lat, lon = key.split(",")
    return float(lat), float(lon)


def point_in_polygon(lat: float, lon: float, polygon: Sequence[Sequence[float]]) -> bool:
    """Ray-casting test. polygon is a ring of [lat, lon] vertices (closing vertex optional)."""
    inside = False
    n = len(polygon)
    if n < 3:
        return False
    j = n - 1
    for i in range(n):
        lat_i, lon_i = polygon[i][0], polygon[i][1]
        lat_j, lon_j = polygon[j][0], polygon[j][1]
        if (lon_i > lon) != (lon_j > lon):
            cross_lat = lat_i + (lon - lon_i) * (lat_j - lat_i) / (lon_j - lon_i)
            if lat < cross_lat:
                inside = not inside
        j = i
    return inside


def point_in_any_polygon(lat: float, lon: float, polygons: Sequence[Sequence[Sequence[float]]]) -> bool:
    """Check if a point falls inside any of the given polygons"""
    return any(point_in_polygon(lat, lon, polygon) for polygon in polygons)


def polyline_length(points: Sequence[tuple[float, float]]) -> float:
    """Sum of consecutive-point distances in meters"""
    total = 0.0
    for i in range(1, len(points)):
        total += haversine_distance(points[i - 1][0], points[i - 1][1],
                                    points[i][0], points[i][1])
    return total


def walk_minutes(distance: float) -> int:
    """Whole minutes to walk a distance at the configured pace, rounded up"""
    return math.ceil(distance / CONFIG["walking_speed"])


def walk_estimate(start: tuple[float, float], end: tuple[float, float]) -> tuple[float, int]:
    """Straight-line distance and walking time between two points"""
    distance = haversine_distance(start[0], start[1], end[0], end[1])
    return distance, walk_minutes(distance)


def format_distance(meters: float) -> str:
    """Human-readable distance: meters below 1 km, otherwise km with one decimal"""
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.1f} km"


def retry_with_backoff(func, max_time: float = 30.0, initial_delay: float = 1.0,
                       max_delay: float = 8.0, description: str = "operation"):
    """Retry a function with exponential backoff.

    Args:
        func: Function that returns a truthy value on success, falsy on failure
        max_time: Maximum total time to retry (seconds)
        initial_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        description: Description for logging

    Returns:
        The result of func() on success, or None if all retries failed
    """
    start_time = time.time()
    delay = initial_delay
    attempt = 1

    while True:
        result = func()
        if result:
            return result

        elapsed = time.time() - start_time
        if elapsed >= max_time:
            print(f"Failed to complete {description} after {elapsed:.1f}s ({attempt} attempts)")
            return None

        remaining = max_time - elapsed
        sleep_time = min(delay, remaining, max_delay)
        if sleep_time > 0:
            print(f"Retrying {description} in {sleep_time:.1f}s (attempt {attempt})...")
            time.sleep(sleep_time)

        delay = min(delay * 2, max_delay)
        attempt += 1
