"""Snapping arbitrary coordinates onto known path geometry."""

from typing import Iterable, Optional

from .config import snap_radius_meters
from .geo import haversine_distance
from .models import Coord


def nearest_path_point(lat: float, lon: float, points: Iterable[Coord],
                       max_radius: Optional[float] = None) -> Optional[Coord]:
    """Find the path vertex closest to (lat, lon), accepting it only within max_radius meters.

    Linear scan. The running minimum tracks every candidate, in radius or not,
    so the result is the overall nearest point when that point is close enough
    and None otherwise. Ties keep the first point seen.
    """
    if max_radius is None:
        max_radius = snap_radius_meters()

    nearest = None
    min_dist = float("inf")

    for point in points:
        dist = haversine_distance(lat, lon, point[0], point[1])
        if dist < min_dist:
            min_dist = dist
            if dist <= max_radius:
                nearest = point

    return nearest


def nearest_distance(lat: float, lon: float, points: Iterable[Coord]) -> float:
    """Distance in meters to the closest point, inf when there are none"""
    return min((haversine_distance(lat, lon, p[0], p[1]) for p in points), default=float("inf"))
