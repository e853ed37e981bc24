"""Loading path geometry and the campus boundary from GeoJSON."""

import hashlib
import json
import os
import time
from typing import Callable, Optional

import requests

from .config import CONFIG
from .geo import point_in_any_polygon, retry_with_backoff
from .models import BoundingBox, Coord

EMPTY_COLLECTION = {"type": "FeatureCollection", "features": []}


class GeoJSONLoader:
    """Read GeoJSON documents from disk or over HTTP, caching remote ones"""

    @staticmethod
    def is_url(source: str) -> bool:
        return source.startswith(("http://", "https://"))

    @classmethod
    def _cache_path(cls, url: str) -> str:
        h = hashlib.md5(url.encode()).hexdigest()[:12]
        return os.path.join(CONFIG["geojson_cache_dir"], f"geojson_{h}.json")

    @classmethod
    def _read_cache(cls, url: str) -> Optional[dict]:
        path = cls._cache_path(url)
        if not os.path.exists(path):
            return None
        try:
            age = time.time() - os.path.getmtime(path)
            if age > CONFIG["geojson_cache_max_age"]:
                return None
            with open(path) as f:
                data = json.load(f)
            print(f"Using cached {url} ({age / 3600:.1f}h old)")
            return data
        except (json.JSONDecodeError, OSError):
            return None

    @classmethod
    def _write_cache(cls, url: str, data: dict):
        os.makedirs(CONFIG["geojson_cache_dir"], exist_ok=True)
        with open(cls._cache_path(url), "w") as f:
            json.dump(data, f)

    @classmethod
    def fetch(cls, url: str) -> Optional[dict]:
        """Single HTTP attempt. None on any network or decode error."""
        timeout = CONFIG["geojson_fetch_timeout"]
        print(f"Fetching {url}...")
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            print(f"GeoJSON fetch error: {e}")
        except ValueError as e:
            print(f"GeoJSON decode error for {url}: {e}")
        return None

    @classmethod
    def load(cls, source: str, max_time: float = 30.0) -> dict:
        """Load a document from a file path or URL.

        Unreadable input gives an empty FeatureCollection, never an exception,
        so a bad paths document simply means no routing is possible.
        """
        if cls.is_url(source):
            cached = cls._read_cache(source)
            if cached is not None:
                return cached
            data = retry_with_backoff(lambda: cls.fetch(source), max_time=max_time,
                                      initial_delay=2.0, description=f"fetch {source}")
            if not data:
                return dict(EMPTY_COLLECTION)
            cls._write_cache(source, data)
            return data

        try:
            with open(source) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Could not read GeoJSON from {source}: {e}")
            return dict(EMPTY_COLLECTION)


def _geometries(document: dict) -> list[dict]:
    """Flatten a FeatureCollection, Feature or bare geometry into geometries"""
    if not isinstance(document, dict):
        return []
    kind = document.get("type")
    if kind == "FeatureCollection":
        result = []
        for feature in document.get("features") or []:
            result.extend(_geometries(feature))
        return result
    if kind == "Feature":
        return _geometries(document.get("geometry") or {})
    if kind == "GeometryCollection":
        result = []
        for geometry in document.get("geometries") or []:
            result.extend(_geometries(geometry))
        return result
    if kind:
        return [document]
    return []


def _to_lat_lon(positions) -> list[Coord]:
    # GeoJSON positions are [lon, lat, (alt)]
    return [(float(p[1]), float(p[0])) for p in positions]


def extract_polylines(document: dict) -> list[list[Coord]]:
    """(lat, lon) polylines from every LineString and MultiLineString in a document"""
    polylines = []
    for geometry in _geometries(document):
        coordinates = geometry.get("coordinates") or []
        try:
            if geometry.get("type") == "LineString":
                polylines.append(_to_lat_lon(coordinates))
            elif geometry.get("type") == "MultiLineString":
                polylines.extend([_to_lat_lon(line) for line in coordinates])
        except (IndexError, KeyError, TypeError, ValueError) as e:
            print(f"Skipping malformed {geometry.get('type')}: {e}")
    return polylines


def extract_polygons(document: dict) -> list[list[Coord]]:
    """Outer rings, as (lat, lon), of every Polygon and MultiPolygon in a document"""
    rings = []
    for geometry in _geometries(document):
        coordinates = geometry.get("coordinates") or []
        try:
            if geometry.get("type") == "Polygon" and coordinates:
                rings.append(_to_lat_lon(coordinates[0]))
            elif geometry.get("type") == "MultiPolygon":
                rings.extend([_to_lat_lon(polygon[0]) for polygon in coordinates if polygon])
        except (IndexError, KeyError, TypeError, ValueError) as e:
            print(f"Skipping malformed {geometry.get('type')}: {e}")
    return rings


def boundary_from_geojson(document: dict, mode: Optional[str] = None) -> Optional[Callable[[float, float], bool]]:
    """Containment predicate (lat, lon) -> bool for a boundary document.

    "bbox" mode tests against the bounding rectangle of every coordinate in the
    document; "polygon" mode tests the polygons themselves. None when the
    document holds no usable geometry.
    """
    mode = mode or CONFIG["boundary_mode"]

    if mode == "polygon":
        polygons = extract_polygons(document)
        if not polygons:
            return None
        return lambda lat, lon: point_in_any_polygon(lat, lon, polygons)

    if mode == "bbox":
        points = [p for ring in extract_polygons(document) for p in ring]
        points.extend(p for line in extract_polylines(document) for p in line)
        bbox = BoundingBox.around(points)
        return bbox.contains if bbox else None

    raise ValueError(f"Unknown boundary mode: {mode}")
