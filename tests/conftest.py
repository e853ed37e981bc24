import json
import math

import pytest

from campus_walk import CONFIG, BoundingBox, PathGraph

BASE_LAT = 12.9200
BASE_LON = 80.1200
METERS_PER_DEG_LAT = 6371000 * math.pi / 180


def offset(north: float, east: float, lat: float = BASE_LAT, lon: float = BASE_LON) -> tuple[float, float]:
    """Point `north` and `east` meters away from (lat, lon)"""
    new_lat = lat + north / METERS_PER_DEG_LAT
    new_lon = lon + east / (METERS_PER_DEG_LAT * math.cos(math.radians(lat)))
    return new_lat, new_lon


@pytest.fixture(autouse=True)
def restore_config():
    saved = dict(CONFIG)
    yield
    CONFIG.clear()
    CONFIG.update(saved)


@pytest.fixture
def campus_polylines():
    """Gate -> quad -> library spine, an east branch to the canteen, and a lone path out west.

        library (0,200)
           |
        quad (0,100) --- canteen (100,100)
           |
        gate (0,0)            west walk (0,-600)..(50,-600), not connected
    """
    return [
        [offset(0, 0), offset(50, 0), offset(100, 0), offset(150, 0), offset(200, 0)],
        [offset(100, 0), offset(100, 50), offset(100, 100)],
        [offset(0, -600), offset(50, -600)],
    ]


@pytest.fixture
def campus_bounds():
    south, west = offset(-50, -700)
    north, east = offset(300, 200)
    return BoundingBox(south=south, west=west, north=north, east=east)


@pytest.fixture
def campus_graph(campus_polylines, campus_bounds):
    return PathGraph.from_polylines(campus_polylines, campus_bounds.contains)


def to_feature_collection(polylines):
    """(lat, lon) polylines as a GeoJSON FeatureCollection of LineStrings"""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {},
                "geometry": {"type": "LineString", "coordinates": [[lon, lat] for lat, lon in line]},
            }
            for line in polylines
        ],
    }


def bounds_polygon(bounds: BoundingBox):
    ring = [
        [bounds.west, bounds.south], [bounds.east, bounds.south],
        [bounds.east, bounds.north], [bounds.west, bounds.north],
        [bounds.west, bounds.south],
    ]
    return {
        "type": "FeatureCollection",
        "features": [{"type": "Feature", "properties": {},
                      "geometry": {"type": "Polygon", "coordinates": [ring]}}],
    }


@pytest.fixture
def geojson_files(tmp_path, campus_polylines, campus_bounds):
    paths_file = tmp_path / "paths.geojson"
    boundary_file = tmp_path / "boundary.geojson"
    paths_file.write_text(json.dumps(to_feature_collection(campus_polylines)))
    boundary_file.write_text(json.dumps(bounds_polygon(campus_bounds)))
    return str(paths_file), str(boundary_file)
