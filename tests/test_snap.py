import pytest

from campus_walk import CONFIG, nearest_path_point
from campus_walk.config import snap_radius_meters
from campus_walk.snap import nearest_distance
from conftest import offset


def test_default_radius():
    assert snap_radius_meters() == pytest.approx(1110)


def test_returns_nearest_point():
    points = [offset(0, 0), offset(50, 0), offset(100, 0)]
    query = offset(60, 5)
    assert nearest_path_point(*query, points) == points[1]


def test_point_beyond_radius_is_rejected():
    points = [offset(0, 0)]
    query = offset(2000, 0)
    assert nearest_path_point(*query, points, max_radius=1110) is None
    assert nearest_path_point(*query, points) is None


def test_point_within_radius_is_accepted():
    points = [offset(0, 0)]
    assert nearest_path_point(*offset(1000, 0), points) == points[0]
    assert nearest_path_point(*offset(1000, 0), points, max_radius=500) is None


def test_radius_follows_config():
    CONFIG["snap_radius_degrees"] = 0.001
    points = [offset(0, 0)]
    assert nearest_path_point(*offset(100, 0), points) == points[0]
    assert nearest_path_point(*offset(200, 0), points) is None


def test_empty_points():
    assert nearest_path_point(*offset(0, 0), []) is None
    assert nearest_distance(*offset(0, 0), []) == float("inf")


def test_tie_keeps_first_point():
    points = [[12.92, 80.12], [12.92, 80.12]]
    assert nearest_path_point(12.921, 80.12, points) is points[0]


def test_accepts_generator():
    points = [offset(0, 0), offset(50, 0)]
    assert nearest_path_point(*offset(45, 0), (p for p in points)) == points[1]


def test_nearest_distance():
    points = [offset(0, 0), offset(300, 0)]
    assert nearest_distance(*offset(0, 40), points) == pytest.approx(40, abs=0.01)
