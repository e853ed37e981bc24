import pytest

from campus_walk import CONFIG, BoundingBox, PathGraph, haversine_distance, vertex_key
from conftest import offset


def test_campus_graph_shape(campus_graph):
    # spine 5 + branch 2 new + west walk 2
    assert len(campus_graph) == 9
    assert campus_graph.stats() == {
        "vertices": 9,
        "edges": 7,
        "polylines": 3,
        "pruned_segments": 0,
    }


def test_edges_are_symmetric(campus_graph):
    for u, v, w in campus_graph.edges():
        assert campus_graph.edge_weight(u, v) == w
        assert campus_graph.edge_weight(v, u) == w
        assert (v, w) in campus_graph.neighbors(u)
        assert (u, w) in campus_graph.neighbors(v)


def test_edge_weight_is_surface_distance():
    graph = PathGraph()
    a, b = offset(0, 0), offset(30, 40)
    graph.add_edge(*a, *b)
    assert graph.edge_weight(vertex_key(*a), vertex_key(*b)) == pytest.approx(
        haversine_distance(*a, *b))
    assert graph.edge_weight(vertex_key(*a), vertex_key(*b)) == pytest.approx(50, abs=0.01)


def test_shared_vertices_merge(campus_graph):
    quad = vertex_key(*offset(100, 0))
    neighbors = {key for key, _ in campus_graph.neighbors(quad)}
    assert neighbors == {
        vertex_key(*offset(50, 0)),
        vertex_key(*offset(150, 0)),
        vertex_key(*offset(100, 50)),
    }


def test_coordinates_that_round_together_merge():
    graph = PathGraph.from_polylines([
        [(12.92, 80.12), (12.921, 80.12)],
        [(12.9210000004, 80.1200000003), (12.921, 80.121)],
    ])
    assert len(graph) == 3
    assert graph.stats()["edges"] == 2


def test_segment_with_one_endpoint_outside_is_dropped():
    bounds = BoundingBox(*offset(-10, -10), *offset(60, 10))
    graph = PathGraph.from_polylines([[offset(0, 0), offset(50, 0), offset(100, 0)]], bounds.contains)
    assert len(graph) == 2
    assert graph.stats()["edges"] == 1
    assert graph.pruned_segments == 1
    assert not graph.has_vertex(vertex_key(*offset(100, 0)))


def test_boundary_prunes_campus(campus_polylines):
    bounds = BoundingBox(*offset(-50, -50), *offset(120, 200))
    graph = PathGraph.from_polylines(campus_polylines, bounds.contains)
    assert len(graph) == 5
    assert graph.stats()["edges"] == 4
    # (100,0)-(150,0), (150,0)-(200,0) and the west walk
    assert graph.pruned_segments == 3


@pytest.mark.parametrize("polylines", [None, [], [[]], [[offset(0, 0)]]])
def test_degenerate_geometry(polylines):
    graph = PathGraph.from_polylines(polylines)
    assert graph.stats()["edges"] == 0
    assert len(graph) == 0
    assert graph.is_empty()


def test_zero_length_segment_gives_vertex_without_loop():
    graph = PathGraph()
    assert graph.add_edge(12.92, 80.12, 12.9200000001, 80.12) is None
    assert len(graph) == 1
    assert graph.edges() == []


def test_duplicate_edge_keeps_shorter_weight():
    graph = PathGraph()
    a, b = offset(0, 0), offset(10, 0)
    graph.add_edge(*a, *b)
    first = graph.edge_weight(vertex_key(*a), vertex_key(*b))
    graph.add_edge(*b, *a)
    assert graph.stats()["edges"] == 1
    assert graph.edge_weight(vertex_key(*a), vertex_key(*b)) == pytest.approx(first)


def test_node_location_is_rounded():
    graph = PathGraph()
    key = graph.add_vertex(12.92000049, 80.12000051)
    assert graph.get_node_location(key) == (12.92, 80.120001)
    assert graph.get_node_location("0.000000,0.000000") is None


def test_snap_candidates_exclude_pruned_vertices_by_default(campus_polylines):
    bounds = BoundingBox(*offset(-50, -50), *offset(120, 200))
    graph = PathGraph.from_polylines(campus_polylines, bounds.contains)
    outside = offset(200, 0)

    assert len(list(graph.snap_candidates())) == 5
    assert graph.snap(*outside) == graph.get_node_location(vertex_key(*offset(100, 0)))

    CONFIG["snap_to_pruned_vertices"] = True
    assert len(list(graph.snap_candidates())) == 10
    assert graph.snap(*outside) == outside


def test_snap_respects_radius(campus_graph):
    assert campus_graph.snap(*offset(2000, 0)) is None
    assert campus_graph.snap(*offset(2000, 0), max_radius=5000) is not None
