import networkx as nx
import pytest

from campus_walk import PathGraph, path_weight, shortest_path, vertex_key
from campus_walk.solver import is_complete_path
from conftest import offset


@pytest.fixture
def l_shape():
    a, b, c = offset(0, 0), offset(10, 0), offset(10, 10)
    graph = PathGraph()
    graph.add_edge(*a, *b)
    graph.add_edge(*b, *c)
    return graph, vertex_key(*a), vertex_key(*b), vertex_key(*c)


def test_l_shaped_path(l_shape):
    graph, a, b, c = l_shape
    path = shortest_path(graph, a, c)
    assert path == [a, b, c]
    assert path_weight(graph, path) == pytest.approx(20, abs=0.01)
    assert is_complete_path(path, a)


def test_prefers_shorter_total_over_fewer_edges():
    graph = PathGraph()
    a, b, c, d = offset(0, 0), offset(0, 10), offset(0, 20), offset(0, 30)
    graph.add_edge(*a, *b)
    graph.add_edge(*b, *c)
    graph.add_edge(*c, *d)
    # two-edge detour, longer than the three-edge straight walk
    detour = offset(40, 15)
    graph.add_edge(*a, *detour)
    graph.add_edge(*detour, *d)

    path = shortest_path(graph, vertex_key(*a), vertex_key(*d))
    assert path == [vertex_key(*p) for p in (a, b, c, d)]


def test_takes_shortcut_when_present(l_shape):
    graph, a, b, c = l_shape
    graph.add_edge(*offset(0, 0), *offset(10, 10))
    assert shortest_path(graph, a, c) == [a, c]


def test_unreachable_end(campus_graph):
    gate = vertex_key(*offset(0, 0))
    west = vertex_key(*offset(50, -600))
    path = shortest_path(campus_graph, gate, west)
    assert path == [west]
    assert not is_complete_path(path, gate)


def test_start_equals_end(campus_graph):
    gate = vertex_key(*offset(0, 0))
    path = shortest_path(campus_graph, gate, gate)
    assert path == [gate]
    assert not is_complete_path(path, gate)


def test_missing_vertex_raises(campus_graph):
    gate = vertex_key(*offset(0, 0))
    with pytest.raises(KeyError):
        shortest_path(campus_graph, gate, "0.000000,0.000000")
    with pytest.raises(KeyError):
        shortest_path(campus_graph, "0.000000,0.000000", gate)


def test_settled_distances_never_decrease(campus_graph):
    gate = vertex_key(*offset(0, 0))
    canteen = vertex_key(*offset(100, 100))
    settled = []
    shortest_path(campus_graph, gate, canteen, on_settle=lambda key, dist: settled.append((key, dist)))

    distances = [dist for _, dist in settled]
    assert distances == sorted(distances)
    assert settled[0] == (gate, 0.0)
    assert settled[-1][0] == canteen
    assert len({key for key, _ in settled}) == len(settled)


def test_unreachable_search_settles_whole_component(campus_graph):
    gate = vertex_key(*offset(0, 0))
    west = vertex_key(*offset(50, -600))
    settled = []
    shortest_path(campus_graph, gate, west, on_settle=lambda key, dist: settled.append(key))
    assert len(settled) == 7
    assert west not in settled


def test_matches_networkx_dijkstra(campus_graph):
    main_component = [vertex_key(*offset(n, e)) for n, e in
                      ((0, 0), (50, 0), (100, 0), (150, 0), (200, 0), (100, 50), (100, 100))]
    for source in main_component:
        for target in main_component:
            if source == target:
                continue
            path = shortest_path(campus_graph, source, target)
            assert path[0] == source and path[-1] == target
            expected = nx.dijkstra_path_length(campus_graph.graph, source, target, weight="length")
            assert path_weight(campus_graph, path) == pytest.approx(expected)


def test_consecutive_vertices_share_an_edge(campus_graph):
    path = shortest_path(campus_graph, vertex_key(*offset(200, 0)), vertex_key(*offset(100, 100)))
    assert len(path) == 5
    for u, v in zip(path, path[1:]):
        assert campus_graph.edge_weight(u, v) is not None


def test_path_weight_rejects_gaps(campus_graph):
    with pytest.raises(ValueError):
        path_weight(campus_graph, [vertex_key(*offset(0, 0)), vertex_key(*offset(200, 0))])
    assert path_weight(campus_graph, [vertex_key(*offset(0, 0))]) == 0
