"""Shortest walking path search."""

import heapq
from typing import Callable, Optional

from .graph import PathGraph


def shortest_path(graph: PathGraph, start: str, end: str,
                  on_settle: Optional[Callable[[str, float], None]] = None) -> list[str]:
    """Dijkstra from start to end, minimizing total meters.

    Returns vertex keys from start to end. When end cannot be reached the
    predecessor chain is broken and the result does not begin at start
    (typically just [end]); callers must check result[0] == start and
    len(result) >= 2 before trusting it.

    on_settle is called with (key, distance) each time a vertex is finalized,
    in finalization order.

    Raises KeyError if start or end is not a graph vertex.
    """
    if not graph.has_vertex(start):
        raise KeyError(start)
    if not graph.has_vertex(end):
        raise KeyError(end)

    distances: dict[str, float] = {start: 0.0}
    previous: dict[str, str] = {}
    visited: set[str] = set()

    counter = 0
    frontier: list = [(0.0, counter, start)]

    while frontier:
        dist, _, node = heapq.heappop(frontier)
        if node in visited:
            continue
        visited.add(node)
        if on_settle:
            on_settle(node, dist)
        if node == end:
            break

        for neighbor, weight in graph.neighbors(node):
            if neighbor in visited:
                continue
            alt = dist + weight
            if alt < distances.get(neighbor, float("inf")):
                distances[neighbor] = alt
                previous[neighbor] = node
                counter += 1
                heapq.heappush(frontier, (alt, counter, neighbor))

    # Walk predecessors back from end
    path = [end]
    current = end
    while current in previous:
        current = previous[current]
        path.append(current)
    path.reverse()
    return path


def is_complete_path(path: list[str], start: str) -> bool:
    """True if a shortest_path result actually connects start to its end"""
    return len(path) >= 2 and path[0] == start


def path_weight(graph: PathGraph, path: list[str]) -> float:
    """Total meters along a vertex-key path"""
    total = 0.0
    for i in range(1, len(path)):
        weight = graph.edge_weight(path[i - 1], path[i])
        if weight is None:
            raise ValueError(f"No edge between {path[i - 1]} and {path[i]}")
        total += weight
    return total
