"""Walkable path graph representation."""

from typing import Callable, Iterable, Optional, Sequence

import networkx as nx

from .config import CONFIG
from .geo import haversine_distance, vertex_key
from .models import Coord
from .snap import nearest_path_point

Containment = Callable[[float, float], bool]  # (lat, lon) -> inside?


class PathGraph:
    """Graph of campus footpaths keyed by rounded coordinate.

    Built once from a geometry snapshot and treated as read-only afterwards.
    Reloading geometry means building a new PathGraph, never mutating one in use.
    """

    def __init__(self):
        self.graph = nx.Graph()
        self.nodes: dict[str, Coord] = {}  # vertex key -> (lat, lon) of the key
        self.polylines: list[list[Coord]] = []  # raw input geometry, lat-first
        self.pruned_segments = 0

    @classmethod
    def from_polylines(cls, polylines: Optional[Iterable[Sequence[Coord]]],
                       contains: Optional[Containment] = None) -> "PathGraph":
        """Build a graph from (lat, lon) polylines.

        A segment contributes an edge only when both endpoints pass `contains`;
        one endpoint outside drops the whole segment.
        """
        path_graph = cls()
        path_graph.build(polylines or [], contains)
        return path_graph

    def build(self, polylines: Iterable[Sequence[Coord]], contains: Optional[Containment] = None):
        for line in polylines:
            coords = [(float(lat), float(lon)) for lat, lon in line]
            self.polylines.append(coords)

            for i in range(len(coords) - 1):
                lat1, lon1 = coords[i]
                lat2, lon2 = coords[i + 1]

                if contains is not None and not (contains(lat1, lon1) and contains(lat2, lon2)):
                    self.pruned_segments += 1
                    continue

                self.add_edge(lat1, lon1, lat2, lon2)

        print(f"Built graph: {len(self.nodes)} vertices, {self.graph.number_of_edges()} edges"
              + (f", pruned {self.pruned_segments} segments outside boundary" if self.pruned_segments else ""))

    def add_vertex(self, lat: float, lon: float) -> str:
        key = vertex_key(lat, lon)
        if key not in self.nodes:
            self.nodes[key] = (round(lat, CONFIG["key_precision"]), round(lon, CONFIG["key_precision"]))
            self.graph.add_node(key)
        return key

    def add_edge(self, lat1: float, lon1: float, lat2: float, lon2: float) -> Optional[tuple[str, str]]:
        """Insert an undirected edge weighted by surface distance in meters.

        Endpoints that round to the same key give a vertex but no edge.
        Re-adding an existing edge keeps the shorter weight.
        """
        key1 = self.add_vertex(lat1, lon1)
        key2 = self.add_vertex(lat2, lon2)
        if key1 == key2:
            return None

        length = haversine_distance(lat1, lon1, lat2, lon2)
        existing = self.graph.get_edge_data(key1, key2)
        if existing is None or length < existing["length"]:
            self.graph.add_edge(key1, key2, length=length)
        return key1, key2

    def __len__(self) -> int:
        return len(self.nodes)

    def is_empty(self) -> bool:
        return not self.nodes

    def has_vertex(self, key: str) -> bool:
        return key in self.nodes

    def get_node_location(self, key: str) -> Optional[Coord]:
        """Get lat/lon of a vertex"""
        return self.nodes.get(key)

    def neighbors(self, key: str) -> list[tuple[str, float]]:
        """Adjacency list of a vertex: (neighbor key, weight in meters)"""
        return [(other, data["length"]) for other, data in self.graph[key].items()]

    def edge_weight(self, key1: str, key2: str) -> Optional[float]:
        data = self.graph.get_edge_data(key1, key2)
        return data["length"] if data else None

    def edges(self) -> list[tuple[str, str, float]]:
        return [(u, v, d["length"]) for u, v, d in self.graph.edges(data=True)]

    def snap_candidates(self) -> Iterable[Coord]:
        """Points a coordinate may snap to.

        Graph vertices by default. With snap_to_pruned_vertices every raw
        polyline vertex is a candidate, including ones the boundary removed.
        """
        if CONFIG["snap_to_pruned_vertices"]:
            return (point for line in self.polylines for point in line)
        return self.nodes.values()

    def snap(self, lat: float, lon: float, max_radius: Optional[float] = None) -> Optional[Coord]:
        """Nearest candidate point within max_radius meters, or None"""
        return nearest_path_point(lat, lon, self.snap_candidates(), max_radius)

    def stats(self) -> dict:
        return {
            "vertices": len(self.nodes),
            "edges": self.graph.number_of_edges(),
            "polylines": len(self.polylines),
            "pruned_segments": self.pruned_segments,
        }
