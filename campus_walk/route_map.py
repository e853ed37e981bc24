"""HTML map of a route and the user's progress along it."""

from typing import Optional, Sequence

import folium

from .geo import format_distance
from .models import Coord, Progress

COMPLETED_COLOR = "#9ca3af"
REMAINING_COLOR = "#2E7DFF"


def create_route_map(progress: Progress, current: Optional[Coord] = None,
                     paths: Optional[Sequence[Sequence[Coord]]] = None) -> folium.Map:
    """Build a folium map showing the walked part of the route in grey and the rest in blue.

    paths, when given, is drawn underneath as faint context.
    """
    route = progress.completed + progress.remaining[1:]
    if not route:
        raise ValueError("Cannot map an empty route")

    center_lat = sum(p[0] for p in route) / len(route)
    center_lon = sum(p[1] for p in route) / len(route)

    m = folium.Map(location=[center_lat, center_lon], zoom_start=18, tiles=None)
    folium.TileLayer("CartoDB positron", name="Light").add_to(m)
    folium.TileLayer("CartoDB dark_matter", name="Dark").add_to(m)

    if paths:
        paths_layer = folium.FeatureGroup(name="Campus paths", show=True)
        for line in paths:
            if len(line) >= 2:
                folium.PolyLine(list(line), color="#cbd5e1", weight=2, opacity=0.6).add_to(paths_layer)
        paths_layer.add_to(m)

    if len(progress.completed) >= 2:
        folium.PolyLine(
            list(progress.completed),
            color=COMPLETED_COLOR,
            weight=6,
            opacity=0.9,
            popup="Completed"
        ).add_to(m)

    if len(progress.remaining) >= 2:
        folium.PolyLine(
            list(progress.remaining),
            color=REMAINING_COLOR,
            weight=8,
            opacity=0.9,
            popup=(f"{format_distance(progress.remaining_distance)}, "
                   f"{progress.remaining_minutes} min remaining")
        ).add_to(m)

    folium.CircleMarker(
        location=list(route[0]),
        radius=8,
        color="#fff",
        fill=True,
        fill_color=REMAINING_COLOR,
        fill_opacity=1,
        popup="Start"
    ).add_to(m)

    folium.Marker(
        list(route[-1]),
        popup="Destination",
        icon=folium.Icon(color="red", icon="flag")
    ).add_to(m)

    if current:
        folium.Marker(
            list(current),
            popup="You are here",
            icon=folium.Icon(color="blue", icon="user")
        ).add_to(m)

    m.fit_bounds([[min(p[0] for p in route), min(p[1] for p in route)],
                  [max(p[0] for p in route), max(p[1] for p in route)]])
    folium.LayerControl().add_to(m)
    return m


def save_route_map(progress: Progress, output_path: str, current: Optional[Coord] = None,
                   paths: Optional[Sequence[Sequence[Coord]]] = None):
    m = create_route_map(progress, current=current, paths=paths)
    m.save(output_path)
    print(f"Route map saved to: {output_path}")
