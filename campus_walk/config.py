"""Configuration settings for Campus Walk."""

CONFIG = {
    "key_precision": 6,  # decimal digits in vertex keys (~11 cm)
    # Snapping acceptance radius = snap_radius_degrees * meters_per_degree (~1110 m)
    "snap_radius_degrees": 0.01,
    "meters_per_degree": 111000,
    "snap_to_pruned_vertices": False,  # True = snap to raw polyline vertices, even ones outside the boundary
    "walking_speed": 75,  # meters per minute (~4.5 km/h)
    "boundary_mode": "bbox",  # "bbox" or "polygon"
    "default_start": None,  # (lat, lon) used when there is no --from and no GPS fix
    "gps_poll_interval": 3,  # seconds
    "simulation_tick": 1.0,  # seconds per route point when simulating
    "log_interval": 10,  # seconds between STATE log entries
    "max_fix_accuracy": 0,  # meters - ignore sensor fixes less accurate than this, 0 disables
    # GeoJSON fetching
    "geojson_cache_dir": "geojson_cache",
    "geojson_cache_max_age": 7 * 24 * 3600,  # 7 days
    "geojson_fetch_timeout": 30,  # seconds
}


def snap_radius_meters() -> float:
    """Default snapping acceptance radius in meters"""
    return CONFIG["snap_radius_degrees"] * CONFIG["meters_per_degree"]
