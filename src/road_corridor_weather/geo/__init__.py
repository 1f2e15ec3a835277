"""Geodesic helpers and corridor resolution along a fixed route."""

from .corridor import CorridorResolver, StationPlacement, filter_by_buffer, measure
from .distance import (
    EARTH_RADIUS_M,
    SegmentProjection,
    haversine_m,
    point_to_polyline_m,
    point_to_segment,
    polyline_length_m,
    progress_along_polyline_m,
)

__all__ = [
    "EARTH_RADIUS_M",
    "CorridorResolver",
    "SegmentProjection",
    "StationPlacement",
    "filter_by_buffer",
    "haversine_m",
    "measure",
    "point_to_polyline_m",
    "point_to_segment",
    "polyline_length_m",
    "progress_along_polyline_m",
]
