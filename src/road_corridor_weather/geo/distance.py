"""Great-circle distances and point-to-polyline projection on a spherical earth.

All points are ``GeoPoint(lon, lat)`` in WGS84 degrees. Distances are meters.
Segment projection runs on a local equirectangular plane whose x axis is
scaled by the cosine of the segment's mean latitude; the projected point is
then measured with haversine so the returned distance stays great-circle.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import NamedTuple

from ..models import GeoPoint

EARTH_RADIUS_M = 6_371_008.8


class SegmentProjection(NamedTuple):
    """Closest point on a segment: distance to it and clamped position ``t``."""

    distance_m: float
    t: float


def haversine_m(p1: GeoPoint, p2: GeoPoint) -> float:
    """Great-circle distance in meters between two points."""
    phi1 = math.radians(p1.lat)
    phi2 = math.radians(p2.lat)
    d_phi = math.radians(p2.lat - p1.lat)
    d_lambda = math.radians(p2.lon - p1.lon)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push `a` marginally above 1 for antipodal points.
    c = 2 * math.asin(min(1.0, math.sqrt(a)))
    return EARTH_RADIUS_M * c


def polyline_length_m(route: Sequence[GeoPoint]) -> float:
    """Total length of the route; 0.0 when it has fewer than two points."""
    if len(route) < 2:
        return 0.0
    return sum(haversine_m(a, b) for a, b in zip(route, route[1:]))


def point_to_segment(point: GeoPoint, seg_start: GeoPoint, seg_end: GeoPoint) -> SegmentProjection:
    """Project ``point`` onto ``[seg_start, seg_end]``.

    ``t == 0`` means the closest point is ``seg_start`` and ``t == 1`` means
    ``seg_end``. A zero-length segment always yields ``t == 0``.
    """
    cos_lat0 = math.cos(math.radians((seg_start.lat + seg_end.lat) / 2.0))

    x1 = math.radians(seg_start.lon) * cos_lat0
    y1 = math.radians(seg_start.lat)
    x2 = math.radians(seg_end.lon) * cos_lat0
    y2 = math.radians(seg_end.lat)
    xp = math.radians(point.lon) * cos_lat0
    yp = math.radians(point.lat)

    dx = x2 - x1
    dy = y2 - y1
    seg_len_sq = dx * dx + dy * dy
    t = 0.0 if seg_len_sq == 0 else ((xp - x1) * dx + (yp - y1) * dy) / seg_len_sq
    t = max(0.0, min(1.0, t))

    projected = GeoPoint(
        lon=math.degrees((x1 + t * dx) / cos_lat0),
        lat=math.degrees(y1 + t * dy),
    )
    return SegmentProjection(distance_m=haversine_m(point, projected), t=t)


def point_to_polyline_m(point: GeoPoint, route: Sequence[GeoPoint]) -> float:
    """Shortest distance from ``point`` to any route segment.

    Returns ``math.inf`` for a route with fewer than two points so such a
    point fails every buffer check.
    """
    if len(route) < 2:
        return math.inf
    return min(point_to_segment(point, a, b).distance_m for a, b in zip(route, route[1:]))


def progress_along_polyline_m(point: GeoPoint, route: Sequence[GeoPoint]) -> float:
    """Distance from the route start to the projection of ``point`` on its closest segment.

    When several segments are equally close (typically at a shared vertex) the
    earliest segment wins, which keeps ordering stable near waypoints.
    """
    if len(route) < 2:
        return 0.0

    best_distance = math.inf
    best_progress = 0.0
    length_before = 0.0
    for seg_start, seg_end in zip(route, route[1:]):
        projection = point_to_segment(point, seg_start, seg_end)
        seg_len = haversine_m(seg_start, seg_end)
        if projection.distance_m < best_distance:
            best_distance = projection.distance_m
            best_progress = length_before + seg_len * projection.t
        length_before += seg_len
    return best_progress
