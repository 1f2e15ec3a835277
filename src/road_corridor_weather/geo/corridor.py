"""Select the stations that sit along a route and order them in travel order."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from ..models import GeoPoint, Station
from .distance import point_to_polyline_m, progress_along_polyline_m


class StationPlacement(NamedTuple):
    """Where a station sits relative to the route."""

    station: Station
    distance_m: float
    progress_m: float


def measure(stations: Iterable[Station], route: Sequence[GeoPoint]) -> list[StationPlacement]:
    """Compute distance-to-route and progress-along-route for every station."""
    return [
        StationPlacement(
            station=station,
            distance_m=point_to_polyline_m(station.location, route),
            progress_m=progress_along_polyline_m(station.location, route),
        )
        for station in stations
    ]


def filter_by_buffer(
    stations: Iterable[Station],
    route: Sequence[GeoPoint],
    buffer_m: float,
) -> list[Station]:
    """Return stations within ``buffer_m`` of the route, ordered start to end.

    The boundary is inclusive. Ordering is by progress along the route, then by
    distance so the closer of two stations projecting to the same spot comes
    first. A route with fewer than two points yields an empty list.
    """
    if buffer_m < 0:
        raise ValueError(f"buffer_m must be >= 0, got {buffer_m}.")
    if len(route) < 2:
        return []

    kept = [p for p in measure(stations, route) if p.distance_m <= buffer_m]
    kept.sort(key=lambda p: (p.progress_m, p.distance_m))
    return [p.station for p in kept]


class CorridorResolver:
    """Corridor filter bound to a default buffer width."""

    def __init__(self, buffer_m: float, logger: logging.Logger | None = None) -> None:
        if buffer_m < 0:
            raise ValueError(f"buffer_m must be >= 0, got {buffer_m}.")
        self.buffer_m = buffer_m
        self.logger = logger or logging.getLogger("road_corridor_weather.geo.corridor")

    def resolve(
        self,
        stations: Sequence[Station],
        route: Sequence[GeoPoint],
        buffer_m: float | None = None,
    ) -> list[Station]:
        width = self.buffer_m if buffer_m is None else buffer_m
        corridor = filter_by_buffer(stations, route, width)
        self.logger.debug(
            "Corridor kept %d of %d stations (buffer=%.0fm, route_points=%d)",
            len(corridor), len(stations), width, len(route),
        )
        return corridor

    def placements(
        self,
        stations: Sequence[Station],
        route: Sequence[GeoPoint],
        buffer_m: float | None = None,
    ) -> list[StationPlacement]:
        """Placements for the corridor stations only, in corridor order."""
        corridor_ids = {s.id for s in self.resolve(stations, route, buffer_m)}
        placed = [p for p in measure(stations, route) if p.station.id in corridor_ids]
        placed.sort(key=lambda p: (p.progress_m, p.distance_m))
        return placed
