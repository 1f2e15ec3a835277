"""Fixed Reykjavík ↔ Ísafjörður route used as the corridor polyline."""

from __future__ import annotations

from .exceptions import RouteError
from .geo.distance import polyline_length_m
from .models import GeoPoint

RVK_ISF: tuple[GeoPoint, ...] = (
    GeoPoint(-21.8046, 64.1238),  # Reykjavík, Vesturlandsvegur
    GeoPoint(-21.9603, 64.4755),  # Hafnarfjall
    GeoPoint(-21.9101, 64.5439),  # Borgarnes
    GeoPoint(-21.5154, 64.8716),  # Brattabrekka
    GeoPoint(-21.7632, 65.1082),  # Búðardalur
    GeoPoint(-21.8330, 65.5524),  # Þröskuldar
    GeoPoint(-21.6951, 65.7015),  # Hólmavík
    GeoPoint(-22.1291, 65.7503),  # Steingrímsfjarðarheiði
    GeoPoint(-22.7303, 66.0403),  # Ögur
    GeoPoint(-22.9888, 66.0279),  # Súðavík
    GeoPoint(-23.0465, 66.0977),  # Arnarfjörður
    GeoPoint(-23.1239, 66.0746),  # Ísafjörður
)

ENDPOINTS = ("RVK", "IFJ")


def get_route(origin: str = "RVK", destination: str = "IFJ") -> list[GeoPoint]:
    """Waypoints in travel order; the IFJ -> RVK direction is the reversed list."""
    origin = origin.strip().upper()
    destination = destination.strip().upper()
    if (origin, destination) == ("RVK", "IFJ"):
        return list(RVK_ISF)
    if (origin, destination) == ("IFJ", "RVK"):
        return list(reversed(RVK_ISF))
    raise RouteError(
        f"Unknown route {origin!r} -> {destination!r}; expected RVK -> IFJ or IFJ -> RVK."
    )


def route_length_m(route: list[GeoPoint] | tuple[GeoPoint, ...]) -> float:
    return polyline_length_m(route)
