"""Departure/arrival travel windows and the observation look-back window."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Literal, NamedTuple

TravelMode = Literal["departure", "arrival"]

DEPARTURE_SPAN = timedelta(hours=4)
ARRIVAL_MARGIN = timedelta(hours=2)


class TimeWindow(NamedTuple):
    start: datetime
    end: datetime


def travel_window(mode: TravelMode, when: datetime, route_km: float, speed_kmh: float = 90.0) -> TimeWindow:
    """Window of interest for a trip.

    Departure mode covers the four hours after ``when``. Arrival mode estimates
    the departure time from ``route_km`` at ``speed_kmh`` and covers two hours
    either side of it.
    """
    if speed_kmh <= 0:
        raise ValueError("speed_kmh must be > 0.")
    if mode == "arrival":
        eta = timedelta(seconds=round(route_km / speed_kmh * 3600))
        departure = when - eta
        return TimeWindow(departure - ARRIVAL_MARGIN, departure + ARRIVAL_MARGIN)
    if mode == "departure":
        return TimeWindow(when, when + DEPARTURE_SPAN)
    raise ValueError(f"Unknown travel mode {mode!r}.")


def observation_window(now: datetime, lookback_hours: float) -> TimeWindow:
    """Recent-observation window ``[now - lookback, now]``.

    The end is nudged one microsecond past ``now`` so a reading stamped exactly
    ``now`` survives the half-open ``[start, end)`` provider filter.
    """
    return TimeWindow(now - timedelta(hours=lookback_hours), now + timedelta(microseconds=1))
