"""MET Norway (yr.no) locationforecast provider for corridor stations."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from ..exceptions import ProviderError
from ..models import ForecastPoint, Station
from .cache import Clock, TTLCache, utc_now
from .http import HttpProvider
from .parsing import MalformedRecord, parse_local_timestamp, parse_number

COMPACT_PATH = "/weatherapi/locationforecast/2.0/compact"


class YrNoForecastProvider(HttpProvider):
    """Hourly point forecasts, cached per rounded coordinate pair."""

    provider_name = "yr.no"

    def __init__(self, settings: Any, logger: logging.Logger, *, clock: Clock | None = None) -> None:
        super().__init__(
            base_url=str(settings.forecast_base_url),
            user_agent=settings.http_user_agent,
            timeout_seconds=settings.http_timeout_seconds,
            logger=logger,
            max_retries=getattr(settings, "http_max_retries", 1),
            retry_delay_seconds=getattr(settings, "http_retry_delay_seconds", 1.0),
        )
        self._clock = clock or utc_now
        self.cache: TTLCache[dict[str, Any]] = TTLCache(
            timedelta(seconds=settings.forecast_ttl_seconds),
            name="yr.no forecast",
            clock=clock,
            logger=logger,
        )

    def fetch_forecast_for_stations(
        self,
        stations: Sequence[Station],
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ForecastPoint]:
        """Forecast steps for each station, skipping steps before ``start`` (default now)."""
        start = start or self._clock()
        points: list[ForecastPoint] = []
        for station in stations:
            # met.no asks clients to send at most four decimals.
            lat = round(station.lat, 4)
            lon = round(station.lon, 4)
            payload = self.cache.get_or_refresh(
                f"{lat},{lon}",
                lambda lat=lat, lon=lon: self._fetch_compact(lat, lon),
            )
            if payload is None:
                continue
            for point in self._normalize_timeseries(station, payload):
                if point.time < start:
                    continue
                if end is not None and point.time >= end:
                    continue
                points.append(point)
        return points

    def _fetch_compact(self, lat: float, lon: float) -> dict[str, Any]:
        payload = self._request_json(
            COMPACT_PATH,
            context="locationforecast lookup",
            params={"lat": lat, "lon": lon},
        )
        if not isinstance(payload, dict):
            raise ProviderError(
                f"yr.no payload had unexpected type {type(payload).__name__}."
            )
        return payload

    def _normalize_timeseries(self, station: Station, payload: dict[str, Any]) -> list[ForecastPoint]:
        properties = payload.get("properties")
        timeseries = properties.get("timeseries") if isinstance(properties, dict) else None
        if not isinstance(timeseries, list):
            self.logger.debug("yr.no payload for %s missing properties.timeseries", station.id)
            return []

        points: list[ForecastPoint] = []
        for step in timeseries:
            if not isinstance(step, dict):
                continue
            data = step.get("data")
            if not isinstance(data, dict):
                continue
            details = _nested(data, "instant", "details")
            if details is None:
                continue
            next_hour = _nested(data, "next_1_hours", "details") or {}
            try:
                points.append(
                    ForecastPoint(
                        station_id=station.id,
                        time=parse_local_timestamp(step.get("time"), None),
                        location=station.location,
                        temp_c=parse_number(details.get("air_temperature")),
                        wind_ms=parse_number(details.get("wind_speed")),
                        precip_mm=parse_number(next_hour.get("precipitation_amount")),
                    )
                )
            except MalformedRecord as exc:
                self.logger.debug("Dropping yr.no step for %s: %s", station.id, exc)
        return points


def _nested(data: dict[str, Any], *keys: str) -> dict[str, Any] | None:
    node: Any = data
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node if isinstance(node, dict) else None
