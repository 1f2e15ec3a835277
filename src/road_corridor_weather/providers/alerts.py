"""Veður.is CAP (Common Alerting Protocol) alerts near station locations."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from ..exceptions import ProviderError
from ..models import Alert, Station
from .cache import Clock, TTLCache
from .http import HttpProvider

CAP_PATH_TEMPLATE = "/cap/v1/lat/{lat}/long/{lon}/srid/4326/distance/{km}/"


class VedurCapProvider(HttpProvider):
    """Alerts within a fixed radius of a point, cached per coordinate pair."""

    provider_name = "vedur-cap"

    def __init__(self, settings: Any, logger: logging.Logger, *, clock: Clock | None = None) -> None:
        super().__init__(
            base_url=str(settings.vedur_base_url),
            user_agent=settings.http_user_agent,
            timeout_seconds=settings.http_timeout_seconds,
            logger=logger,
            max_retries=getattr(settings, "http_max_retries", 1),
            retry_delay_seconds=getattr(settings, "http_retry_delay_seconds", 1.0),
        )
        self.radius_km = getattr(settings, "alerts_radius_km", 30)
        self.cache: TTLCache[list[Alert]] = TTLCache(
            timedelta(seconds=settings.alerts_ttl_seconds),
            name="vedur cap alerts",
            clock=clock,
            logger=logger,
        )

    def fetch_alerts(self, lat: float, lon: float) -> list[Alert]:
        """Active alerts near ``(lat, lon)``; empty when unavailable."""
        key = f"{lat},{lon}"
        alerts = self.cache.get_or_refresh(key, lambda: self._fetch_alerts(lat, lon))
        return list(alerts or [])

    def alerts_for_stations(self, stations: Sequence[Station]) -> dict[str, list[Alert]]:
        return {station.id: self.fetch_alerts(station.lat, station.lon) for station in stations}

    def _fetch_alerts(self, lat: float, lon: float) -> list[Alert]:
        path = CAP_PATH_TEMPLATE.format(lat=lat, lon=lon, km=self.radius_km)
        payload = self._request_json(path, context="cap alerts lookup")
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ProviderError(
                f"vedur cap payload had unexpected type {type(payload).__name__}."
            )
        alerts: list[Alert] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            try:
                alerts.append(Alert.model_validate(item))
            except ValidationError as exc:
                self.logger.debug("Dropping malformed CAP alert: %s", exc)
        return alerts
