"""Veðurstofa Íslands (IMO) automatic weather station provider."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from ..exceptions import ProviderError
from ..models import GeoPoint, Observation, Station
from .base import StationProvider
from .cache import Clock, TTLCache
from .http import HttpProvider
from .parsing import (
    MalformedRecord,
    in_window,
    numeric_station_suffix,
    parse_local_timestamp,
    parse_number,
    parse_text,
    require_aware,
)

STATION_PREFIX = "imo:"
LATEST_PATH = "/weather/observations/aws/10min/latest"

DEFAULT_STATIONS: tuple[Station, ...] = (
    Station(id="imo:1475", name="vedur.is Reykjavík, Faxaflói",
            location=GeoPoint(-21.902, 64.1275), provider_kind="IMO"),
    Station(id="imo:2481", name="vedur.is Hólmavík",
            location=GeoPoint(-21.6813, 65.6873), provider_kind="IMO"),
    Station(id="imo:2642", name="vedur.is Ísafjörður",
            location=GeoPoint(-23.1699, 66.0596), provider_kind="IMO"),
)


class VedurAwsProvider(HttpProvider, StationProvider):
    """Fetches the latest 10-minute AWS readings, cached per station."""

    provider_name = "vedur"
    kind = "IMO"

    def __init__(
        self,
        settings: Any,
        logger: logging.Logger,
        *,
        stations: Sequence[Station] = DEFAULT_STATIONS,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(
            base_url=str(settings.vedur_base_url),
            user_agent=settings.http_user_agent,
            timeout_seconds=settings.http_timeout_seconds,
            logger=logger,
            max_retries=getattr(settings, "http_max_retries", 1),
            retry_delay_seconds=getattr(settings, "http_retry_delay_seconds", 1.0),
        )
        self._stations = list(stations)
        self.cache: TTLCache[list[dict[str, Any]]] = TTLCache(
            timedelta(seconds=settings.vedur_ttl_seconds),
            name="vedur aws",
            clock=clock,
            logger=logger,
        )

    def list_stations(self) -> list[Station]:
        return list(self._stations)

    def fetch_observations(
        self,
        station_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Observation]:
        require_aware(start, end)
        number = numeric_station_suffix(station_id, STATION_PREFIX)
        if number is None:
            self.logger.debug("Ignoring non-numeric IMO station id %r", station_id)
            return []

        records = self.cache.get_or_refresh(
            str(number),
            lambda: self._fetch_latest_records(number),
        )
        if not records:
            return []

        observations = [
            obs
            for obs in map_records(station_id, records, logger=self.logger)
            if in_window(obs.timestamp, start, end)
        ]
        return observations

    def _fetch_latest_records(self, number: int) -> list[dict[str, Any]]:
        payload = self._request_json(
            LATEST_PATH,
            context=f"latest observations for station {number}",
            params={"station_id": number},
        )
        if isinstance(payload, dict):
            payload = payload.get("results")
        if not isinstance(payload, list):
            raise ProviderError(
                f"vedur latest payload for station {number} had unexpected type "
                f"{type(payload).__name__}."
            )
        return [item for item in payload if isinstance(item, dict)]


def map_records(
    station_id: str,
    records: Sequence[dict[str, Any]],
    logger: logging.Logger | None = None,
) -> list[Observation]:
    """Normalize raw AWS rows (local ISO time, no zone) into observations.

    Rows whose timestamp or numeric fields cannot be parsed are skipped.
    """
    observations: list[Observation] = []
    for record in records:
        try:
            observations.append(
                Observation(
                    station_id=station_id,
                    timestamp=parse_local_timestamp(record.get("time"), None),
                    temp_c=parse_number(record.get("t")),
                    wind_ms=parse_number(record.get("f")),
                    gust_ms=parse_number(record.get("fg")),
                    visibility_m=parse_number(record.get("vis")),
                    precip_type=parse_text(record.get("precip")),
                )
            )
        except MalformedRecord as exc:
            if logger is not None:
                logger.debug(
                    "Dropping IMO record for %s: %s", station_id, exc,
                    extra={"provider": "vedur", "station_id": station_id},
                )
    return observations
