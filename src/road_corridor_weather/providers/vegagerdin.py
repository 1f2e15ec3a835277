"""Vegagerðin (Icelandic Road Administration) road weather station provider."""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
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
    require_aware,
)

STATION_PREFIX = "veg:"
BULK_PATH = "/api/vedur2014_1"
BULK_CACHE_KEY = "all"
# "4.11.2025 21:50:00", Reykjavik civil time.
TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M:%S"

DEFAULT_STATIONS: tuple[Station, ...] = (
    Station(id="veg:31674", name="HFNFJ (Hafnarfjall)",
            location=GeoPoint(-21.9603, 64.4755), provider_kind="VEGAGERDIN"),
    Station(id="veg:31985", name="BRATT (Brattabrekka)",
            location=GeoPoint(-21.5155, 64.8716), provider_kind="VEGAGERDIN"),
    Station(id="veg:32377", name="THROS (Þröskuldar)",
            location=GeoPoint(-21.833, 65.5524), provider_kind="VEGAGERDIN"),
    Station(id="veg:32474", name="STEHE (Steingrímsfjarðarheiði)",
            location=GeoPoint(-22.1291, 65.7503), provider_kind="VEGAGERDIN"),
    Station(id="veg:32654", name="OGURI (Ögur)",
            location=GeoPoint(-22.6817, 66.0449), provider_kind="VEGAGERDIN"),
)


class VegagerdinProvider(HttpProvider, StationProvider):
    """One bulk request covers every road station; the decoded records are cached."""

    provider_name = "vegagerdin"
    kind = "VEGAGERDIN"

    def __init__(
        self,
        settings: Any,
        logger: logging.Logger,
        *,
        stations: Sequence[Station] = DEFAULT_STATIONS,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(
            base_url=str(settings.vegagerdin_base_url),
            user_agent=settings.http_user_agent,
            timeout_seconds=settings.http_timeout_seconds,
            logger=logger,
            max_retries=getattr(settings, "http_max_retries", 1),
            retry_delay_seconds=getattr(settings, "http_retry_delay_seconds", 1.0),
            accept="application/json, application/xml;q=0.9",
        )
        self._stations = list(stations)
        self.cache: TTLCache[list[dict[str, Any]]] = TTLCache(
            timedelta(seconds=settings.vegagerdin_ttl_seconds),
            name="vegagerdin bulk",
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
        wanted = numeric_station_suffix(station_id, STATION_PREFIX)
        if wanted is None:
            self.logger.debug("Ignoring non-numeric Vegagerdin station id %r", station_id)
            return []

        records = self.cache.get_or_refresh(BULK_CACHE_KEY, self._fetch_bulk_records)
        if not records:
            return []

        observations: list[Observation] = []
        for record in records:
            if _station_number(record) != wanted:
                continue
            try:
                observation = self._normalize_record(station_id, record)
            except MalformedRecord as exc:
                self.logger.debug(
                    "Dropping Vegagerdin record for %s: %s", station_id, exc,
                    extra={"provider": self.provider_name, "station_id": station_id},
                )
                continue
            if in_window(observation.timestamp, start, end):
                observations.append(observation)
        return observations

    def _fetch_bulk_records(self) -> list[dict[str, Any]]:
        body = self._request_text(BULK_PATH, context="bulk observations")
        return decode_bulk_payload(body)

    @staticmethod
    def _normalize_record(station_id: str, record: dict[str, Any]) -> Observation:
        return Observation(
            station_id=station_id,
            timestamp=parse_local_timestamp(record.get("Dags"), TIMESTAMP_FORMAT),
            temp_c=parse_number(record.get("Hiti")),
            wind_ms=parse_number(record.get("Vindhradi")),
            gust_ms=parse_number(record.get("Vindhvida")),
            # The road feed carries no visibility or precipitation sensors.
            visibility_m=None,
            precip_type=None,
        )


def decode_bulk_payload(body: str) -> list[dict[str, Any]]:
    """Decode the bulk feed, either a JSON array or an XML list of ``<Vedur>`` records."""
    text = body.strip() if body else ""
    if not text:
        raise ProviderError("vegagerdin bulk payload was empty.")
    if text.startswith("<"):
        return _decode_xml(text)
    return _decode_json(text)


def _decode_json(text: str) -> list[dict[str, Any]]:
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise ProviderError("vegagerdin bulk payload was not valid JSON.") from exc
    if isinstance(payload, dict):
        # Some deployments wrap the array: {"Vedur": [...]}.
        payload = payload.get("Vedur")
    if not isinstance(payload, list):
        raise ProviderError(
            f"vegagerdin bulk payload had unexpected type {type(payload).__name__}."
        )
    return [item for item in payload if isinstance(item, dict)]


def _decode_xml(text: str) -> list[dict[str, Any]]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ProviderError(f"vegagerdin bulk payload was not valid XML: {exc}") from exc

    records: list[dict[str, Any]] = []
    for element in root:
        if len(element) == 0:
            continue
        records.append({_local_name(child.tag): child.text for child in element})
    return records


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _station_number(record: dict[str, Any]) -> int | None:
    try:
        number = parse_number(record.get("Nr_Vedurstofa"))
    except MalformedRecord:
        return None
    if number is None or not number.is_integer():
        return None
    return int(number)
