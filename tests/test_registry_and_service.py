"""Tests for provider registry dispatch and the corridor service pipeline."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from road_corridor_weather.analysis.hazards import HAZARD_HEADER, HazardClassifier
from road_corridor_weather.analysis.models import Hazard, StationFacts
from road_corridor_weather.geo.corridor import CorridorResolver
from road_corridor_weather.models import Alert, GeoPoint, Observation, Station
from road_corridor_weather.providers.base import StationProvider
from road_corridor_weather.providers.registry import ProviderRegistry
from road_corridor_weather.service import StationService

NOW = datetime(2025, 11, 4, 22, 0, tzinfo=UTC)
ROUTE = [GeoPoint(0.0, 0.0), GeoPoint(0.0, 1.0)]


class _FakeProvider(StationProvider):
    def __init__(
        self,
        kind: str,
        stations: list[Station],
        readings: dict[str, list[Observation]] | None = None,
    ) -> None:
        self.kind = kind  # type: ignore[assignment]
        self._stations = stations
        self._readings = readings or {}
        self.requests: list[tuple[str, datetime, datetime]] = []
        self.threads: set[str] = set()
        self.closed = False

    def list_stations(self) -> list[Station]:
        return list(self._stations)

    def fetch_observations(self, station_id: str, start: datetime, end: datetime) -> list[Observation]:
        self.requests.append((station_id, start, end))
        self.threads.add(threading.current_thread().name)
        return [o for o in self._readings.get(station_id, []) if start <= o.timestamp < end]

    def close(self) -> None:
        self.closed = True


class _FakeAlerts:
    def __init__(self, alerts: dict[str, list[Alert]]) -> None:
        self._alerts = alerts
        self.closed = False

    def alerts_for_stations(self, stations: list[Station]) -> dict[str, list[Alert]]:
        return {s.id: self._alerts.get(s.id, []) for s in stations}

    def close(self) -> None:
        self.closed = True


def _station(station_id: str, kind: str, lat: float) -> Station:
    return Station(
        id=station_id,
        name=station_id.split(":")[1].upper(),
        location=GeoPoint(0.0, lat),
        provider_kind=kind,  # type: ignore[arg-type]
    )


def _obs(station_id: str, minutes_ago: int, **values: Any) -> Observation:
    return Observation(station_id=station_id, timestamp=NOW - timedelta(minutes=minutes_ago), **values)


def _service(*providers: StationProvider, **kwargs: Any) -> StationService:
    return StationService(
        ProviderRegistry(providers),
        resolver=CorridorResolver(5000),
        logger=logging.getLogger("test_service"),
        clock=lambda: NOW,
        **kwargs,
    )


def test_registry_rejects_duplicate_kind() -> None:
    with pytest.raises(ValueError, match="Duplicate provider"):
        ProviderRegistry([_FakeProvider("IMO", []), _FakeProvider("IMO", [])])


def test_registry_merges_catalogs_and_rejects_duplicate_ids() -> None:
    road = _FakeProvider("VEGAGERDIN", [_station("veg:1", "VEGAGERDIN", 0.2)])
    imo = _FakeProvider("IMO", [_station("imo:2", "IMO", 0.4)])
    registry = ProviderRegistry([road, imo])

    assert [s.id for s in registry.list_stations()] == ["veg:1", "imo:2"]
    assert registry.provider_for("IMO") is imo
    assert registry.provider_for("SMHI") is None

    clash = ProviderRegistry(
        [road, _FakeProvider("IMO", [_station("veg:1", "IMO", 0.6)])]
    )
    with pytest.raises(ValueError, match="more than one provider"):
        clash.list_stations()


def test_registry_rejects_station_with_foreign_kind() -> None:
    registry = ProviderRegistry([_FakeProvider("IMO", [_station("veg:9", "VEGAGERDIN", 0.5)])])
    with pytest.raises(ValueError, match="listed by"):
        registry.list_stations()


def test_registry_close_closes_every_provider() -> None:
    road = _FakeProvider("VEGAGERDIN", [])
    imo = _FakeProvider("IMO", [])
    with ProviderRegistry([road, imo]):
        pass
    assert road.closed and imo.closed


def test_fetch_observations_dispatches_by_kind_in_corridor_order() -> None:
    road_a = _station("veg:a", "VEGAGERDIN", 0.1)
    imo_b = _station("imo:b", "IMO", 0.5)
    road_c = _station("veg:c", "VEGAGERDIN", 0.9)
    road = _FakeProvider(
        "VEGAGERDIN",
        [road_a, road_c],
        {"veg:a": [_obs("veg:a", 10, temp_c=1.0)], "veg:c": [_obs("veg:c", 5, temp_c=3.0)]},
    )
    imo = _FakeProvider("IMO", [imo_b], {"imo:b": [_obs("imo:b", 20, temp_c=2.0)]})
    service = _service(road, imo)

    start, end = NOW - timedelta(hours=2), NOW + timedelta(microseconds=1)
    observations = service.fetch_observations([road_a, imo_b, road_c], start, end)

    assert [o.station_id for o in observations] == ["veg:a", "imo:b", "veg:c"]
    assert [r[0] for r in road.requests] == ["veg:a", "veg:c"]
    assert [r[0] for r in imo.requests] == ["imo:b"]
    assert all(name.startswith("provider") for name in road.threads | imo.threads)


def test_fetch_observations_skips_unregistered_kind() -> None:
    imo_station = _station("imo:1", "IMO", 0.5)
    road = _FakeProvider("VEGAGERDIN", [])
    service = _service(road)

    assert service.fetch_observations([imo_station], NOW - timedelta(hours=1), NOW) == []
    assert road.requests == []


def test_resolve_runs_full_pipeline() -> None:
    gusty = _station("veg:gusty", "VEGAGERDIN", 0.3)
    icy = _station("imo:icy", "IMO", 0.7)
    far_away = Station(
        id="veg:far", name="FAR", location=GeoPoint(3.0, 0.5), provider_kind="VEGAGERDIN"
    )
    road = _FakeProvider(
        "VEGAGERDIN",
        [far_away, gusty],
        {
            "veg:gusty": [
                _obs("veg:gusty", 10, wind_ms=21.5, gust_ms=31.0),
                _obs("veg:gusty", 30, wind_ms=18.0, gust_ms=25.0),
                _obs("veg:gusty", 180, wind_ms=40.0),
            ],
            "veg:far": [_obs("veg:far", 5, wind_ms=50.0)],
        },
    )
    imo = _FakeProvider(
        "IMO",
        [icy],
        {"imo:icy": [_obs("imo:icy", 15, temp_c=-2.0, precip_type="snow", visibility_m=800)]},
    )
    alert = Alert(severity="Moderate", event_type="Wind")
    alerts = _FakeAlerts({"veg:gusty": [alert]})
    service = _service(road, imo, alerts_provider=alerts)

    report = service.resolve(ROUTE)

    assert [s.id for s in report.stations] == ["veg:gusty", "imo:icy"]
    assert report.observation_start == NOW - timedelta(hours=2)
    assert len(report.observations) == 3
    assert [f.station_id for f in report.facts] == ["veg:gusty", "imo:icy"]
    assert report.facts[0].max_wind_ms == pytest.approx(21.5)
    assert report.facts[0].alerts == [alert]
    assert report.hazards == [
        HAZARD_HEADER,
        "Warning Level 1: Wind 21.5 m/s at GUSTY - Drive carefully",
        "Strong gusts 31.0 m/s at GUSTY",
        "Low visibility 800m at ICY - Reduced reaction time",
        "Freezing conditions -2.0°C with snow at ICY - Ice risk",
    ]
    assert [h.signal for h in report.hazard_details] == ["wind", "gust", "visibility", "ice"]
    assert report.forecasts == []

    service.close()
    assert road.closed and imo.closed and alerts.closed


def test_resolve_without_alerts_and_empty_corridor() -> None:
    road = _FakeProvider("VEGAGERDIN", [_station("veg:1", "VEGAGERDIN", 0.5)])
    alerts = _FakeAlerts({"veg:1": [Alert(severity="Severe")]})
    service = _service(road, alerts_provider=alerts)

    report = service.resolve(ROUTE, include_alerts=False)
    assert report.alerts == {}
    assert report.facts[0].alerts == []
    assert report.facts[0].observation_count == 0
    assert report.hazards == [HAZARD_HEADER]

    empty = service.resolve([GeoPoint(0.0, 0.0)])
    assert empty.stations == []
    assert empty.facts == []
    assert road.requests == [("veg:1", NOW - timedelta(hours=2), NOW + timedelta(microseconds=1))]


class _CountingClassifier(HazardClassifier):
    def __init__(self) -> None:
        self.detect_calls = 0

    def detect(self, facts: Any) -> list[Hazard]:
        self.detect_calls += 1
        return super().detect(facts)


def test_resolve_classifies_each_station_once() -> None:
    windy = _station("veg:windy", "VEGAGERDIN", 0.5)
    road = _FakeProvider("VEGAGERDIN", [windy], {"veg:windy": [_obs("veg:windy", 5, wind_ms=24.5)]})
    classifier = _CountingClassifier()
    service = _service(road, classifier=classifier)

    report = service.resolve(ROUTE)

    assert classifier.detect_calls == 1
    assert report.hazards == [
        HAZARD_HEADER,
        "Warning Level 2: Wind 24.5 m/s at WINDY - Reduce speed significantly",
    ]
    assert report.hazards[1:] == [h.message for h in report.hazard_details]


def test_render_prefixes_header_to_detected_messages() -> None:
    facts = [StationFacts(station_id="veg:1", station_name="HFNFJ", max_gust_ms=27.0)]
    hazards = HazardClassifier().detect(facts)

    assert HazardClassifier.render(hazards) == HazardClassifier().classify(facts)
    assert HazardClassifier.render([]) == [HAZARD_HEADER]
