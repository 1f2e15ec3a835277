"""Corridor resolution pipeline: stations -> observations -> facts -> hazards."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .analysis.hazards import HazardClassifier
from .analysis.models import Hazard, StationFacts
from .analysis.reducer import ObservationReducer
from .geo.corridor import CorridorResolver
from .models import Alert, ForecastPoint, GeoPoint, Observation, Station
from .providers.alerts import VedurCapProvider
from .providers.base import StationProvider
from .providers.cache import Clock, utc_now
from .providers.forecast import YrNoForecastProvider
from .providers.registry import ProviderRegistry, build_default_registry
from .time_window import TimeWindow, observation_window


class CorridorReport(BaseModel):
    """Everything the transport and advice layers need for one route request."""

    generated_at: datetime
    route: list[GeoPoint]
    buffer_m: float
    observation_start: datetime
    observation_end: datetime
    stations: list[Station] = Field(default_factory=list)
    observations: list[Observation] = Field(default_factory=list)
    alerts: dict[str, list[Alert]] = Field(default_factory=dict)
    facts: list[StationFacts] = Field(default_factory=list)
    hazards: list[str] = Field(default_factory=list)
    hazard_details: list[Hazard] = Field(default_factory=list)
    forecasts: list[ForecastPoint] = Field(default_factory=list)


class StationService:
    """Merges provider catalogs, resolves the corridor and fans out fetches."""

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        resolver: CorridorResolver,
        reducer: ObservationReducer | None = None,
        classifier: HazardClassifier | None = None,
        alerts_provider: VedurCapProvider | None = None,
        forecast_provider: YrNoForecastProvider | None = None,
        observation_lookback_hours: float = 2.0,
        logger: logging.Logger | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry
        self.resolver = resolver
        self.reducer = reducer or ObservationReducer()
        self.classifier = classifier or HazardClassifier()
        self.alerts_provider = alerts_provider
        self.forecast_provider = forecast_provider
        self.observation_lookback_hours = observation_lookback_hours
        self.logger = logger or logging.getLogger("road_corridor_weather.service")
        self._clock = clock or utc_now

    def __enter__(self) -> StationService:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self.registry.close()
        if self.alerts_provider is not None:
            self.alerts_provider.close()
        if self.forecast_provider is not None:
            self.forecast_provider.close()

    def corridor_stations(
        self,
        route: Sequence[GeoPoint],
        buffer_m: float | None = None,
    ) -> list[Station]:
        return self.resolver.resolve(self.registry.list_stations(), route, buffer_m)

    def fetch_observations(
        self,
        stations: Sequence[Station],
        start: datetime,
        end: datetime,
    ) -> list[Observation]:
        """Observations for ``stations``, concatenated in the order of ``stations``.

        Providers are queried concurrently, one worker each; a provider's own
        stations are fetched sequentially so its bulk cache is filled once.
        """
        groups: dict[str, tuple[StationProvider, list[Station]]] = {}
        for station in stations:
            provider = self.registry.provider_for(station.provider_kind)
            if provider is None:
                self.logger.debug(
                    "No provider registered for kind %s; skipping station %s",
                    station.provider_kind, station.id,
                )
                continue
            groups.setdefault(station.provider_kind, (provider, []))[1].append(station)
        if not groups:
            return []

        by_station: dict[str, list[Observation]] = {}
        with ThreadPoolExecutor(max_workers=len(groups), thread_name_prefix="provider") as pool:
            futures = [
                pool.submit(self._fetch_group, provider, group, start, end)
                for provider, group in groups.values()
            ]
            for future in futures:
                by_station.update(future.result())

        return [obs for station in stations for obs in by_station.get(station.id, [])]

    def fetch_alerts(self, stations: Sequence[Station]) -> dict[str, list[Alert]]:
        if self.alerts_provider is None:
            return {}
        return self.alerts_provider.alerts_for_stations(stations)

    def fetch_forecasts(
        self,
        stations: Sequence[Station],
        window: TimeWindow | None = None,
    ) -> list[ForecastPoint]:
        if self.forecast_provider is None:
            return []
        if window is None:
            return self.forecast_provider.fetch_forecast_for_stations(stations)
        return self.forecast_provider.fetch_forecast_for_stations(
            stations, start=window.start, end=window.end
        )

    def resolve(
        self,
        route: Sequence[GeoPoint],
        *,
        buffer_m: float | None = None,
        travel: TimeWindow | None = None,
        include_alerts: bool = True,
        include_forecast: bool = True,
    ) -> CorridorReport:
        """Run the full pipeline for one route and return the ordered results."""
        now = self._clock()
        window = observation_window(now, self.observation_lookback_hours)
        width = self.resolver.buffer_m if buffer_m is None else buffer_m

        stations = self.corridor_stations(route, width)
        observations = self.fetch_observations(stations, window.start, window.end)
        alerts = self.fetch_alerts(stations) if include_alerts else {}
        facts = self.reducer.reduce(observations, stations, alerts)
        hazard_details = self.classifier.detect(facts)
        forecasts = self.fetch_forecasts(stations, travel) if include_forecast else []

        self.logger.info(
            "Resolved corridor: stations=%d observations=%d hazards=%d forecasts=%d",
            len(stations), len(observations), len(hazard_details), len(forecasts),
        )
        return CorridorReport(
            generated_at=now,
            route=list(route),
            buffer_m=width,
            observation_start=window.start,
            observation_end=window.end,
            stations=stations,
            observations=observations,
            alerts=alerts,
            facts=facts,
            hazards=self.classifier.render(hazard_details),
            hazard_details=hazard_details,
            forecasts=forecasts,
        )

    @staticmethod
    def _fetch_group(
        provider: StationProvider,
        stations: Sequence[Station],
        start: datetime,
        end: datetime,
    ) -> dict[str, list[Observation]]:
        return {s.id: provider.fetch_observations(s.id, start, end) for s in stations}


def build_station_service(
    settings: Any,
    logger: logging.Logger,
    *,
    clock: Clock | None = None,
) -> StationService:
    """Wire the default providers and pipeline stages from settings."""
    return StationService(
        build_default_registry(settings, logger, clock=clock),
        resolver=CorridorResolver(settings.corridor_buffer_meters, logger=logger),
        reducer=ObservationReducer(settings.precip_strategy, logger=logger),
        classifier=HazardClassifier(),
        alerts_provider=VedurCapProvider(settings, logger, clock=clock),
        forecast_provider=YrNoForecastProvider(settings, logger, clock=clock),
        observation_lookback_hours=settings.observation_lookback_hours,
        logger=logger,
        clock=clock,
    )
