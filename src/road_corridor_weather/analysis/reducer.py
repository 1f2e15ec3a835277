"""Collapse raw observations into per-station worst-case facts."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Literal

from ..models import Alert, Observation, Station
from .models import StationFacts

PrecipStrategy = Literal["first", "most_common"]


class ObservationReducer:
    """Group observations by station and keep the most hazardous value per metric."""

    def __init__(
        self,
        precip_strategy: PrecipStrategy = "first",
        logger: logging.Logger | None = None,
    ) -> None:
        if precip_strategy not in ("first", "most_common"):
            raise ValueError(f"Unknown precip_strategy {precip_strategy!r}.")
        self.precip_strategy = precip_strategy
        self.logger = logger or logging.getLogger("road_corridor_weather.analysis.reducer")

    def reduce(
        self,
        observations: Iterable[Observation],
        stations: Sequence[Station],
        alerts_by_station_id: Mapping[str, list[Alert]] | None = None,
    ) -> list[StationFacts]:
        """Return exactly one ``StationFacts`` per station, in ``stations`` order."""
        alerts_by_station_id = alerts_by_station_id or {}
        by_station: dict[str, list[Observation]] = defaultdict(list)
        for obs in observations:
            by_station[obs.station_id].append(obs)

        facts: list[StationFacts] = []
        for station in stations:
            station_obs = by_station.get(station.id, [])
            facts.append(
                StationFacts(
                    station_id=station.id,
                    station_name=station.name,
                    max_gust_ms=_extreme(station_obs, lambda o: o.gust_ms, max),
                    max_wind_ms=_extreme(station_obs, lambda o: o.wind_ms, max),
                    min_temp_c=_extreme(station_obs, lambda o: o.temp_c, min),
                    min_vis_m=_extreme(station_obs, lambda o: o.visibility_m, min),
                    dominant_precip_type=self._dominant_precip(station_obs),
                    alerts=list(alerts_by_station_id.get(station.id, [])),
                    observation_count=len(station_obs),
                )
            )

        unmatched = set(by_station) - {s.id for s in stations}
        if unmatched:
            self.logger.debug(
                "Ignored observations for %d station(s) outside the corridor: %s",
                len(unmatched), sorted(unmatched),
            )
        return facts

    def _dominant_precip(self, observations: Sequence[Observation]) -> str | None:
        kinds = [o.precip_type for o in observations if o.precip_type is not None]
        if not kinds:
            return None
        if self.precip_strategy == "first":
            return kinds[0]
        # Counter preserves insertion order, so ties go to the first-seen kind.
        return Counter(kinds).most_common(1)[0][0]


def _extreme(
    observations: Sequence[Observation],
    field: Callable[[Observation], float | None],
    pick: Callable[[list[float]], float],
) -> float | None:
    values = [v for v in (field(o) for o in observations) if v is not None]
    return pick(values) if values else None
