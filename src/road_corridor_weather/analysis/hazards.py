"""Threshold classification of station facts into road hazard statements.

Wind levels follow the Icelandic Road Safety Office warning guidelines.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import Hazard, StationFacts

HAZARD_HEADER = "Official Weather Warnings (Icelandic Road Safety Office):"

# (threshold m/s, level, message template), highest level first.
WIND_LEVELS: tuple[tuple[float, int, str], ...] = (
    (28.0, 3, "Warning Level 3: Wind {value:.1f} m/s at {name} - Unconditional stop recommended"),
    (24.0, 2, "Warning Level 2: Wind {value:.1f} m/s at {name} - Reduce speed significantly"),
    (20.0, 1, "Warning Level 1: Wind {value:.1f} m/s at {name} - Drive carefully"),
)
GUST_LEVELS: tuple[tuple[float, int, str], ...] = (
    (35.0, 3, "Severe gusts {value:.1f} m/s at {name} - Extreme caution"),
    (30.0, 2, "Strong gusts {value:.1f} m/s at {name}"),
    (26.0, 1, "Gusts {value:.1f} m/s at {name} - Reduced stability"),
)
LOW_VISIBILITY_M = 1000.0
FREEZING_TEMP_C = 0.0
ICE_PRECIP_KINDS = ("snow", "rain", "sleet")
# Word-start match: "snowfall" and "Light rain" count, "drain" does not.
_ICE_PRECIP_RE = re.compile(r"\b(?:" + "|".join(ICE_PRECIP_KINDS) + ")", re.IGNORECASE)


class HazardClassifier:
    """Stateless rules evaluated independently for each station."""

    def detect(self, facts: Iterable[StationFacts]) -> list[Hazard]:
        hazards: list[Hazard] = []
        for station in facts:
            hazards.extend(self._station_hazards(station))
        return hazards

    def classify(self, facts: Iterable[StationFacts]) -> list[str]:
        """Header line followed by one message per fired rule, in corridor order."""
        return self.render(self.detect(facts))

    @staticmethod
    def render(hazards: Iterable[Hazard]) -> list[str]:
        return [HAZARD_HEADER, *(hazard.message for hazard in hazards)]

    def _station_hazards(self, facts: StationFacts) -> list[Hazard]:
        hazards: list[Hazard] = []
        wind = _leveled(facts, "wind", facts.max_wind_ms, WIND_LEVELS)
        if wind is not None:
            hazards.append(wind)
        gust = _leveled(facts, "gust", facts.max_gust_ms, GUST_LEVELS)
        if gust is not None:
            hazards.append(gust)

        if facts.min_vis_m is not None and facts.min_vis_m < LOW_VISIBILITY_M:
            hazards.append(
                Hazard(
                    station_id=facts.station_id,
                    station_name=facts.station_name,
                    signal="visibility",
                    value=facts.min_vis_m,
                    message=(
                        f"Low visibility {facts.min_vis_m:.0f}m at {facts.station_name}"
                        " - Reduced reaction time"
                    ),
                )
            )

        if (
            facts.min_temp_c is not None
            and facts.min_temp_c <= FREEZING_TEMP_C
            and is_ice_precip(facts.dominant_precip_type)
        ):
            hazards.append(
                Hazard(
                    station_id=facts.station_id,
                    station_name=facts.station_name,
                    signal="ice",
                    value=facts.min_temp_c,
                    message=(
                        f"Freezing conditions {facts.min_temp_c:.1f}°C with "
                        f"{facts.dominant_precip_type} at {facts.station_name} - Ice risk"
                    ),
                )
            )
        return hazards


def is_ice_precip(precip_type: str | None) -> bool:
    if not precip_type:
        return False
    return _ICE_PRECIP_RE.search(precip_type) is not None


def _leveled(
    facts: StationFacts,
    signal: str,
    value: float | None,
    levels: tuple[tuple[float, int, str], ...],
) -> Hazard | None:
    if value is None:
        return None
    for threshold, level, template in levels:
        if value >= threshold:
            return Hazard(
                station_id=facts.station_id,
                station_name=facts.station_name,
                signal=signal,
                level=level,
                value=value,
                message=template.format(value=value, name=facts.station_name),
            )
    return None
