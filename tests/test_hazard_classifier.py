"""Tests for threshold hazard classification."""

from __future__ import annotations

from typing import Any

import pytest

from road_corridor_weather.analysis.hazards import HAZARD_HEADER, HazardClassifier, is_ice_precip
from road_corridor_weather.analysis.models import StationFacts


def _facts(name: str = "BRATT", **values: Any) -> StationFacts:
    return StationFacts(station_id=f"veg:{name.lower()}", station_name=name, **values)


def _messages(*facts: StationFacts) -> list[str]:
    return HazardClassifier().classify(list(facts))[1:]


def test_header_is_always_first() -> None:
    assert HazardClassifier().classify([]) == [HAZARD_HEADER]
    assert HazardClassifier().classify([_facts()]) == [HAZARD_HEADER]


@pytest.mark.parametrize(
    ("wind", "expected"),
    [
        (19.99, []),
        (20.0, ["Warning Level 1: Wind 20.0 m/s at BRATT - Drive carefully"]),
        (24.0, ["Warning Level 2: Wind 24.0 m/s at BRATT - Reduce speed significantly"]),
        (28.0, ["Warning Level 3: Wind 28.0 m/s at BRATT - Unconditional stop recommended"]),
        (31.7, ["Warning Level 3: Wind 31.7 m/s at BRATT - Unconditional stop recommended"]),
    ],
)
def test_wind_levels_emit_only_highest(wind: float, expected: list[str]) -> None:
    assert _messages(_facts(max_wind_ms=wind)) == expected


@pytest.mark.parametrize(
    ("gust", "expected"),
    [
        (25.9, []),
        (26.0, ["Gusts 26.0 m/s at BRATT - Reduced stability"]),
        (30.0, ["Strong gusts 30.0 m/s at BRATT"]),
        (35.0, ["Severe gusts 35.0 m/s at BRATT - Extreme caution"]),
    ],
)
def test_gust_levels_emit_only_highest(gust: float, expected: list[str]) -> None:
    assert _messages(_facts(max_gust_ms=gust)) == expected


def test_wind_and_gust_both_fire() -> None:
    hazards = HazardClassifier().detect([_facts(max_wind_ms=25.0, max_gust_ms=36.0)])

    assert [(h.signal, h.level) for h in hazards] == [("wind", 2), ("gust", 3)]


def test_low_visibility_is_strictly_below_threshold() -> None:
    assert _messages(_facts(min_vis_m=1000)) == []
    assert _messages(_facts(min_vis_m=350)) == ["Low visibility 350m at BRATT - Reduced reaction time"]


def test_ice_requires_freezing_and_wet_precip() -> None:
    assert _messages(_facts(min_temp_c=-2.0, dominant_precip_type="snow")) == [
        "Freezing conditions -2.0°C with snow at BRATT - Ice risk"
    ]
    assert _messages(_facts(min_temp_c=0.0, dominant_precip_type="Light rain")) == [
        "Freezing conditions 0.0°C with Light rain at BRATT - Ice risk"
    ]
    assert _messages(_facts(min_temp_c=0.5, dominant_precip_type="snow")) == []
    assert _messages(_facts(min_temp_c=-5.0, dominant_precip_type=None)) == []
    assert _messages(_facts(min_temp_c=-5.0, dominant_precip_type="fog")) == []


def test_missing_data_never_fires() -> None:
    assert HazardClassifier().detect([_facts()]) == []


def test_messages_follow_corridor_order() -> None:
    first = _facts("HFNFJ", max_wind_ms=21.0)
    second = _facts("OGURI", min_vis_m=200)
    assert _messages(first, second) == [
        "Warning Level 1: Wind 21.0 m/s at HFNFJ - Drive carefully",
        "Low visibility 200m at OGURI - Reduced reaction time",
    ]


def test_is_ice_precip_matches_case_insensitive_substrings() -> None:
    assert is_ice_precip("Snow showers")
    assert is_ice_precip("SLEET")
    assert not is_ice_precip("")
    assert not is_ice_precip("drizzle")


def test_is_ice_precip_ignores_words_that_merely_contain_a_kind() -> None:
    assert not is_ice_precip("drain")
    assert not is_ice_precip("terrain icing")
    assert is_ice_precip("snowfall")
    assert is_ice_precip("rain/snow mix")
    assert _messages(_facts(min_temp_c=-1.0, dominant_precip_type="drain")) == []
