"""Typed models for per-station reduction and hazard classification."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ..models import Alert

HazardSignal = Literal["wind", "gust", "visibility", "ice"]


class StationFacts(BaseModel):
    """Worst-case summary of one corridor station over the requested window.

    Numeric fields stay ``None`` when the station reported nothing for them,
    which keeps "no data" distinct from a genuine zero reading.
    """

    station_id: str
    station_name: str
    max_gust_ms: float | None = None
    max_wind_ms: float | None = None
    min_temp_c: float | None = None
    min_vis_m: float | None = None
    dominant_precip_type: str | None = None
    alerts: list[Alert] = Field(default_factory=list)
    observation_count: int = 0


class Hazard(BaseModel):
    """One fired threshold rule for one station."""

    station_id: str
    station_name: str
    signal: HazardSignal
    level: int | None = None
    value: float
    message: str
