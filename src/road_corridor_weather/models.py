"""Shared typed models for stations, observations and alerts."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProviderKind = Literal["VEGAGERDIN", "IMO"]


class GeoPoint(NamedTuple):
    """WGS84 coordinate in degrees, longitude first (GeoJSON order)."""

    lon: float
    lat: float


class Station(BaseModel):
    """Static station catalog entry owned by one provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider-prefixed station id, e.g. 'veg:31674'")
    name: str
    location: GeoPoint
    provider_kind: ProviderKind

    @property
    def lat(self) -> float:
        return self.location.lat

    @property
    def lon(self) -> float:
        return self.location.lon


class Observation(BaseModel):
    """One normalized station reading; every sensor value is optional."""

    model_config = ConfigDict(frozen=True)

    station_id: str
    timestamp: datetime
    temp_c: float | None = None
    wind_ms: float | None = None
    gust_ms: float | None = None
    visibility_m: float | None = None
    precip_type: str | None = None

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        """Store every timestamp as an aware UTC instant."""
        return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)


class Alert(BaseModel):
    """Official CAP alert, passed through without interpretation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    severity: str | None = None
    event_type: str | None = Field(default=None, alias="eventType")
    description: str | None = None
    headline: str | None = None


class ForecastPoint(BaseModel):
    """Forecast time step for one corridor station location."""

    model_config = ConfigDict(frozen=True)

    station_id: str
    time: datetime
    location: GeoPoint
    temp_c: float | None = None
    wind_ms: float | None = None
    precip_mm: float | None = None
