"""Typed settings loader for the road corridor weather service."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")

    http_user_agent: str = Field(
        default="road-corridor-weather/0.1 (contact: roads@example.com)",
        alias="HTTP_USER_AGENT",
    )
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")
    http_max_retries: int = Field(default=1, alias="HTTP_MAX_RETRIES")
    http_retry_delay_seconds: float = Field(default=1.0, alias="HTTP_RETRY_DELAY_SECONDS")

    vegagerdin_base_url: AnyUrl = Field(
        default="https://gagnaveita.vegagerdin.is",
        validate_default=True,
        alias="VEGAGERDIN_BASE_URL",
    )
    vegagerdin_ttl_seconds: int = Field(default=900, alias="VEGAGERDIN_TTL_SECONDS")
    vedur_base_url: AnyUrl = Field(
        default="https://api.vedur.is",
        validate_default=True,
        alias="VEDUR_BASE_URL",
    )
    vedur_ttl_seconds: int = Field(default=900, alias="VEDUR_TTL_SECONDS")
    alerts_ttl_seconds: int = Field(default=1800, alias="ALERTS_TTL_SECONDS")
    alerts_radius_km: int = Field(default=30, alias="ALERTS_RADIUS_KM")
    forecast_base_url: AnyUrl = Field(
        default="https://api.met.no",
        validate_default=True,
        alias="FORECAST_BASE_URL",
    )
    forecast_ttl_seconds: int = Field(default=3600, alias="FORECAST_TTL_SECONDS")

    corridor_buffer_meters: float = Field(default=5000.0, alias="CORRIDOR_BUFFER_METERS")
    observation_lookback_hours: float = Field(default=2.0, alias="OBSERVATION_LOOKBACK_HOURS")
    precip_strategy: Literal["first", "most_common"] = Field(
        default="first",
        alias="PRECIP_STRATEGY",
    )
    average_speed_kmh: float = Field(default=90.0, alias="AVERAGE_SPEED_KMH")
    max_print: int = Field(default=20, alias="MAX_PRINT")

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Reject values that would make the corridor pipeline misbehave."""
        if not self.http_user_agent.strip():
            raise ValueError("HTTP_USER_AGENT must not be empty.")
        if self.http_timeout_seconds <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be > 0.")
        if self.http_max_retries < 0:
            raise ValueError("HTTP_MAX_RETRIES must be >= 0.")
        if self.http_retry_delay_seconds < 0:
            raise ValueError("HTTP_RETRY_DELAY_SECONDS must be >= 0.")
        for name in (
            "vegagerdin_ttl_seconds",
            "vedur_ttl_seconds",
            "alerts_ttl_seconds",
            "forecast_ttl_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be > 0.")
        if self.alerts_radius_km <= 0:
            raise ValueError("ALERTS_RADIUS_KM must be > 0.")
        if self.corridor_buffer_meters < 0:
            raise ValueError("CORRIDOR_BUFFER_METERS must be >= 0.")
        if self.observation_lookback_hours <= 0:
            raise ValueError("OBSERVATION_LOOKBACK_HOURS must be > 0.")
        if self.average_speed_kmh <= 0:
            raise ValueError("AVERAGE_SPEED_KMH must be > 0.")
        if self.max_print <= 0:
            raise ValueError("MAX_PRINT must be > 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return a config summary suitable for startup logging."""
        return {
            "app_env": self.app_env,
            "http_timeout_seconds": self.http_timeout_seconds,
            "http_max_retries": self.http_max_retries,
            "vegagerdin_base_url": str(self.vegagerdin_base_url),
            "vegagerdin_ttl_seconds": self.vegagerdin_ttl_seconds,
            "vedur_base_url": str(self.vedur_base_url),
            "vedur_ttl_seconds": self.vedur_ttl_seconds,
            "alerts_ttl_seconds": self.alerts_ttl_seconds,
            "forecast_base_url": str(self.forecast_base_url),
            "forecast_ttl_seconds": self.forecast_ttl_seconds,
            "corridor_buffer_meters": self.corridor_buffer_meters,
            "observation_lookback_hours": self.observation_lookback_hours,
            "precip_strategy": self.precip_strategy,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
