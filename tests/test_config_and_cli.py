"""Tests for settings validation, log formatting and CLI input handling."""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from datetime import UTC, datetime
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from road_corridor_weather import corridor_cli
from road_corridor_weather.config import Settings, load_settings
from road_corridor_weather.exceptions import ConfigError, RouteError
from road_corridor_weather.log_setup import JsonConsoleFormatter


def test_settings_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.corridor_buffer_meters == 5000
    assert settings.observation_lookback_hours == 2
    assert settings.vegagerdin_ttl_seconds == 900
    assert settings.alerts_ttl_seconds == 1800
    assert settings.forecast_ttl_seconds == 3600
    assert settings.precip_strategy == "first"
    assert str(settings.vedur_base_url).startswith("https://api.vedur.is")


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORRIDOR_BUFFER_METERS", "7500")
    monkeypatch.setenv("PRECIP_STRATEGY", "most_common")
    monkeypatch.setenv("VEGAGERDIN_BASE_URL", "https://mirror.example.test")

    settings = Settings(_env_file=None)
    assert settings.corridor_buffer_meters == 7500
    assert settings.precip_strategy == "most_common"
    assert settings.safe_summary()["vegagerdin_base_url"].startswith("https://mirror.example.test")


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CORRIDOR_BUFFER_METERS", "-1"),
        ("VEGAGERDIN_TTL_SECONDS", "0"),
        ("HTTP_TIMEOUT_SECONDS", "0"),
        ("PRECIP_STRATEGY", "latest"),
        ("HTTP_USER_AGENT", "   "),
    ],
)
def test_settings_reject_bad_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_load_settings_wraps_validation_error(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OBSERVATION_LOOKBACK_HOURS", "0")
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_settings()


def test_json_formatter_emits_one_json_object() -> None:
    record = logging.LogRecord("road_corridor_weather", logging.INFO, __file__, 1, "stations=%d", (4,), None)
    event = json.loads(JsonConsoleFormatter().format(record))

    assert event["level"] == "INFO"
    assert event["logger"] == "road_corridor_weather"
    assert event["message"] == "stations=4"
    assert "provider" not in event


def test_json_formatter_includes_context_extras() -> None:
    record = logging.LogRecord("road_corridor_weather", logging.WARNING, __file__, 1, "stale", (), None)
    record.cache = "vegagerdin bulk"
    record.cache_key = "all"
    event = json.loads(JsonConsoleFormatter().format(record))

    assert event["cache"] == "vegagerdin bulk"
    assert event["cache_key"] == "all"
    assert event["thread"] == record.threadName


def test_validate_cli_input_defaults_from_settings() -> None:
    settings = SimpleNamespace(corridor_buffer_meters=5000.0, max_print=20)
    args = Namespace(buffer=None, max_print=None)

    assert corridor_cli._validate_cli_input(args, settings) == (5000.0, 20)
    assert corridor_cli._validate_cli_input(Namespace(buffer=0.0, max_print=3), settings) == (0.0, 3)


@pytest.mark.parametrize(
    ("buffer", "max_print", "match"),
    [(-1.0, None, "--buffer"), (None, 0, "--max-print")],
)
def test_validate_cli_input_rejects_bad_values(buffer, max_print, match: str) -> None:
    settings = SimpleNamespace(corridor_buffer_meters=5000.0, max_print=20)
    with pytest.raises(RouteError, match=match):
        corridor_cli._validate_cli_input(Namespace(buffer=buffer, max_print=max_print), settings)


def test_parse_time_variants() -> None:
    assert corridor_cli._parse_time("2025-11-05T08:00:00Z") == datetime(2025, 11, 5, 8, 0, tzinfo=UTC)
    assert corridor_cli._parse_time("2025-11-05T08:00") == datetime(2025, 11, 5, 8, 0, tzinfo=UTC)
    with pytest.raises(RouteError, match="--time"):
        corridor_cli._parse_time("tomorrow morning")


def test_parse_args_defaults() -> None:
    args = corridor_cli.parse_args([])
    assert (args.origin, args.destination, args.mode) == ("RVK", "IFJ", "departure")
    assert args.no_alerts is False

    args = corridor_cli.parse_args(["--from", "IFJ", "--to", "RVK", "--mode", "arrival", "--no-forecast"])
    assert (args.origin, args.destination, args.mode, args.no_forecast) == ("IFJ", "RVK", "arrival", True)


def test_main_returns_route_error_code(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    assert corridor_cli.main(["--from", "RVK", "--to", "AKU"]) == 3


def test_main_returns_config_error_code(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AVERAGE_SPEED_KMH", "-5")
    assert corridor_cli.main([]) == 2
