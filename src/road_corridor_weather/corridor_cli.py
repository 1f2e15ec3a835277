"""CLI: resolve the route corridor, fetch station weather and print hazards."""

from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime

from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import ConfigError, RouteError
from .geo.corridor import StationPlacement
from .log_setup import setup_logger
from .routes import get_route, route_length_m
from .service import CorridorReport, build_station_service
from .time_window import TimeWindow, travel_window


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse corridor CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Show weather stations, worst-case readings and hazards along a road route."
    )
    parser.add_argument("--from", dest="origin", default="RVK", help="Route origin (RVK or IFJ).")
    parser.add_argument("--to", dest="destination", default="IFJ", help="Route destination.")
    parser.add_argument(
        "--buffer",
        type=float,
        default=None,
        help="Corridor buffer in meters (default from CORRIDOR_BUFFER_METERS).",
    )
    parser.add_argument(
        "--mode",
        choices=["departure", "arrival"],
        default="departure",
        help="Interpret --time as departure or arrival time.",
    )
    parser.add_argument(
        "--time",
        type=str,
        default=None,
        help="ISO-8601 travel time (default: now, UTC).",
    )
    parser.add_argument(
        "--max-print",
        type=int,
        default=None,
        help="Number of table rows to print.",
    )
    parser.add_argument("--no-alerts", action="store_true", help="Skip CAP alert lookups.")
    parser.add_argument("--no-forecast", action="store_true", help="Skip yr.no forecasts.")
    return parser.parse_args(argv)


def _parse_time(value: str | None) -> datetime:
    if value is None:
        return datetime.now(UTC)
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise RouteError(f"Invalid --time value {value!r}; expected ISO-8601.") from exc
    return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _validate_cli_input(args: argparse.Namespace, settings: Settings) -> tuple[float, int]:
    if args.buffer is not None and args.buffer < 0:
        raise RouteError("--buffer must be >= 0 when provided.")
    if args.max_print is not None and args.max_print <= 0:
        raise RouteError("--max-print must be > 0 when provided.")
    buffer_m = args.buffer if args.buffer is not None else settings.corridor_buffer_meters
    max_print = args.max_print or settings.max_print
    return buffer_m, max_print


def _fmt(value: float | None, spec: str = ".1f") -> str:
    return "-" if value is None else format(value, spec)


def _print_report(
    console: Console,
    report: CorridorReport,
    placements: list[StationPlacement],
    travel: TimeWindow,
    max_print: int,
) -> None:
    console.print(
        f"Route points={len(report.route)} length={route_length_m(report.route) / 1000:.1f} km "
        f"buffer={report.buffer_m:.0f} m stations={len(report.stations)} "
        f"observations={len(report.observations)}"
    )
    console.print(
        f"Travel window {travel.start.isoformat()} -> {travel.end.isoformat()} | "
        f"observations {report.observation_start.isoformat()} -> "
        f"{report.observation_end.isoformat()}"
    )

    if not report.stations:
        console.print("No stations found inside the route corridor.")
        return

    placement_by_id = {p.station.id: p for p in placements}
    table = Table(title="Corridor Stations (travel order)")
    table.add_column("Station", overflow="fold")
    table.add_column("Progress km")
    table.add_column("Offset m")
    table.add_column("Max wind")
    table.add_column("Max gust")
    table.add_column("Min temp")
    table.add_column("Min vis")
    table.add_column("Precip")
    table.add_column("Alerts")

    for facts in report.facts[:max_print]:
        placement = placement_by_id.get(facts.station_id)
        table.add_row(
            f"{facts.station_name} [{facts.station_id}]",
            _fmt(placement.progress_m / 1000) if placement else "-",
            _fmt(placement.distance_m, ".0f") if placement else "-",
            _fmt(facts.max_wind_ms),
            _fmt(facts.max_gust_ms),
            _fmt(facts.min_temp_c),
            _fmt(facts.min_vis_m, ".0f"),
            facts.dominant_precip_type or "-",
            str(len(facts.alerts)),
        )
    console.print(table)

    for line in report.hazards:
        console.print(line)
    if len(report.hazards) == 1:
        console.print("No threshold hazards detected.")

    if report.forecasts:
        console.print(f"Forecast steps in travel window: {len(report.forecasts)}")


def main(argv: list[str] | None = None) -> int:
    """Run the corridor weather flow."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger.info("Starting corridor lookup with settings %s", settings.safe_summary())

    try:
        buffer_m, max_print = _validate_cli_input(args, settings)
        route = get_route(args.origin, args.destination)
        when = _parse_time(args.time)
    except RouteError as exc:
        logger.error("Route input failure: %s", exc)
        return 3

    exit_code = 0
    try:
        travel = travel_window(
            args.mode,
            when,
            route_km=route_length_m(route) / 1000,
            speed_kmh=settings.average_speed_kmh,
        )
        with build_station_service(settings, logger) as service:
            report = service.resolve(
                route,
                buffer_m=buffer_m,
                travel=travel,
                include_alerts=not args.no_alerts,
                include_forecast=not args.no_forecast,
            )
            placements = service.resolver.placements(
                service.registry.list_stations(), route, buffer_m
            )
        _print_report(console, report, placements, travel, max_print=max_print)
    except Exception as exc:  # pragma: no cover
        exit_code = 99
        logger.exception("Unexpected corridor CLI failure: %s", exc)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
