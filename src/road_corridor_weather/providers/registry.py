"""Registry of station providers keyed by provider kind."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..models import ProviderKind, Station
from .base import StationProvider
from .cache import Clock
from .vedur import VedurAwsProvider
from .vegagerdin import VegagerdinProvider


class ProviderRegistry:
    """Holds one provider per kind and merges their static catalogs."""

    def __init__(self, providers: Iterable[StationProvider]) -> None:
        self._providers: dict[ProviderKind, StationProvider] = {}
        for provider in providers:
            if provider.kind in self._providers:
                raise ValueError(f"Duplicate provider registered for kind {provider.kind!r}.")
            self._providers[provider.kind] = provider

    def __enter__(self) -> ProviderRegistry:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def kinds(self) -> list[ProviderKind]:
        return list(self._providers)

    def providers(self) -> list[StationProvider]:
        return list(self._providers.values())

    def provider_for(self, kind: str) -> StationProvider | None:
        return self._providers.get(kind)  # type: ignore[call-overload]

    def list_stations(self) -> list[Station]:
        """All catalogs concatenated in registration order; station ids must be unique."""
        merged: list[Station] = []
        seen: set[str] = set()
        for provider in self._providers.values():
            for station in provider.list_stations():
                if station.id in seen:
                    raise ValueError(f"Station id {station.id!r} registered by more than one provider.")
                if station.provider_kind != provider.kind:
                    raise ValueError(
                        f"Station {station.id!r} has kind {station.provider_kind!r} "
                        f"but is listed by the {provider.kind!r} provider."
                    )
                seen.add(station.id)
                merged.append(station)
        return merged

    def close(self) -> None:
        for provider in self._providers.values():
            provider.close()


def build_default_registry(
    settings: Any,
    logger: logging.Logger,
    *,
    clock: Clock | None = None,
) -> ProviderRegistry:
    """Road-weather (Vegagerðin) and IMO station providers."""
    return ProviderRegistry(
        [
            VegagerdinProvider(settings=settings, logger=logger, clock=clock),
            VedurAwsProvider(settings=settings, logger=logger, clock=clock),
        ]
    )
