"""Provider-agnostic station data interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from ..models import Observation, ProviderKind, Station


class StationProvider(ABC):
    """Base contract for station observation sources used by the corridor pipeline."""

    kind: ProviderKind

    @abstractmethod
    def list_stations(self) -> list[Station]:
        """Return the provider's static station catalog."""

    @abstractmethod
    def fetch_observations(
        self,
        station_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Observation]:
        """Return observations for one station with ``start <= timestamp < end``.

        Never raises for data-availability reasons: network failures, bad ids
        and malformed records all degrade to fewer (or no) observations.
        """

    @abstractmethod
    def close(self) -> None:
        """Release provider resources."""

    def __enter__(self) -> StationProvider:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()
