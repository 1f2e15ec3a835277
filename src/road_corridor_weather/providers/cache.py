"""Process-lifetime TTL cache for bulk provider responses."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Generic, TypeVar

from ..exceptions import ProviderError

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached value and the instant it was fetched, always replaced together."""

    value: T
    fetched_at: datetime


class TTLCache(Generic[T]):
    """Keyed cache that refreshes lazily and falls back to stale values on failure.

    Entries are immutable snapshots swapped in a single assignment, so a reader
    never sees a value paired with another fetch's timestamp. Refreshes of the
    same key are serialized: callers that queue behind an in-flight refresh
    re-check freshness and reuse its result instead of calling the loader again.
    """

    def __init__(
        self,
        ttl: timedelta,
        *,
        name: str = "cache",
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive.")
        self.ttl = ttl
        self.name = name
        self._clock = clock or utc_now
        self.logger = logger or logging.getLogger("road_corridor_weather.providers.cache")
        self._entries: dict[str, CacheEntry[T]] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def peek(self, key: str) -> CacheEntry[T] | None:
        """Return the current entry for ``key`` without refreshing it."""
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.fetched_at < self.ttl

    def get_or_refresh(self, key: str, loader: Callable[[], T]) -> T | None:
        """Serve a fresh value, refresh an expired one, or fall back to stale.

        ``loader`` signals failure by raising ``ProviderError``. Returns
        ``None`` only when the loader fails and nothing was ever cached.
        """
        entry = self._entries.get(key)
        if entry is not None and self.is_fresh(entry):
            return entry.value

        with self._lock_for(key):
            entry = self._entries.get(key)
            if entry is not None and self.is_fresh(entry):
                return entry.value

            try:
                value = loader()
            except ProviderError as exc:
                if entry is not None:
                    self.logger.warning(
                        "%s refresh failed for key=%s; serving stale value from %s (%s)",
                        self.name, key, entry.fetched_at.isoformat(), exc,
                        extra={"cache": self.name, "cache_key": key},
                    )
                    return entry.value
                self.logger.warning(
                    "%s refresh failed for key=%s with no cached value (%s)",
                    self.name, key, exc,
                    extra={"cache": self.name, "cache_key": key},
                )
                return None

            self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
            return value

    def clear(self) -> None:
        self._entries = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock
