"""Record-level parsing helpers shared by provider adapters."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any
from zoneinfo import ZoneInfo

REYKJAVIK = ZoneInfo("Atlantic/Reykjavik")


class MalformedRecord(ValueError):
    """A single upstream record that cannot be normalized; the record is dropped."""


def parse_number(value: Any) -> float | None:
    """Missing/blank -> None; finite number or numeric text -> float; anything else raises.

    NaN and infinities raise too, so min/max reductions only see real readings.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedRecord(f"unexpected boolean numeric value {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        candidate = value.strip().replace(",", ".")
        if not candidate:
            return None
        try:
            number = float(candidate)
        except ValueError as exc:
            raise MalformedRecord(f"unparseable numeric value {value!r}") from exc
    else:
        raise MalformedRecord(f"unexpected numeric value type {type(value).__name__}")
    if not math.isfinite(number):
        raise MalformedRecord(f"non-finite numeric value {value!r}")
    return number


def parse_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_local_timestamp(value: Any, fmt: str | None, zone: ZoneInfo = REYKJAVIK) -> datetime:
    """Parse a civil-time stamp in ``zone`` and return it as a UTC instant.

    ``fmt=None`` means ISO-8601; an explicit offset in the text wins over ``zone``.
    """
    if not isinstance(value, str) or not value.strip():
        raise MalformedRecord("missing timestamp")
    candidate = value.strip()
    try:
        if fmt is None:
            if candidate.endswith("Z"):
                candidate = candidate[:-1] + "+00:00"
            parsed = datetime.fromisoformat(candidate)
        else:
            parsed = datetime.strptime(candidate, fmt)
    except ValueError as exc:
        raise MalformedRecord(f"unparseable timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed.astimezone(UTC)


def numeric_station_suffix(station_id: str, prefix: str) -> int | None:
    """``'veg:31674'`` -> ``31674``; ``None`` when the remainder is not an integer."""
    raw = station_id[len(prefix):] if station_id.startswith(prefix) else station_id
    raw = raw.strip()
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


def require_aware(*values: datetime) -> None:
    for value in values:
        if value.tzinfo is None:
            raise ValueError("Observation window bounds must be timezone-aware datetimes.")


def in_window(ts: datetime, start: datetime, end: datetime) -> bool:
    return start <= ts < end
