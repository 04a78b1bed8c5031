"""Time utility helpers for UTC-safe timestamps."""

from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return current timezone-aware UTC timestamp."""

    return datetime.now(timezone.utc)


def utc_iso_string(value: datetime | None = None) -> str:
    """Render a timestamp as ISO-8601 UTC with a trailing Z."""

    moment = value or now_utc()
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def timestamp_to_utc(epoch_seconds: float) -> datetime:
    """Convert a POSIX timestamp into an aware UTC datetime."""

    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
