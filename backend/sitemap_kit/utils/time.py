"""Time helpers."""

from __future__ import annotations

import time
from datetime import date, datetime, timezone


def now_ms() -> int:
    """Return current timestamp in milliseconds."""
    return int(time.time() * 1000)


def parse_datetime(value: str | date | datetime) -> datetime:
    """Parse an ISO-8601 string, date or datetime into an aware UTC datetime.

    Naive values are taken to be UTC. Raises ``ValueError`` when a string
    cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    moment = value.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def timestamp_to_iso(seconds: float) -> str:
    """Render a POSIX timestamp as an ISO-8601 UTC string."""
    return to_iso(datetime.fromtimestamp(seconds, tz=timezone.utc))


__all__ = ["now_ms", "parse_datetime", "to_iso", "timestamp_to_iso"]
