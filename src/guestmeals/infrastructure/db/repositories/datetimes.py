from __future__ import annotations

from datetime import datetime, timezone, tzinfo


def to_storage(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc)


def from_storage(value: datetime | None, tz: tzinfo) -> datetime | None:
    # SQLite drops the offset; stored values are always UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)
