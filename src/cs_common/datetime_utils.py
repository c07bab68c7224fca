"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def to_epoch_seconds(moment: datetime) -> int:
    return int(moment.timestamp())


def to_iso8601(moment: datetime) -> str:
    """ISO-8601 with second precision, e.g. 2026-10-18T09:30:00+00:00."""
    return moment.isoformat(timespec="seconds")
