"""UTC time helpers for SRS scheduling.

Timestamps are always timezone-aware UTC datetimes inside the engine. ISO strings
produced here end with 'Z'. Second precision is used unless the value carries
microseconds, in which case they are kept so that records round-trip exactly.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC 'now'."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return dt converted to UTC; naive values are assumed to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_z(dt: datetime) -> str:
    """Format a datetime as a UTC ISO string with a trailing 'Z'."""
    dt = ensure_utc(dt)
    timespec = "microseconds" if dt.microsecond else "seconds"
    return dt.isoformat(timespec=timespec).replace("+00:00", "Z")


def parse_iso_z(s: str) -> datetime:
    """Parse an ISO-8601 string ending with 'Z' (or an offset) into a UTC datetime.

    Accepts both second precision and fractional seconds.
    """
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(s))


def to_epoch_seconds(dt: datetime) -> float:
    return ensure_utc(dt).timestamp()


def from_epoch_seconds(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def add_days(dt: datetime, days: int) -> datetime:
    return dt + timedelta(days=days)


def day_bucket(dt: datetime) -> date:
    """Calendar day (UTC) a timestamp belongs to, used to key daily counters."""
    return ensure_utc(dt).date()
