"""Conversion between datetimes and FIT timestamps.

FIT timestamps count whole seconds since 1989-12-31T00:00:00Z.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

FIT_EPOCH = datetime(1989, 12, 31, tzinfo=timezone.utc)
FIT_EPOCH_UNIX_S = 631065600


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_fit_timestamp(value: datetime | None) -> int:
    """Convert a datetime to a FIT timestamp.

    Fractional seconds are floored. ``None`` maps to 0 (the FIT epoch).

    Example:
        >>> to_fit_timestamp(datetime(1989, 12, 31, 0, 1, tzinfo=timezone.utc))
        60
    """
    if value is None:
        return 0
    return int(ensure_utc(value).timestamp() // 1) - FIT_EPOCH_UNIX_S


def from_fit_timestamp(ts: int) -> datetime:
    """Convert a FIT timestamp to an aware UTC datetime."""
    return FIT_EPOCH + timedelta(seconds=ts)
