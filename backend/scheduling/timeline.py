"""Helpers for the single normalized instant timeline (naive UTC datetimes)."""

from datetime import date, datetime, timezone


def normalize_instant(value: datetime) -> datetime:
    """Return ``value`` as a naive UTC datetime.

    Aware datetimes are converted to UTC; naive datetimes are taken to be
    normalized already. No local-time interpretation happens here.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def day_of_week(day: date) -> int:
    # date.weekday() has Monday=0; rules count from Sunday=0.
    return (day.weekday() + 1) % 7


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a normalized instant so it serializes with an explicit offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
