"""
Time helpers shared across the engine.

All timestamps are stored as naive UTC. Use utcnow_naive() inline; for
column defaults use the callable: default=utcnow_naive, onupdate=utcnow_naive.
"""

from datetime import datetime, timezone


def utcnow_naive() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def hours_between(earlier: datetime, later: datetime) -> float:
    """Signed number of hours from `earlier` to `later`."""
    return (later - earlier).total_seconds() / 3600.0
