"""Single source of "now" for the server, with an optional frozen value for tests.

Timestamps are stored as naive UTC. Aware values are converted on the way in
with ``to_naive_utc`` and get their UTC zone back on the way out with ``as_utc``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach the UTC zone to a stored naive UTC value."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimeManager:
    """Return the effective current time, optionally pinned to a fixed moment."""

    _frozen: datetime | None = None
    _lock = Lock()

    @classmethod
    def get_current_time(cls) -> datetime:
        """Return the frozen time if set, otherwise the real time, as naive UTC."""
        with cls._lock:
            if cls._frozen is not None:
                return cls._frozen
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @classmethod
    def freeze(cls, moment: datetime) -> datetime:
        """Pin the current time to ``moment``."""
        moment = to_naive_utc(moment)
        with cls._lock:
            cls._frozen = moment
        return moment

    @classmethod
    def unfreeze(cls) -> None:
        """Return to real system time."""
        with cls._lock:
            cls._frozen = None


def get_current_time() -> datetime:
    """Convenience function."""
    return TimeManager.get_current_time()
