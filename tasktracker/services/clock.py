"""Current time source with an optional process-wide override."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from threading import Lock


class Clock:
    """Provide "now" for the application; tests and scripts may shift it."""

    _offset: timedelta | None = None
    _lock = Lock()

    @classmethod
    def now(cls) -> datetime:
        real_now = datetime.now()
        with cls._lock:
            if cls._offset is None:
                return real_now
            return real_now + cls._offset

    @classmethod
    def set_override(cls, target_time: datetime) -> datetime:
        """Pin the clock so that it currently reads `target_time`."""
        with cls._lock:
            cls._offset = target_time - datetime.now()
        return cls.now()

    @classmethod
    def shift(cls, delta: timedelta) -> datetime:
        with cls._lock:
            cls._offset = (cls._offset or timedelta()) + delta
        return cls.now()

    @classmethod
    def clear_override(cls) -> None:
        with cls._lock:
            cls._offset = None


def get_current_time() -> datetime:
    """Convenience function used as a column default."""
    return Clock.now()


def get_current_date() -> date:
    return Clock.now().date()


def set_current_time(target_time: datetime) -> datetime:
    return Clock.set_override(target_time)


def shift_time(delta: timedelta) -> datetime:
    return Clock.shift(delta)


def reset_time_override() -> None:
    Clock.clear_override()
