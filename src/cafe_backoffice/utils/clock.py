"""Injectable clock so time-windowed logic can be pinned in tests.

All timestamps in the engine are naive datetimes in the café's local time
zone; nothing is normalised to UTC.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta


class Clock(ABC):
    """Source of the current local time."""

    @abstractmethod
    def now(self) -> datetime:
        """Get the current local time."""

    def today(self) -> date:
        """Get the current local date."""
        return self.now().date()

    def start_of_day(self, day: date | None = None) -> datetime:
        """Midnight at the start of ``day`` (today by default)."""
        day = day or self.today()
        return datetime(day.year, day.month, day.day)


class SystemClock(Clock):
    """Production clock backed by the system's local time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock frozen at a given instant until moved explicitly."""

    def __init__(self, fixed_time: datetime | None = None):
        self._time = fixed_time or datetime(2024, 6, 3, 9, 30, 0)

    def now(self) -> datetime:
        return self._time

    def set_time(self, time: datetime) -> None:
        """Move the clock to ``time``."""
        self._time = time

    def advance(self, **delta: float) -> datetime:
        """Advance by a ``timedelta`` expressed as keyword arguments."""
        self._time = self._time + timedelta(**delta)
        return self._time
