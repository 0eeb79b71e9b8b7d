from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import Weekday


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def to_utc_naive(instant: datetime) -> datetime:
    """Aware instant -> naive UTC, the form stored in DATETIME columns."""
    return instant.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Clock:
    """The only source of "now", "today" and time-of-day for the system.

    All day-of-week and window comparisons go through one fixed civil
    timezone, never the host's local time.
    """

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE):
        self._tz = ZoneInfo(tz_name)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def local(self, instant: datetime) -> datetime:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self._tz)

    def today(self) -> date:
        return self.now().date()

    def weekday(self, instant: Optional[datetime] = None) -> Weekday:
        instant = self.local(instant) if instant is not None else self.now()
        return Weekday.from_index(instant.weekday())

    def minutes_since_midnight(self, instant: Optional[datetime] = None) -> int:
        instant = self.local(instant) if instant is not None else self.now()
        return instant.hour * 60 + instant.minute

    def day_bounds(self, day: date) -> Tuple[datetime, datetime]:
        """[start, end) of a civil day as aware instants."""
        start = datetime.combine(day, time.min, tzinfo=self._tz)
        return start, start + timedelta(days=1)


class FixedClock(Clock):
    """Clock frozen at a given instant (tests, scripted runs).

    Naive instants are read as civil time in the clock's timezone.
    """

    def __init__(self, instant: datetime, tz_name: str = DEFAULT_TIMEZONE):
        super().__init__(tz_name)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant.astimezone(self.tz)

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self._instant = instant

    def advance(self, **kwargs) -> None:
        self._instant = self._instant + timedelta(**kwargs)
