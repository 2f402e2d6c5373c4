"""
Calendar helpers shared by the habit services.

Dates are calendar days (`datetime.date`); callers may hand in `datetime`
instants, which are truncated to midnight of their own day.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Union
import enum
import math

from wellness.core.errors import InvalidInputError

DateLike = Union[date, datetime]

_SECONDS_PER_DAY = 24 * 60 * 60


class Weekday(enum.IntEnum):
    """Day of week numbered the way the calendar UI numbers it (Sunday first)."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, day: DateLike) -> "Weekday":
        # isoweekday: Monday=1 .. Sunday=7
        return cls(day.isoweekday() % 7)

    @property
    def frequency_field(self) -> str:
        """Name of the ProgrammeHabit attribute holding this day's target."""
        return _FREQUENCY_FIELDS[self]


_FREQUENCY_FIELDS = {
    Weekday.SUNDAY: "sun_frequency",
    Weekday.MONDAY: "mon_frequency",
    Weekday.TUESDAY: "tue_frequency",
    Weekday.WEDNESDAY: "wed_frequency",
    Weekday.THURSDAY: "thu_frequency",
    Weekday.FRIDAY: "fri_frequency",
    Weekday.SATURDAY: "sat_frequency",
}


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime
    duration: int

    @property
    def start_day(self) -> date:
        return self.start.date()

    @property
    def end_day(self) -> date:
        return self.end.date()


def to_day(value: DateLike) -> date:
    """Calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_day(value: DateLike) -> datetime:
    """Midnight at the start of value's day, keeping any tzinfo."""
    if isinstance(value, datetime):
        return value.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime.combine(value, time.min)


def to_date_range(start: Optional[DateLike], end: Optional[DateLike]) -> DateRange:
    """
    Normalize a caller supplied start/end pair.

    Both bounds are truncated to midnight. `duration` is the number of days
    from the truncated start to the untruncated end, rounded up, so a
    time-of-day on `end` can add a day compared to the calendar-day count.
    """
    if start is None or end is None:
        raise InvalidInputError("Start date and end date are required")

    start_instant = start if isinstance(start, datetime) else start_of_day(start)
    end_instant = end if isinstance(end, datetime) else start_of_day(end)

    try:
        if start_instant > end_instant:
            raise InvalidInputError("Start date must be before or equal to end date")
    except TypeError:
        # Mixing naive and timezone-aware datetimes
        raise InvalidInputError("Start date and end date must use the same timezone convention")

    truncated_start = start_of_day(start_instant)
    truncated_end = start_of_day(end_instant)
    duration = math.ceil((end_instant - truncated_start).total_seconds() / _SECONDS_PER_DAY)

    return DateRange(start=truncated_start, end=truncated_end, duration=duration)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end inclusive."""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def in_window(day: date, start: date, end: Optional[date]) -> bool:
    """Inclusive window check; a missing end means the window is open."""
    if day < start:
        return False
    return end is None or day <= end
