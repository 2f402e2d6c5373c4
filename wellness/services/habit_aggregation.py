"""
Habit completion aggregation.

Everything here is a pure function over already-loaded data: the programmes a
client is enrolled in (with their per-weekday habit targets) and the client's
completion records. Nothing reads the database or the request, so the
calendar figures can be computed and tested in isolation.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import uuid

from wellness.services.date_utils import DateRange, Weekday, in_window, iter_days


@dataclass(frozen=True)
class ScheduledHabit:
    id: uuid.UUID
    programme_id: uuid.UUID
    title: str
    frequencies: Mapping[Weekday, int]
    frequency_per_day: Optional[int] = None

    def frequency_on(self, day: date) -> int:
        return self.frequencies.get(Weekday.of(day), 0)


@dataclass(frozen=True)
class ProgrammeSchedule:
    id: uuid.UUID
    name: str
    human_readable_id: str
    start_date: date
    end_date: Optional[date]
    habits: Sequence[ScheduledHabit] = field(default_factory=tuple)

    def covers(self, day: date) -> bool:
        return in_window(day, self.start_date, self.end_date)


@dataclass(frozen=True)
class CompletionRecord:
    programme_habit_id: uuid.UUID
    habit_date: date
    times_done: int
    completed: bool
    id: Optional[uuid.UUID] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class HabitDayData:
    date: date
    day_number: int
    scheduled_count: int
    completed_count: int
    completion_rate: float
    is_programme_day: bool
    is_locked: bool
    is_current_month: bool
    color: str


@dataclass(frozen=True)
class DailyHabit:
    programme_habit_id: uuid.UUID
    programme_id: uuid.UUID
    title: str
    habit_date: date
    times_done: int
    required_per_day: int
    completed: bool
    client_habit_id: Optional[uuid.UUID] = None
    notes: Optional[str] = None


RecordIndex = Dict[Tuple[date, uuid.UUID], CompletionRecord]


def weekday_frequency(habit: ScheduledHabit, day: date) -> int:
    return habit.frequency_on(day)


def required_per_day(habit: ScheduledHabit, day: date) -> int:
    """Repetitions needed for the habit to count as done on `day`.

    The per-habit `frequency_per_day` override wins over the weekday target;
    at least one repetition is always required.
    """
    if habit.frequency_per_day is not None:
        return max(1, habit.frequency_per_day)
    return max(1, weekday_frequency(habit, day))


def scheduled_habits_for_day(
    day: date, programmes: Iterable[ProgrammeSchedule]
) -> Tuple[List[ScheduledHabit], bool]:
    """Habits scheduled on `day`, and whether any programme window covers it."""
    scheduled = []
    is_programme_day = False
    for programme in programmes:
        if not programme.covers(day):
            continue
        is_programme_day = True
        for habit in programme.habits:
            if weekday_frequency(habit, day) > 0:
                scheduled.append(habit)
    return scheduled, is_programme_day


def count_scheduled(day: date, programmes: Iterable[ProgrammeSchedule]) -> Tuple[int, bool]:
    scheduled, is_programme_day = scheduled_habits_for_day(day, programmes)
    return len(scheduled), is_programme_day


def index_records(records: Iterable[CompletionRecord]) -> RecordIndex:
    """Key completion records by (day, programme habit)."""
    index: RecordIndex = {}
    for record in records:
        key = (record.habit_date, record.programme_habit_id)
        if key in index:
            raise ValueError(
                f"Duplicate completion record for programme habit {record.programme_habit_id} on {record.habit_date}"
            )
        index[key] = record
    return index


def is_satisfied(habit: ScheduledHabit, day: date, record: Optional[CompletionRecord]) -> bool:
    if record is None:
        return False
    return record.times_done >= required_per_day(habit, day)


def count_completed(day: date, scheduled: Iterable[ScheduledHabit], records: RecordIndex) -> int:
    return sum(1 for habit in scheduled if is_satisfied(habit, day, records.get((day, habit.id))))


def completion_rate(scheduled_count: int, completed_count: int) -> float:
    if scheduled_count == 0:
        return 0.0
    return completed_count / scheduled_count


def day_color(rate: float, is_programme_day: bool = True) -> str:
    if not is_programme_day:
        return "locked"
    if rate >= 1:
        return "green"
    if rate <= 0:
        return "red"
    if rate >= 0.8:
        return "orange-400"
    if rate >= 0.6:
        return "orange-500"
    if rate >= 0.4:
        return "orange-600"
    return "orange-700"


def calculate_habit_day_data(
    date_range: DateRange,
    programmes: Sequence[ProgrammeSchedule],
    records: Iterable[CompletionRecord],
) -> List[HabitDayData]:
    """One entry per calendar day from the range's start day to its end day."""
    index = index_records(records)
    first_day = date_range.start_day
    result = []

    for day in iter_days(first_day, date_range.end_day):
        scheduled, is_programme_day = scheduled_habits_for_day(day, programmes)
        completed = count_completed(day, scheduled, index)
        rate = completion_rate(len(scheduled), completed)
        result.append(HabitDayData(
            date=day,
            day_number=day.day,
            scheduled_count=len(scheduled),
            completed_count=completed,
            completion_rate=rate,
            is_programme_day=is_programme_day,
            is_locked=not is_programme_day,
            is_current_month=(day.year, day.month) == (first_day.year, first_day.month),
            color=day_color(rate, is_programme_day),
        ))

    return result


def build_daily_habits(
    day: date,
    programmes: Sequence[ProgrammeSchedule],
    records: Iterable[CompletionRecord],
) -> List[DailyHabit]:
    """Per-habit breakdown for one day, in programme then habit order."""
    index = index_records(r for r in records if r.habit_date == day)
    scheduled, _ = scheduled_habits_for_day(day, programmes)

    result = []
    for habit in scheduled:
        record = index.get((day, habit.id))
        result.append(DailyHabit(
            programme_habit_id=habit.id,
            programme_id=habit.programme_id,
            title=habit.title,
            habit_date=day,
            times_done=record.times_done if record else 0,
            required_per_day=required_per_day(habit, day),
            completed=is_satisfied(habit, day, record),
            client_habit_id=record.id if record else None,
            notes=record.notes if record else None,
        ))
    return result
