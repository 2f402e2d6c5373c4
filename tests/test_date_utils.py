from datetime import date, datetime, timezone

import pytest

from wellness.core.errors import InvalidInputError
from wellness.models.programme import Programme
from wellness.services.date_utils import (
    Weekday,
    in_window,
    iter_days,
    start_of_day,
    to_date_range,
    to_day,
)


def test_weekday_is_sunday_first():
    assert Weekday.of(date(2025, 1, 5)) == Weekday.SUNDAY
    assert Weekday.of(date(2025, 1, 8)) == Weekday.WEDNESDAY
    assert Weekday.of(date(2025, 1, 11)) == Weekday.SATURDAY
    assert Weekday.of(datetime(2025, 1, 6, 23, 59)) == Weekday.MONDAY


def test_every_weekday_maps_to_its_frequency_field():
    assert {day.frequency_field for day in Weekday} == {
        "sun_frequency", "mon_frequency", "tue_frequency", "wed_frequency",
        "thu_frequency", "fri_frequency", "sat_frequency",
    }
    assert Weekday.WEDNESDAY.frequency_field == "wed_frequency"


def test_start_after_end_is_rejected():
    with pytest.raises(InvalidInputError):
        to_date_range(date(2025, 1, 10), date(2025, 1, 9))


@pytest.mark.parametrize("start,end", [(None, date(2025, 1, 1)), (date(2025, 1, 1), None)])
def test_missing_bound_is_rejected(start, end):
    with pytest.raises(InvalidInputError):
        to_date_range(start, end)


def test_mixed_timezones_are_rejected():
    with pytest.raises(InvalidInputError):
        to_date_range(datetime(2025, 1, 1), datetime(2025, 1, 2, tzinfo=timezone.utc))


def test_single_day_range():
    date_range = to_date_range(date(2025, 1, 8), date(2025, 1, 8))
    assert date_range.start == datetime(2025, 1, 8)
    assert date_range.end == datetime(2025, 1, 8)
    assert date_range.duration == 0


def test_whole_days_duration():
    assert to_date_range(date(2025, 1, 1), date(2025, 1, 31)).duration == 30


def test_bounds_are_truncated_but_duration_uses_end_time():
    date_range = to_date_range(datetime(2025, 1, 1, 10, 0), datetime(2025, 1, 3, 6, 0))
    assert date_range.start == datetime(2025, 1, 1)
    assert date_range.end == datetime(2025, 1, 3)
    assert date_range.start_day == date(2025, 1, 1)
    assert date_range.end_day == date(2025, 1, 3)
    # 2 days 6 hours from the truncated start rounds up to 3
    assert date_range.duration == 3


def test_start_of_day_keeps_tzinfo():
    value = datetime(2025, 3, 4, 15, 30, tzinfo=timezone.utc)
    assert start_of_day(value) == datetime(2025, 3, 4, tzinfo=timezone.utc)


def test_to_day():
    assert to_day(datetime(2025, 3, 4, 15, 30)) == date(2025, 3, 4)
    assert to_day(date(2025, 3, 4)) == date(2025, 3, 4)


def test_iter_days_is_inclusive():
    days = list(iter_days(date(2024, 12, 30), date(2025, 1, 2)))
    assert days == [date(2024, 12, 30), date(2024, 12, 31), date(2025, 1, 1), date(2025, 1, 2)]


def test_in_window():
    assert in_window(date(2025, 1, 1), date(2025, 1, 1), date(2025, 1, 31))
    assert in_window(date(2025, 1, 31), date(2025, 1, 1), date(2025, 1, 31))
    assert not in_window(date(2025, 2, 1), date(2025, 1, 1), date(2025, 1, 31))
    assert not in_window(date(2024, 12, 31), date(2025, 1, 1), None)
    assert in_window(date(2030, 1, 1), date(2025, 1, 1), None)


def test_programme_covers_matches_in_window():
    january = Programme(start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))
    open_ended = Programme(start_date=date(2025, 1, 1), end_date=None)

    assert january.covers(date(2025, 1, 31))
    assert not january.covers(date(2025, 2, 1))
    assert not open_ended.covers(date(2024, 12, 31))
    assert open_ended.covers(date(2030, 1, 1))
