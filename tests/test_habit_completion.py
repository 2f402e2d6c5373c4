from datetime import date
import uuid

import pytest

from wellness.core.errors import (
    InvalidInputError,
    NotEnrolledError,
    NotFoundError,
    OutOfWindowError,
)
from wellness.models.client_habit import ClientHabit, MAX_TIMES_PER_DAY
from wellness.services.habit_completion import (
    check_edit_window,
    clamp_times_done,
    recompute_completed_flags,
    resolve_delta,
    upsert_completion,
)
from wellness.services.habit_provider import read_client_habits_by_date
from tests.conftest import make_client

WEDNESDAY = date(2025, 1, 8)


def _record(db, client_profile, wednesday_habit, **kwargs):
    kwargs.setdefault("habit_date", WEDNESDAY)
    kwargs.setdefault("today", WEDNESDAY)
    return upsert_completion(db, client_profile.id, wednesday_habit.id, **kwargs)


def test_increments_until_completed(db, client_profile, wednesday_habit):
    first = _record(db, client_profile, wednesday_habit, delta=1)
    assert (first.times_done, first.completed, first.required_per_day) == (1, False, 2)

    second = _record(db, client_profile, wednesday_habit, delta=1)
    assert (second.times_done, second.completed) == (2, True)
    assert second.client_habit_id == first.client_habit_id

    # Past the requirement keeps counting up to the ceiling
    third = _record(db, client_profile, wednesday_habit, delta=1)
    assert (third.times_done, third.completed) == (3, True)

    assert db.query(ClientHabit).count() == 1


def test_decrement_from_nothing_clamps_to_zero(db, client_profile, wednesday_habit):
    result = _record(db, client_profile, wednesday_habit, delta=-1)
    assert result.times_done == 0
    assert result.completed is False


def test_decrement_below_zero_clamps(db, client_profile, wednesday_habit):
    _record(db, client_profile, wednesday_habit, delta=2)
    result = _record(db, client_profile, wednesday_habit, delta=-5)
    assert result.times_done == 0
    assert result.completed is False


def test_increment_clamps_at_ceiling(db, client_profile, wednesday_habit):
    _record(db, client_profile, wednesday_habit, delta=15)
    result = _record(db, client_profile, wednesday_habit, delta=15)
    assert result.times_done == MAX_TIMES_PER_DAY


def test_completed_flag_is_plus_or_minus_one(db, client_profile, wednesday_habit):
    assert _record(db, client_profile, wednesday_habit, completed=True).times_done == 1
    assert _record(db, client_profile, wednesday_habit, completed=True).times_done == 2
    result = _record(db, client_profile, wednesday_habit, completed=False)
    assert (result.times_done, result.completed) == (1, False)


def test_absolute_times_done_is_idempotent(db, client_profile, wednesday_habit):
    first = _record(db, client_profile, wednesday_habit, times_done=2)
    second = _record(db, client_profile, wednesday_habit, times_done=2)

    assert first.times_done == second.times_done == 2
    assert second.completed is True
    assert db.query(ClientHabit).count() == 1


def test_notes_kept_when_not_sent(db, client_profile, wednesday_habit):
    _record(db, client_profile, wednesday_habit, delta=1, notes="Morning session")
    result = _record(db, client_profile, wednesday_habit, delta=1)
    assert result.notes == "Morning session"


def test_daily_view_reflects_completion(db, client_profile, wednesday_habit):
    _record(db, client_profile, wednesday_habit, delta=2)

    [daily] = read_client_habits_by_date(db, client_profile.id, WEDNESDAY)
    assert daily.times_done == 2
    assert daily.completed is True
    assert daily.client_habit_id is not None


@pytest.mark.parametrize("changes", [{}, {"delta": 1, "completed": True}, {"delta": 1, "times_done": 3}])
def test_exactly_one_change_required(db, client_profile, wednesday_habit, changes):
    with pytest.raises(InvalidInputError):
        _record(db, client_profile, wednesday_habit, **changes)


def test_future_day_is_out_of_window(db, client_profile, wednesday_habit):
    with pytest.raises(OutOfWindowError):
        _record(db, client_profile, wednesday_habit, delta=1, habit_date=date(2025, 1, 15), today=WEDNESDAY)


def test_too_far_back_is_out_of_window(db, client_profile, wednesday_habit):
    with pytest.raises(OutOfWindowError):
        _record(db, client_profile, wednesday_habit, delta=1, today=date(2025, 1, 20))


def test_day_outside_programme_is_out_of_window(db, client_profile, wednesday_habit):
    with pytest.raises(OutOfWindowError):
        _record(db, client_profile, wednesday_habit, delta=1, habit_date=date(2025, 2, 5), today=date(2025, 2, 5))


def test_client_not_enrolled(db, wednesday_habit):
    stranger = make_client(db, "stranger@example.com", "Sam", "Stranger")
    with pytest.raises(NotEnrolledError):
        _record(db, stranger, wednesday_habit, delta=1)


def test_disabled_programme_habit_is_not_found(db, client_profile, wednesday_habit):
    wednesday_habit.current = False
    db.commit()
    with pytest.raises(NotFoundError):
        _record(db, client_profile, wednesday_habit, delta=1)


def test_unknown_programme_habit(db, client_profile, january_programme):
    with pytest.raises(NotFoundError):
        upsert_completion(db, client_profile.id, uuid.uuid4(), WEDNESDAY, delta=1, today=WEDNESDAY)


def test_unknown_client(db, wednesday_habit):
    with pytest.raises(NotFoundError):
        upsert_completion(db, uuid.uuid4(), wednesday_habit.id, WEDNESDAY, delta=1, today=WEDNESDAY)


def test_clamp_times_done():
    assert clamp_times_done(-3) == 0
    assert clamp_times_done(7) == 7
    assert clamp_times_done(99) == MAX_TIMES_PER_DAY


def test_resolve_delta():
    assert resolve_delta(3, None) == 3
    assert resolve_delta(None, True) == 1
    assert resolve_delta(None, False) == -1
    with pytest.raises(InvalidInputError):
        resolve_delta(None, None)


def test_edit_window_edges():
    check_edit_window(WEDNESDAY, WEDNESDAY, max_days_back=3)
    check_edit_window(date(2025, 1, 5), WEDNESDAY, max_days_back=3)
    with pytest.raises(OutOfWindowError):
        check_edit_window(date(2025, 1, 4), WEDNESDAY, max_days_back=3)


def test_recompute_completed_flags(db, client_profile, wednesday_habit):
    _record(db, client_profile, wednesday_habit, times_done=2)
    assert db.query(ClientHabit).one().completed is True

    wednesday_habit.frequency_per_day = 5
    assert recompute_completed_flags(db, wednesday_habit) == 1
    db.commit()
    assert db.query(ClientHabit).one().completed is False

    # Unchanged targets leave every row alone
    assert recompute_completed_flags(db, wednesday_habit) == 0
