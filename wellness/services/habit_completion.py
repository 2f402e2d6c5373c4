"""
Recording habit repetitions.

A completion row is keyed by (programme habit, client, day). Writes go through
a single INSERT .. ON CONFLICT DO UPDATE statement so that two increments
racing for the same key end up as one row holding both updates; the clamp
and the derived `completed` flag are computed inside that statement against
the stored value.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
import logging
import uuid

from sqlalchemy import case, false, true
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from wellness.core.config import settings
from wellness.core.errors import (
    InvalidInputError,
    NotEnrolledError,
    NotFoundError,
    OutOfWindowError,
    StorageFailureError,
)
from wellness.models.client_habit import ClientHabit, MAX_TIMES_PER_DAY
from wellness.models.enrolment import ProgrammeEnrolment
from wellness.models.habit import ProgrammeHabit
from wellness.services.date_utils import DateLike, to_day
from wellness.services.habit_aggregation import required_per_day
from wellness.services.habit_provider import get_client_or_404, to_scheduled_habit

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(frozen=True)
class CompletionResult:
    client_habit_id: uuid.UUID
    programme_habit_id: uuid.UUID
    client_id: uuid.UUID
    habit_date: date
    times_done: int
    completed: bool
    required_per_day: int
    notes: Optional[str] = None


def clamp_times_done(value: int) -> int:
    return min(max(value, 0), MAX_TIMES_PER_DAY)


def resolve_delta(delta: Optional[int], completed: Optional[bool]) -> int:
    """Signed change requested by the caller; a completed flag means +1 / -1."""
    if delta is not None:
        return delta
    if completed is None:
        raise InvalidInputError("Either delta or completed must be provided")
    return 1 if completed else -1


def check_edit_window(day: date, today: date, max_days_back: int = None):
    """Completions may be recorded for today and a few days back, never ahead."""
    if max_days_back is None:
        max_days_back = settings.HABIT_EDIT_WINDOW_DAYS
    if day > today:
        raise OutOfWindowError("Cannot record habits for future dates")
    if (today - day).days > max_days_back:
        raise OutOfWindowError(
            f"Habits can only be recorded up to {max_days_back} days in the past"
        )


def _clamped(expression):
    return case(
        (expression < 0, 0),
        (expression > MAX_TIMES_PER_DAY, MAX_TIMES_PER_DAY),
        else_=expression,
    )


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect]
    except KeyError:
        raise StorageFailureError(f"Completion upsert is not supported on the {dialect} dialect")


def upsert_completion(
    db: Session,
    client_id: uuid.UUID,
    programme_habit_id: uuid.UUID,
    habit_date: DateLike,
    delta: Optional[int] = None,
    completed: Optional[bool] = None,
    times_done: Optional[int] = None,
    notes: Optional[str] = None,
    today: Optional[date] = None,
) -> CompletionResult:
    """
    Apply a relative change (`delta`, or `completed` as +1/-1) or an absolute
    `times_done` to the client's record for the habit on `habit_date`.
    """
    provided = [value is not None for value in (delta, completed, times_done)]
    if sum(provided) != 1:
        raise InvalidInputError("Exactly one of delta, completed or times_done must be provided")
    if habit_date is None:
        raise InvalidInputError("Programme habit ID and completion date are required")

    day = to_day(habit_date)
    today = today or date.today()

    try:
        programme_habit = (
            db.query(ProgrammeHabit)
            .options(joinedload(ProgrammeHabit.programme), joinedload(ProgrammeHabit.habit))
            .filter(ProgrammeHabit.id == programme_habit_id)
            .first()
        )
        if programme_habit is None or not programme_habit.current:
            raise NotFoundError(f"Programme habit {programme_habit_id} not found")

        get_client_or_404(db, client_id)

        enrolled = db.query(ProgrammeEnrolment.id).filter(
            ProgrammeEnrolment.client_id == client_id,
            ProgrammeEnrolment.programme_id == programme_habit.programme_id,
        ).first()
    except SQLAlchemyError as e:
        logger.exception(f"[HABITS] Failed to resolve programme habit {programme_habit_id}")
        raise StorageFailureError("Database operation failed", details={"error": str(e)})

    if enrolled is None:
        raise NotEnrolledError("Not enrolled in programme")

    check_edit_window(day, today)
    if not programme_habit.programme.covers(day):
        raise OutOfWindowError(f"{day.isoformat()} is outside the programme's dates")

    required = required_per_day(to_scheduled_habit(programme_habit), day)

    table = ClientHabit.__table__
    if times_done is not None:
        initial = clamp_times_done(times_done)
        next_times_done = initial
    else:
        change = resolve_delta(delta, completed)
        initial = clamp_times_done(change)
        next_times_done = _clamped(table.c.times_done + change)

    now = datetime.utcnow()
    update_values = {
        "times_done": next_times_done,
        "completed": case((next_times_done >= required, true()), else_=false())
        if times_done is None else initial >= required,
        "updated_at": now,
    }
    if notes is not None:
        update_values["notes"] = notes

    insert = _insert_for(db)
    statement = (
        insert(table)
        .values(
            id=uuid.uuid4(),
            programme_habit_id=programme_habit.id,
            client_id=client_id,
            habit_date=day,
            times_done=initial,
            completed=initial >= required,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        .on_conflict_do_update(
            index_elements=[table.c.programme_habit_id, table.c.client_id, table.c.habit_date],
            set_=update_values,
        )
        .returning(table.c.id, table.c.times_done, table.c.completed, table.c.notes)
    )

    try:
        row = db.execute(statement).one()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(
            f"[HABITS] Upsert failed for programme habit {programme_habit_id}, client {client_id}, day {day}"
        )
        raise StorageFailureError("Database operation failed", details={"error": str(e)})

    logger.info(
        f"[HABITS] Client {client_id} habit {programme_habit_id} on {day}: "
        f"times_done={row.times_done}/{required} completed={bool(row.completed)}"
    )

    return CompletionResult(
        client_habit_id=row.id,
        programme_habit_id=programme_habit.id,
        client_id=client_id,
        habit_date=day,
        times_done=row.times_done,
        completed=bool(row.completed),
        required_per_day=required,
        notes=row.notes,
    )


def recompute_completed_flags(db: Session, programme_habit: ProgrammeHabit) -> int:
    """Re-derive `completed` on every stored row after the habit's targets change.

    Flushes but does not commit; returns the number of rows whose flag flipped.
    """
    scheduled = to_scheduled_habit(programme_habit)
    changed = 0
    rows = db.query(ClientHabit).filter(ClientHabit.programme_habit_id == programme_habit.id).all()
    for client_habit in rows:
        completed = client_habit.times_done >= required_per_day(scheduled, client_habit.habit_date)
        if client_habit.completed != completed:
            client_habit.completed = completed
            changed += 1
    db.flush()
    return changed
