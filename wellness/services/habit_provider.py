"""
Loads programmes and completion records for a client and hands them to the
pure aggregation functions.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
import logging
import uuid

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from wellness.core.errors import NotFoundError, StorageFailureError
from wellness.models.client import Client
from wellness.models.client_habit import ClientHabit
from wellness.models.enrolment import ProgrammeEnrolment
from wellness.models.habit import ProgrammeHabit
from wellness.models.programme import Programme
from wellness.services.date_utils import DateLike, Weekday, to_date_range, to_day
from wellness.services.habit_aggregation import (
    CompletionRecord,
    DailyHabit,
    HabitDayData,
    ProgrammeSchedule,
    ScheduledHabit,
    build_daily_habits,
    calculate_habit_day_data,
)

logger = logging.getLogger(__name__)


@dataclass
class HabitIntermediateData:
    query_parameters: dict
    programmes: List[ProgrammeSchedule]
    client_habits: List[CompletionRecord]
    habit_day_data: List[HabitDayData]


def to_scheduled_habit(programme_habit: ProgrammeHabit) -> ScheduledHabit:
    return ScheduledHabit(
        id=programme_habit.id,
        programme_id=programme_habit.programme_id,
        title=programme_habit.habit.title if programme_habit.habit else "",
        frequencies={day: getattr(programme_habit, day.frequency_field) or 0 for day in Weekday},
        frequency_per_day=programme_habit.frequency_per_day,
    )


def to_programme_schedule(programme: Programme) -> ProgrammeSchedule:
    return ProgrammeSchedule(
        id=programme.id,
        name=programme.name,
        human_readable_id=programme.human_readable_id,
        start_date=programme.start_date,
        end_date=programme.end_date,
        habits=tuple(to_scheduled_habit(ph) for ph in programme.programme_habits if ph.current),
    )


def to_completion_record(client_habit: ClientHabit) -> CompletionRecord:
    return CompletionRecord(
        id=client_habit.id,
        programme_habit_id=client_habit.programme_habit_id,
        habit_date=client_habit.habit_date,
        times_done=client_habit.times_done,
        completed=client_habit.completed,
        notes=client_habit.notes,
    )


def get_client_or_404(db: Session, client_id: uuid.UUID) -> Client:
    client = db.get(Client, client_id)
    if client is None:
        raise NotFoundError(f"Client with ID {client_id} not found")
    return client


def load_programme_schedules(
    db: Session, client_id: uuid.UUID, begin: date, finish: Optional[date]
) -> List[ProgrammeSchedule]:
    """
    Programmes the client is enrolled in whose window overlaps [begin, finish].
    A missing finish selects programmes running on `begin` only.
    """
    if finish is None:
        finish = begin
    try:
        get_client_or_404(db, client_id)
        programmes = (
            db.query(Programme)
            .join(ProgrammeEnrolment, ProgrammeEnrolment.programme_id == Programme.id)
            .filter(
                ProgrammeEnrolment.client_id == client_id,
                Programme.start_date <= finish,
                or_(Programme.end_date.is_(None), Programme.end_date >= begin),
            )
            .options(selectinload(Programme.programme_habits).selectinload(ProgrammeHabit.habit))
            .order_by(Programme.start_date, Programme.name)
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception(f"[HABITS] Failed to load programmes for client {client_id}")
        raise StorageFailureError("Failed to fetch programmes", details={"error": str(e)})

    return [to_programme_schedule(p) for p in programmes]


def load_completion_records(
    db: Session, client_id: uuid.UUID, begin: date, finish: date
) -> List[CompletionRecord]:
    try:
        rows = (
            db.query(ClientHabit)
            .filter(
                ClientHabit.client_id == client_id,
                ClientHabit.habit_date >= begin,
                ClientHabit.habit_date <= finish,
            )
            .order_by(ClientHabit.habit_date)
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception(f"[HABITS] Failed to load completion records for client {client_id}")
        raise StorageFailureError("Failed to fetch client habits", details={"error": str(e)})

    return [to_completion_record(row) for row in rows]


def read_client_habits_by_date_range(
    db: Session, client_id: uuid.UUID, start: DateLike, end: DateLike
) -> HabitIntermediateData:
    date_range = to_date_range(start, end)
    begin, finish = date_range.start_day, date_range.end_day

    programmes = load_programme_schedules(db, client_id, begin, finish)
    records = load_completion_records(db, client_id, begin, finish)
    day_data = calculate_habit_day_data(date_range, programmes, records)

    logger.debug(
        f"[HABITS] Client {client_id}: {len(day_data)} days, {len(programmes)} programmes, {len(records)} records"
    )

    return HabitIntermediateData(
        query_parameters={
            "function_name": "read_client_habits_by_date_range",
            "client_id": str(client_id),
            "start_date": begin,
            "end_date": finish,
            "duration": date_range.duration,
        },
        programmes=programmes,
        client_habits=records,
        habit_day_data=day_data,
    )


def read_client_habits_by_date(db: Session, client_id: uuid.UUID, day: DateLike) -> List[DailyHabit]:
    day = to_day(day)
    programmes = load_programme_schedules(db, client_id, day, None)
    if not programmes:
        return []
    records = load_completion_records(db, client_id, day, day)
    return build_daily_habits(day, programmes, records)
