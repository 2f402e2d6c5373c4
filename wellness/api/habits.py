"""
Habit calendar and completion endpoints.

Clients read and record their own habits; trainers and admins can read any
client's calendar.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date, timedelta
from typing import List
from uuid import UUID

from wellness.db.session import get_db
from wellness.api.deps import get_current_client, require_staff
from wellness.core.config import settings
from wellness.core.errors import InvalidInputError
from wellness.models.client import Client
from wellness.models.user import User
from wellness.schemas.habit import (
    ClientHabit as ClientHabitSchema,
    CompletionRequest,
    CompletionResponse,
    DailyHabit as DailyHabitSchema,
    HabitDayData as HabitDayDataSchema,
    HabitOverview,
)
from wellness.services.date_utils import to_date_range
from wellness.services.habit_completion import upsert_completion
from wellness.services.habit_provider import (
    get_client_or_404,
    load_completion_records,
    read_client_habits_by_date,
    read_client_habits_by_date_range,
)

router = APIRouter()


def _check_lookahead(start_date: date):
    limit = date.today() + timedelta(days=settings.HABIT_CALENDAR_LOOKAHEAD_DAYS)
    if start_date > limit:
        raise InvalidInputError(
            f"Cannot view habits more than {settings.HABIT_CALENDAR_LOOKAHEAD_DAYS} days ahead"
        )


def _overview(data) -> HabitOverview:
    return HabitOverview(
        query_parameters={k: (v.isoformat() if isinstance(v, date) else v) for k, v in data.query_parameters.items()},
        programmes=[
            {
                "id": p.id,
                "name": p.name,
                "human_readable_id": p.human_readable_id,
                "start_date": p.start_date,
                "end_date": p.end_date,
                "habits": [
                    {
                        "id": h.id,
                        "title": h.title,
                        "frequency_per_day": h.frequency_per_day,
                        **{day.frequency_field: count for day, count in h.frequencies.items()},
                    }
                    for h in p.habits
                ],
            }
            for p in data.programmes
        ],
        client_habits=[ClientHabitSchema.model_validate(r, from_attributes=True) for r in data.client_habits],
        habit_day_data=[HabitDayDataSchema.model_validate(d, from_attributes=True) for d in data.habit_day_data],
    )


@router.get("/days", response_model=List[HabitDayDataSchema])
def get_habit_day_data(
    start_date: date = Query(...),
    end_date: date = Query(...),
    client: Client = Depends(get_current_client),
    db: Session = Depends(get_db)
):
    """Scheduled and completed counts for every day in the range."""
    _check_lookahead(start_date)
    data = read_client_habits_by_date_range(db, client.id, start_date, end_date)
    return [HabitDayDataSchema.model_validate(d, from_attributes=True) for d in data.habit_day_data]


@router.get("/overview", response_model=HabitOverview)
def get_habit_overview(
    start_date: date = Query(...),
    end_date: date = Query(...),
    client: Client = Depends(get_current_client),
    db: Session = Depends(get_db)
):
    _check_lookahead(start_date)
    return _overview(read_client_habits_by_date_range(db, client.id, start_date, end_date))


@router.get("/daily", response_model=List[DailyHabitSchema])
def get_daily_habits(
    habit_date: date = Query(..., alias="date"),
    client: Client = Depends(get_current_client),
    db: Session = Depends(get_db)
):
    """Per-habit breakdown for one day."""
    _check_lookahead(habit_date)
    habits = read_client_habits_by_date(db, client.id, habit_date)
    return [DailyHabitSchema.model_validate(h, from_attributes=True) for h in habits]


@router.post("/completions", response_model=CompletionResponse)
def record_completion(
    body: CompletionRequest,
    client: Client = Depends(get_current_client),
    db: Session = Depends(get_db)
):
    result = upsert_completion(
        db,
        client_id=client.id,
        programme_habit_id=body.programme_habit_id,
        habit_date=body.habit_date,
        delta=body.delta,
        completed=body.completed,
        times_done=body.times_done,
        notes=body.notes,
    )
    return CompletionResponse.model_validate(result, from_attributes=True)


@router.get("/completions", response_model=List[ClientHabitSchema])
def list_completions(
    start_date: date = Query(...),
    end_date: date = Query(...),
    client: Client = Depends(get_current_client),
    db: Session = Depends(get_db)
):
    date_range = to_date_range(start_date, end_date)
    records = load_completion_records(db, client.id, date_range.start_day, date_range.end_day)
    return [ClientHabitSchema.model_validate(r, from_attributes=True) for r in records]


# Staff views of a client's calendar

@router.get("/clients/{client_id}/days", response_model=List[HabitDayDataSchema])
def get_client_habit_day_data(
    client_id: UUID,
    start_date: date = Query(...),
    end_date: date = Query(...),
    staff_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    get_client_or_404(db, client_id)
    _check_lookahead(start_date)
    data = read_client_habits_by_date_range(db, client_id, start_date, end_date)
    return [HabitDayDataSchema.model_validate(d, from_attributes=True) for d in data.habit_day_data]


@router.get("/clients/{client_id}/daily", response_model=List[DailyHabitSchema])
def get_client_daily_habits(
    client_id: UUID,
    habit_date: date = Query(..., alias="date"),
    staff_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    get_client_or_404(db, client_id)
    _check_lookahead(habit_date)
    habits = read_client_habits_by_date(db, client_id, habit_date)
    return [DailyHabitSchema.model_validate(h, from_attributes=True) for h in habits]
