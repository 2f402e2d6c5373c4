"""
Admin API endpoints for managing habits, programme habits and enrolments.
Only accessible to admin and system admin users.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from uuid import UUID
import logging

from wellness.db.session import get_db
from wellness.api.deps import require_admin
from wellness.models.user import User
from wellness.models.client import Client
from wellness.models.client_habit import ClientHabit
from wellness.models.habit import Habit, ProgrammeHabit
from wellness.models.programme import Programme
from wellness.models.enrolment import ProgrammeEnrolment
from wellness.schemas.habit import (
    Habit as HabitSchema,
    HabitCreate,
    HabitUpdate,
    ProgrammeHabit as ProgrammeHabitSchema,
    ProgrammeHabitCreate,
    ProgrammeHabitUpdate,
)
from wellness.schemas.programme import Enrolment as EnrolmentSchema, EnrolmentCreate
from wellness.services.habit_completion import recompute_completed_flags

logger = logging.getLogger(__name__)

router = APIRouter()

_NULLABLE_PROGRAMME_HABIT_FIELDS = {"notes", "frequency_per_week", "frequency_per_day"}


def _get_or_404(db: Session, model, object_id: UUID, label: str):
    obj = db.get(model, object_id)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return obj


# Habits

@router.get("/habits", response_model=List[HabitSchema])
def list_habits(
    current: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    query = db.query(Habit)
    if current is not None:
        query = query.filter(Habit.current == current)
    return query.order_by(Habit.created_at.desc()).all()


@router.post("/habits", response_model=HabitSchema, status_code=status.HTTP_201_CREATED)
def create_habit(
    body: HabitCreate,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    habit = Habit(
        title=body.title,
        notes=body.notes,
        frequency_per_week=body.frequency_per_week.model_dump(),
        frequency_per_day=body.frequency_per_day,
        current=body.current,
    )
    db.add(habit)
    db.commit()
    db.refresh(habit)
    logger.info(f"[ADMIN] Habit {habit.id} '{habit.title}' created by {admin_user.email}")
    return habit


@router.put("/habits/{habit_id}", response_model=HabitSchema)
def update_habit(
    habit_id: UUID,
    body: HabitUpdate,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    habit = _get_or_404(db, Habit, habit_id, "Habit")
    habit.title = body.title
    habit.notes = body.notes
    habit.frequency_per_week = body.frequency_per_week.model_dump()
    habit.frequency_per_day = body.frequency_per_day
    habit.current = body.current
    db.commit()
    db.refresh(habit)
    return habit


@router.delete("/habits/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_habit(
    habit_id: UUID,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    """
    Delete a habit. A habit still assigned to programmes is retired
    (current=False) instead, along with its programme habits.
    """
    habit = _get_or_404(db, Habit, habit_id, "Habit")
    if habit.programme_habits:
        habit.current = False
        for programme_habit in habit.programme_habits:
            programme_habit.current = False
        logger.info(f"[ADMIN] Habit {habit.id} is assigned to programmes, retired instead of deleted")
    else:
        db.delete(habit)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Programme habits

@router.get("/programme-habits", response_model=List[ProgrammeHabitSchema])
def list_programme_habits(
    programme_id: Optional[UUID] = Query(None),
    include_disabled: bool = Query(False),
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    query = db.query(ProgrammeHabit).options(joinedload(ProgrammeHabit.habit))
    if programme_id:
        query = query.filter(ProgrammeHabit.programme_id == programme_id)
    if not include_disabled:
        query = query.filter(ProgrammeHabit.current.is_(True))
    return query.order_by(ProgrammeHabit.created_at).all()


@router.post("/programme-habits", response_model=ProgrammeHabitSchema, status_code=status.HTTP_201_CREATED)
def create_programme_habit(
    body: ProgrammeHabitCreate,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    _get_or_404(db, Programme, body.programme_id, "Programme")
    habit = _get_or_404(db, Habit, body.habit_id, "Habit")

    values = body.model_dump()
    if values["frequency_per_week"] is None:
        values["frequency_per_week"] = habit.frequency_per_week

    programme_habit = ProgrammeHabit(**values)
    db.add(programme_habit)
    db.commit()
    db.refresh(programme_habit)
    logger.info(f"[ADMIN] Habit {habit.id} assigned to programme {body.programme_id}")
    return programme_habit


@router.put("/programme-habits/{programme_habit_id}", response_model=ProgrammeHabitSchema)
def update_programme_habit(
    programme_habit_id: UUID,
    body: ProgrammeHabitUpdate,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    programme_habit = _get_or_404(db, ProgrammeHabit, programme_habit_id, "Programme habit")

    # Only fields present in the request are changed, so frequency_per_day can be cleared with null
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field not in _NULLABLE_PROGRAMME_HABIT_FIELDS:
            continue
        setattr(programme_habit, field, value)

    changed = recompute_completed_flags(db, programme_habit)
    db.commit()
    db.refresh(programme_habit)
    if changed:
        logger.info(f"[ADMIN] Programme habit {programme_habit.id} targets changed, {changed} completion records updated")
    return programme_habit


@router.delete("/programme-habits/{programme_habit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_programme_habit(
    programme_habit_id: UUID,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    """Soft-disable when completion records reference the programme habit, otherwise delete."""
    programme_habit = _get_or_404(db, ProgrammeHabit, programme_habit_id, "Programme habit")

    referenced = db.query(ClientHabit.id).filter(
        ClientHabit.programme_habit_id == programme_habit.id
    ).first()
    if referenced:
        programme_habit.current = False
        logger.info(f"[ADMIN] Programme habit {programme_habit.id} has completion records, disabled instead of deleted")
    else:
        db.delete(programme_habit)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Enrolments

@router.get("/programme-enrolments", response_model=List[EnrolmentSchema])
def list_enrolments(
    programme_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    query = db.query(ProgrammeEnrolment).options(
        joinedload(ProgrammeEnrolment.programme),
        joinedload(ProgrammeEnrolment.client),
    )
    if programme_id:
        query = query.filter(ProgrammeEnrolment.programme_id == programme_id)
    return query.order_by(ProgrammeEnrolment.created_at.desc()).all()


@router.post("/programme-enrolments", response_model=EnrolmentSchema, status_code=status.HTTP_201_CREATED)
def create_enrolment(
    body: EnrolmentCreate,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    programme = _get_or_404(db, Programme, body.programme_id, "Programme")
    _get_or_404(db, Client, body.client_id, "Client")

    existing = db.query(ProgrammeEnrolment).filter(
        ProgrammeEnrolment.programme_id == body.programme_id,
        ProgrammeEnrolment.client_id == body.client_id
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Client is already enrolled in this programme"
        )

    enrolled_count = db.query(func.count(ProgrammeEnrolment.id)).filter(
        ProgrammeEnrolment.programme_id == programme.id
    ).scalar() or 0
    # max_clients of 0 means no limit
    if programme.max_clients and enrolled_count >= programme.max_clients:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Programme is at maximum capacity"
        )

    enrolment = ProgrammeEnrolment(
        programme_id=body.programme_id,
        client_id=body.client_id,
        notes=body.notes,
    )
    db.add(enrolment)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent enrolment of the same client
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Client is already enrolled in this programme"
        )
    db.refresh(enrolment)
    logger.info(f"[ADMIN] Client {body.client_id} enrolled in programme {programme.human_readable_id}")
    return enrolment


@router.delete("/programme-enrolments/{enrolment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_enrolment(
    enrolment_id: UUID,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    enrolment = _get_or_404(db, ProgrammeEnrolment, enrolment_id, "Enrolment")
    db.delete(enrolment)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
