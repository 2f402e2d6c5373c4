from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
import logging
import re

from wellness.db.session import get_db
from wellness.api.deps import require_staff
from wellness.models.user import User
from wellness.models.client import Client
from wellness.models.client_habit import ClientHabit
from wellness.models.habit import ProgrammeHabit
from wellness.models.programme import Programme, ProgrammeTemplate
from wellness.schemas.client import ClientSummary
from wellness.schemas.programme import (
    Programme as ProgrammeSchema,
    ProgrammeCreate,
    ProgrammeFromTemplate,
    ProgrammeTemplate as ProgrammeTemplateSchema,
    ProgrammeTemplateCreate,
    ProgrammeTemplateUpdate,
    ProgrammeUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CLIENT_SEARCH_LIMIT = 10
_COPIED_FIELDS = ("max_clients", "sessions_description", "programme_cost", "notes", "adhoc_data")
_REQUIRED_FIELDS = ("name", "human_readable_id", "start_date", "max_clients", "programme_cost")


def _get_template_or_404(db: Session, template_id: UUID) -> ProgrammeTemplate:
    template = db.get(ProgrammeTemplate, template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Programme template not found")
    return template


def _get_programme_or_404(db: Session, programme_id: UUID) -> Programme:
    programme = db.get(Programme, programme_id)
    if programme is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Programme not found")
    return programme


def _commit_programme(db: Session, programme: Programme):
    """Commit, turning a human_readable_id clash into a 409."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Programme ID {programme.human_readable_id} is already in use"
        )
    db.refresh(programme)


def _unique_human_readable_id(db: Session, base: str) -> str:
    candidate = base
    suffix = 2
    while db.query(Programme.id).filter(Programme.human_readable_id == candidate).first():
        candidate = f"{base}{suffix}"
        suffix += 1
    return candidate


# Templates

@router.get("/templates", response_model=List[ProgrammeTemplateSchema])
def list_templates(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    return db.query(ProgrammeTemplate).order_by(ProgrammeTemplate.name.asc()).all()


@router.get("/templates/{template_id}", response_model=ProgrammeTemplateSchema)
def get_template(
    template_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    return _get_template_or_404(db, template_id)


@router.post("/templates", response_model=ProgrammeTemplateSchema, status_code=status.HTTP_201_CREATED)
def create_template(
    body: ProgrammeTemplateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    template = ProgrammeTemplate(**body.model_dump())
    db.add(template)
    db.commit()
    db.refresh(template)
    logger.info(f"[PROGRAMMES] Template {template.id} '{template.name}' created")
    return template


@router.put("/templates/{template_id}", response_model=ProgrammeTemplateSchema)
def update_template(
    template_id: UUID,
    body: ProgrammeTemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    template = _get_template_or_404(db, template_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(template, field, value)
    db.commit()
    db.refresh(template)
    return template


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Programmes created from the template keep existing, unlinked."""
    template = _get_template_or_404(db, template_id)
    for programme in template.programmes:
        programme.programme_template_id = None
    db.delete(template)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Client search for the enrolment screen

@router.get("/clients/search", response_model=List[ClientSummary])
def search_clients(
    q: str = Query(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    term = q.strip()
    if len(term) < 2:
        return []
    pattern = f"%{term}%"
    return (
        db.query(Client)
        .filter(or_(Client.first_name.ilike(pattern), Client.last_name.ilike(pattern)))
        .order_by(Client.first_name.asc(), Client.last_name.asc())
        .limit(CLIENT_SEARCH_LIMIT)
        .all()
    )


# Programmes

@router.get("", response_model=List[ProgrammeSchema])
def list_programmes(
    active_on: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    query = db.query(Programme)
    if active_on:
        query = query.filter(
            Programme.start_date <= active_on,
            or_(Programme.end_date.is_(None), Programme.end_date >= active_on)
        )
    return query.order_by(Programme.start_date.desc(), Programme.name.asc()).all()


@router.post("", response_model=ProgrammeSchema, status_code=status.HTTP_201_CREATED)
def create_programme(
    body: ProgrammeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    if body.programme_template_id:
        _get_template_or_404(db, body.programme_template_id)
    programme = Programme(**body.model_dump())
    db.add(programme)
    _commit_programme(db, programme)
    logger.info(f"[PROGRAMMES] Programme {programme.human_readable_id} created")
    return programme


@router.post("/from-template", response_model=ProgrammeSchema, status_code=status.HTTP_201_CREATED)
def create_programme_from_template(
    body: ProgrammeFromTemplate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    template = _get_template_or_404(db, body.template_id)
    if body.end_date is not None and body.end_date < body.start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be on or after start date")

    timestamp = int(datetime.utcnow().timestamp() * 1000)
    slug = re.sub(r"\s+", "_", template.name.strip()).upper()
    base_id = f"{slug}_{timestamp}"
    programme = Programme(
        programme_template_id=template.id,
        human_readable_id=_unique_human_readable_id(db, base_id),
        name=body.name or template.name,
        start_date=body.start_date,
        end_date=body.end_date,
        **{field: getattr(template, field) for field in _COPIED_FIELDS},
    )
    db.add(programme)
    _commit_programme(db, programme)
    logger.info(f"[PROGRAMMES] Programme {programme.human_readable_id} created from template {template.id}")
    return programme


@router.get("/{programme_id}", response_model=ProgrammeSchema)
def get_programme(
    programme_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    return _get_programme_or_404(db, programme_id)


@router.put("/{programme_id}", response_model=ProgrammeSchema)
def update_programme(
    programme_id: UUID,
    body: ProgrammeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    programme = _get_programme_or_404(db, programme_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(programme, field, value)

    if programme.end_date is not None and programme.end_date < programme.start_date:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be on or after start date")

    _commit_programme(db, programme)
    return programme


@router.post("/{programme_id}/duplicate", response_model=ProgrammeSchema, status_code=status.HTTP_201_CREATED)
def duplicate_programme(
    programme_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """
    Copy a programme and its current habits. The copy starts today with no
    end date and no enrolments.
    """
    original = _get_programme_or_404(db, programme_id)
    copy = Programme(
        programme_template_id=original.programme_template_id,
        human_readable_id=_unique_human_readable_id(db, f"{original.human_readable_id}_copy"),
        name=f"{original.name} (Copy)",
        start_date=date.today(),
        **{field: getattr(original, field) for field in _COPIED_FIELDS if field != "notes"},
        notes=f"{original.notes} (Copied)" if original.notes else "Copied programme",
    )
    for programme_habit in original.programme_habits:
        if not programme_habit.current:
            continue
        copy.programme_habits.append(ProgrammeHabit(
            habit_id=programme_habit.habit_id,
            notes=programme_habit.notes,
            frequency_per_week=programme_habit.frequency_per_week,
            frequency_per_day=programme_habit.frequency_per_day,
            mon_frequency=programme_habit.mon_frequency,
            tue_frequency=programme_habit.tue_frequency,
            wed_frequency=programme_habit.wed_frequency,
            thu_frequency=programme_habit.thu_frequency,
            fri_frequency=programme_habit.fri_frequency,
            sat_frequency=programme_habit.sat_frequency,
            sun_frequency=programme_habit.sun_frequency,
        ))
    db.add(copy)
    _commit_programme(db, copy)
    logger.info(f"[PROGRAMMES] Programme {original.human_readable_id} duplicated as {copy.human_readable_id}")
    return copy


@router.delete("/{programme_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_programme(
    programme_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    programme = _get_programme_or_404(db, programme_id)
    has_completions = (
        db.query(ClientHabit.id)
        .join(ProgrammeHabit, ProgrammeHabit.id == ClientHabit.programme_habit_id)
        .filter(ProgrammeHabit.programme_id == programme.id)
        .first()
    )
    if has_completions:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Programme has recorded habit completions and cannot be deleted"
        )
    db.delete(programme)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
