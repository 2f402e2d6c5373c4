from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union
import uuid

from wellness.schemas.client import ClientSummary


class ProgrammeTemplateBase(BaseModel):
    name: str
    max_clients: int = Field(default=0, ge=0)
    sessions_description: Optional[Any] = None
    programme_cost: Union[float, Decimal] = Field(default=0, ge=0)
    notes: Optional[str] = None
    adhoc_data: Optional[Any] = None

    @field_validator('programme_cost', mode='before')
    @classmethod
    def convert_decimal_to_float(cls, v):
        """Convert Decimal to float for serialization"""
        if isinstance(v, Decimal):
            return float(v)
        return v if v is not None else 0.0

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class ProgrammeTemplateCreate(ProgrammeTemplateBase):
    pass


class ProgrammeTemplateUpdate(BaseModel):
    name: Optional[str] = None
    max_clients: Optional[int] = Field(default=None, ge=0)
    sessions_description: Optional[Any] = None
    programme_cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    adhoc_data: Optional[Any] = None


class ProgrammeTemplate(ProgrammeTemplateBase):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProgrammeBase(ProgrammeTemplateBase):
    human_readable_id: str
    start_date: date
    end_date: Optional[date] = None
    programme_template_id: Optional[uuid.UUID] = None

    @model_validator(mode='after')
    def validate_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class ProgrammeCreate(ProgrammeBase):
    pass


class ProgrammeUpdate(BaseModel):
    name: Optional[str] = None
    human_readable_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    programme_template_id: Optional[uuid.UUID] = None
    max_clients: Optional[int] = Field(default=None, ge=0)
    sessions_description: Optional[Any] = None
    programme_cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    adhoc_data: Optional[Any] = None


class Programme(ProgrammeBase):
    id: uuid.UUID
    enrolment_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProgrammeFromTemplate(BaseModel):
    template_id: uuid.UUID
    start_date: date
    end_date: Optional[date] = None
    name: Optional[str] = None


class EnrolmentCreate(BaseModel):
    programme_id: uuid.UUID
    client_id: uuid.UUID
    notes: Optional[str] = None


class ProgrammeRef(BaseModel):
    id: uuid.UUID
    name: str
    human_readable_id: str
    max_clients: int

    class Config:
        from_attributes = True


class Enrolment(BaseModel):
    id: uuid.UUID
    programme_id: uuid.UUID
    client_id: uuid.UUID
    notes: Optional[str] = None
    programme: Optional[ProgrammeRef] = None
    client: Optional[ClientSummary] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
