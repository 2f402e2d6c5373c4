from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import List, Optional
import uuid

from wellness.models.client_habit import MAX_TIMES_PER_DAY


class FrequencyPerWeek(BaseModel):
    """How often a habit is meant to happen: days per week and repetitions per day."""
    per_week: int = Field(ge=0, le=7)
    per_day: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)

    @field_validator('per_week', mode='before')
    @classmethod
    def parse_per_week(cls, v):
        """Accept the labels the admin UI submits ("Every day", "5") as well as numbers."""
        if isinstance(v, str):
            v = v.strip()
            if v.lower() == "every day":
                return 7
            if not v.isdigit():
                raise ValueError(f"Invalid per_week value: {v}")
            return int(v)
        return v


# Habits

class HabitBase(BaseModel):
    title: str
    notes: Optional[str] = None
    frequency_per_week: FrequencyPerWeek
    frequency_per_day: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    current: bool = True

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class HabitCreate(HabitBase):
    pass


class HabitUpdate(HabitBase):
    pass


class Habit(HabitBase):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Programme habits

class WeekdayFrequencies(BaseModel):
    mon_frequency: int = Field(default=0, ge=0, le=MAX_TIMES_PER_DAY)
    tue_frequency: int = Field(default=0, ge=0, le=MAX_TIMES_PER_DAY)
    wed_frequency: int = Field(default=0, ge=0, le=MAX_TIMES_PER_DAY)
    thu_frequency: int = Field(default=0, ge=0, le=MAX_TIMES_PER_DAY)
    fri_frequency: int = Field(default=0, ge=0, le=MAX_TIMES_PER_DAY)
    sat_frequency: int = Field(default=0, ge=0, le=MAX_TIMES_PER_DAY)
    sun_frequency: int = Field(default=0, ge=0, le=MAX_TIMES_PER_DAY)


class ProgrammeHabitCreate(WeekdayFrequencies):
    programme_id: uuid.UUID
    habit_id: uuid.UUID
    notes: Optional[str] = None
    frequency_per_week: Optional[FrequencyPerWeek] = None
    frequency_per_day: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    current: bool = True


class ProgrammeHabitUpdate(BaseModel):
    notes: Optional[str] = None
    frequency_per_week: Optional[FrequencyPerWeek] = None
    frequency_per_day: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    mon_frequency: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    tue_frequency: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    wed_frequency: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    thu_frequency: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    fri_frequency: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    sat_frequency: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    sun_frequency: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    current: Optional[bool] = None


class ProgrammeHabit(WeekdayFrequencies):
    id: uuid.UUID
    programme_id: uuid.UUID
    habit_id: uuid.UUID
    habit_title: Optional[str] = None
    notes: Optional[str] = None
    frequency_per_week: Optional[FrequencyPerWeek] = None
    frequency_per_day: Optional[int] = None
    current: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Calendar and completion views

class HabitDayData(BaseModel):
    date: date
    day_number: int
    scheduled_count: int
    completed_count: int
    completion_rate: float
    is_programme_day: bool
    is_locked: bool
    is_current_month: bool
    color: str

    class Config:
        from_attributes = True


class DailyHabit(BaseModel):
    programme_habit_id: uuid.UUID
    programme_id: uuid.UUID
    title: str
    habit_date: date
    client_habit_id: Optional[uuid.UUID] = None
    times_done: int
    required_per_day: int
    completed: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class ClientHabit(BaseModel):
    """A stored completion record."""
    id: Optional[uuid.UUID] = None
    programme_habit_id: uuid.UUID
    habit_date: date
    times_done: int
    completed: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class ProgrammeHabitSummary(BaseModel):
    id: uuid.UUID
    title: str
    mon_frequency: int = 0
    tue_frequency: int = 0
    wed_frequency: int = 0
    thu_frequency: int = 0
    fri_frequency: int = 0
    sat_frequency: int = 0
    sun_frequency: int = 0
    frequency_per_day: Optional[int] = None


class ProgrammeScheduleSummary(BaseModel):
    id: uuid.UUID
    name: str
    human_readable_id: str
    start_date: date
    end_date: Optional[date] = None
    habits: List[ProgrammeHabitSummary]


class HabitOverview(BaseModel):
    """Everything the calendar screen needs for one range, in one response."""
    query_parameters: dict
    programmes: List[ProgrammeScheduleSummary]
    client_habits: List[ClientHabit]
    habit_day_data: List[HabitDayData]


class CompletionRequest(BaseModel):
    """
    Record repetitions for one habit on one day. Send exactly one of:
    `delta` (signed change), `completed` (true = +1, false = -1) or
    `times_done` (absolute count).
    """
    programme_habit_id: uuid.UUID
    habit_date: date
    delta: Optional[int] = Field(default=None, ge=-MAX_TIMES_PER_DAY, le=MAX_TIMES_PER_DAY)
    completed: Optional[bool] = None
    times_done: Optional[int] = Field(default=None, ge=0, le=MAX_TIMES_PER_DAY)
    notes: Optional[str] = None

    @model_validator(mode='after')
    def validate_one_change(self):
        provided = [v for v in (self.delta, self.completed, self.times_done) if v is not None]
        if len(provided) != 1:
            raise ValueError("Exactly one of delta, completed or times_done must be provided")
        return self


class CompletionResponse(BaseModel):
    client_habit_id: uuid.UUID
    programme_habit_id: uuid.UUID
    client_id: uuid.UUID
    habit_date: date
    times_done: int
    completed: bool
    required_per_day: int
    notes: Optional[str] = None

    class Config:
        from_attributes = True
