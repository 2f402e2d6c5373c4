from wellness.schemas.user import User, UserLogin, UserRegister, Token
from wellness.schemas.client import Client, ClientSummary, ClientProfileUpdate, ContactInfoItem
from wellness.schemas.habit import (
    Habit, HabitCreate, HabitUpdate,
    ProgrammeHabit, ProgrammeHabitCreate, ProgrammeHabitUpdate,
    HabitDayData, DailyHabit, HabitOverview, CompletionRequest, CompletionResponse,
)
from wellness.schemas.programme import (
    Programme, ProgrammeCreate, ProgrammeUpdate,
    ProgrammeTemplate, ProgrammeTemplateCreate, ProgrammeTemplateUpdate,
    Enrolment, EnrolmentCreate,
)
from wellness.schemas.oauth import OAuthAccount, OAuthStartResponse

__all__ = [
    "User", "UserLogin", "UserRegister", "Token",
    "Client", "ClientSummary", "ClientProfileUpdate", "ContactInfoItem",
    "Habit", "HabitCreate", "HabitUpdate",
    "ProgrammeHabit", "ProgrammeHabitCreate", "ProgrammeHabitUpdate",
    "HabitDayData", "DailyHabit", "HabitOverview", "CompletionRequest", "CompletionResponse",
    "Programme", "ProgrammeCreate", "ProgrammeUpdate",
    "ProgrammeTemplate", "ProgrammeTemplateCreate", "ProgrammeTemplateUpdate",
    "Enrolment", "EnrolmentCreate",
    "OAuthAccount", "OAuthStartResponse",
]
