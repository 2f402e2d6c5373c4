from wellness.models.user import User, UserRole
from wellness.models.client import Client
from wellness.models.programme import Programme, ProgrammeTemplate
from wellness.models.habit import Habit, ProgrammeHabit
from wellness.models.enrolment import ProgrammeEnrolment
from wellness.models.client_habit import ClientHabit
from wellness.models.oauth_token import OAuthToken, OAuthProvider
from wellness.models.audit_log import AuditLog, AuditEventType

__all__ = [
    "User", "UserRole", "Client", "Programme", "ProgrammeTemplate",
    "Habit", "ProgrammeHabit", "ProgrammeEnrolment", "ClientHabit",
    "OAuthToken", "OAuthProvider", "AuditLog", "AuditEventType"
]
