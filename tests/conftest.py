"""Shared fixtures: an in-memory SQLite database wired into the app, plus users and a programme."""
import os

from cryptography.fernet import Fernet

# Settings are read at import time, so the environment is set before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wellness.main import app
from wellness.db.session import Base, get_db
from wellness.core.rate_limit import reset_rate_limits
from wellness.core.security import create_access_token, get_password_hash
from wellness.models.user import User, UserRole
from wellness.models.client import Client
from wellness.models.programme import Programme
from wellness.models.habit import Habit, ProgrammeHabit
from wellness.models.enrolment import ProgrammeEnrolment

PASSWORD = "password123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    reset_rate_limits()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_rate_limits()


def make_user(db, email: str, role: UserRole) -> User:
    user = User(email=email, hashed_password=get_password_hash(PASSWORD), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_client(db, email: str, first_name: str = "Jane", last_name: str = "Doe") -> Client:
    user = make_user(db, email, UserRole.CLIENT)
    client = Client(
        user_id=user.id,
        first_name=first_name,
        last_name=last_name,
        contact_info=[{"type": "email", "value": email, "primary": True}],
    )
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.email, "user_id": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


def make_programme(db, human_readable_id: str, start_date: date, end_date=None, max_clients: int = 10, **frequencies) -> Programme:
    """A programme with one habit; `frequencies` are ProgrammeHabit weekday fields."""
    programme = Programme(
        human_readable_id=human_readable_id,
        name=human_readable_id.replace("_", " ").title(),
        start_date=start_date,
        end_date=end_date,
        max_clients=max_clients,
    )
    habit = Habit(title="Stretch", frequency_per_week={"per_week": 1, "per_day": 2})
    programme.programme_habits.append(ProgrammeHabit(habit=habit, **frequencies))
    db.add(programme)
    db.commit()
    db.refresh(programme)
    return programme


def enrol(db, client: Client, programme: Programme) -> ProgrammeEnrolment:
    enrolment = ProgrammeEnrolment(programme_id=programme.id, client_id=client.id)
    db.add(enrolment)
    db.commit()
    return enrolment


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def trainer_user(db):
    return make_user(db, "trainer@example.com", UserRole.TRAINER)


@pytest.fixture
def client_profile(db):
    return make_client(db, "client@example.com")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def trainer_headers(trainer_user):
    return auth_headers(trainer_user)


@pytest.fixture
def client_headers(db, client_profile):
    return auth_headers(db.get(User, client_profile.user_id))


@pytest.fixture
def january_programme(db, client_profile):
    """January 2025, one habit needed twice on Wednesdays only; the client is enrolled."""
    programme = make_programme(db, "JAN_2025", date(2025, 1, 1), date(2025, 1, 31), wed_frequency=2)
    enrol(db, client_profile, programme)
    return programme


@pytest.fixture
def wednesday_habit(january_programme):
    return january_programme.programme_habits[0]


@pytest.fixture
def current_programme(db, client_profile):
    """Open-ended programme running since last week with a once-a-day habit."""
    every_day = {day: 1 for day in ("mon", "tue", "wed", "thu", "fri", "sat", "sun")}
    programme = make_programme(
        db,
        "DAILY_MOVES",
        date.today() - timedelta(days=7),
        **{f"{day}_frequency": count for day, count in every_day.items()},
    )
    enrol(db, client_profile, programme)
    return programme
