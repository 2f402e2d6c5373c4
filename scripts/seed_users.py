#!/usr/bin/env python3
"""Seed the sudo admin, a trainer and a demo client enrolled in a sample programme"""
import sys
import os
from datetime import date

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from sqlalchemy.orm import Session
from wellness.db.session import SessionLocal
from wellness.models.user import User, UserRole
from wellness.models.client import Client
from wellness.models.habit import Habit, ProgrammeHabit
from wellness.models.programme import Programme
from wellness.models.enrolment import ProgrammeEnrolment
from wellness.core.security import get_password_hash
from wellness.core.config import settings

DEMO_PASSWORD = "wellness123"
DEMO_PROGRAMME_ID = "DEMO_HABITS"


def _get_or_create_user(db: Session, email: str, password: str, role: UserRole) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        print(f"User {email} already exists")
        return user
    user = User(email=email, hashed_password=get_password_hash(password), role=role)
    db.add(user)
    db.flush()
    print(f"User created: {email} ({role.value})")
    return user


def seed_users():
    db: Session = SessionLocal()
    try:
        _get_or_create_user(db, settings.SUDO_ADMIN_EMAIL, settings.SUDO_ADMIN_PASSWORD, UserRole.SYSTEM_ADMIN)
        _get_or_create_user(db, "trainer@wellness.local", DEMO_PASSWORD, UserRole.TRAINER)
        client_user = _get_or_create_user(db, "client@wellness.local", DEMO_PASSWORD, UserRole.CLIENT)

        client = client_user.client
        if client is None:
            client = Client(
                user_id=client_user.id,
                first_name="Demo",
                last_name="Client",
                contact_info=[{"type": "email", "value": client_user.email, "primary": True}],
            )
            db.add(client)
            db.flush()

        programme = db.query(Programme).filter(Programme.human_readable_id == DEMO_PROGRAMME_ID).first()
        if programme is None:
            programme = Programme(
                human_readable_id=DEMO_PROGRAMME_ID,
                name="Demo Habits Programme",
                start_date=date.today().replace(day=1),
                max_clients=10,
            )
            walk = Habit(title="Walk 10,000 steps", frequency_per_week={"per_week": 7, "per_day": None})
            water = Habit(title="Drink a glass of water", frequency_per_week={"per_week": 7, "per_day": 3}, frequency_per_day=3)
            programme.programme_habits.append(ProgrammeHabit(
                habit=walk,
                mon_frequency=1, tue_frequency=1, wed_frequency=1, thu_frequency=1,
                fri_frequency=1, sat_frequency=1, sun_frequency=1,
            ))
            programme.programme_habits.append(ProgrammeHabit(
                habit=water,
                frequency_per_day=3,
                mon_frequency=1, tue_frequency=1, wed_frequency=1, thu_frequency=1, fri_frequency=1,
            ))
            db.add(programme)
            db.flush()
            print(f"Programme created: {DEMO_PROGRAMME_ID}")

        enrolled = db.query(ProgrammeEnrolment).filter(
            ProgrammeEnrolment.programme_id == programme.id,
            ProgrammeEnrolment.client_id == client.id
        ).first()
        if not enrolled:
            db.add(ProgrammeEnrolment(programme_id=programme.id, client_id=client.id))
            print(f"Enrolled {client_user.email} in {DEMO_PROGRAMME_ID}")

        db.commit()
        print(f"Demo password for trainer and client: {DEMO_PASSWORD}")
        print("Admin password: (use SUDO_ADMIN_PASSWORD from env)")
    except Exception as e:
        db.rollback()
        print(f"Error seeding users: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_users()
