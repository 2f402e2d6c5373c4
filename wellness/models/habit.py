from sqlalchemy import Column, String, DateTime, Integer, Boolean, JSON, Text, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from wellness.db.session import Base


class Habit(Base):
    """A named wellness activity, reusable across programmes."""
    __tablename__ = "habits"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    frequency_per_week = Column(JSON, nullable=False)  # {"per_week": int, "per_day": int | null}
    frequency_per_day = Column(Integer, nullable=True)
    current = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    programme_habits = relationship("ProgrammeHabit", back_populates="habit")


class ProgrammeHabit(Base):
    """
    A Habit assigned to a Programme with one frequency target per weekday.
    A frequency of 0 means the habit is not scheduled that day.
    """
    __tablename__ = "programme_habits"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    programme_id = Column(Uuid(as_uuid=True), ForeignKey("programmes.id", ondelete="CASCADE"), nullable=False, index=True)
    habit_id = Column(Uuid(as_uuid=True), ForeignKey("habits.id"), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    frequency_per_week = Column(JSON, nullable=True)
    frequency_per_day = Column(Integer, nullable=True)  # Overrides the weekday frequency when set

    mon_frequency = Column(Integer, default=0, nullable=False)
    tue_frequency = Column(Integer, default=0, nullable=False)
    wed_frequency = Column(Integer, default=0, nullable=False)
    thu_frequency = Column(Integer, default=0, nullable=False)
    fri_frequency = Column(Integer, default=0, nullable=False)
    sat_frequency = Column(Integer, default=0, nullable=False)
    sun_frequency = Column(Integer, default=0, nullable=False)

    # Soft-disable flag; rows referenced by completion records are never hard deleted
    current = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    programme = relationship("Programme", back_populates="programme_habits")
    habit = relationship("Habit", back_populates="programme_habits")
    completions = relationship("ClientHabit", back_populates="programme_habit")

    @property
    def habit_title(self):
        return self.habit.title if self.habit else None

    __table_args__ = (
        CheckConstraint(
            "mon_frequency >= 0 AND tue_frequency >= 0 AND wed_frequency >= 0 AND thu_frequency >= 0 "
            "AND fri_frequency >= 0 AND sat_frequency >= 0 AND sun_frequency >= 0",
            name="ck_programme_habits_frequencies_non_negative",
        ),
    )
