from sqlalchemy import Column, Date, DateTime, Integer, Boolean, Text, ForeignKey, Uuid, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from wellness.db.session import Base

# Safety ceiling for repetitions recorded on a single day
MAX_TIMES_PER_DAY = 20


class ClientHabit(Base):
    """
    Completion record: how many times a client performed a programme habit on
    one calendar day. `completed` is derived from times_done on every write.
    """
    __tablename__ = "client_habits"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    programme_habit_id = Column(Uuid(as_uuid=True), ForeignKey("programme_habits.id"), nullable=False, index=True)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    habit_date = Column(Date, nullable=False, index=True)
    times_done = Column(Integer, default=0, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    programme_habit = relationship("ProgrammeHabit", back_populates="completions")
    client = relationship("Client")

    __table_args__ = (
        # The upsert conflict target: one row per habit, client and day
        UniqueConstraint("programme_habit_id", "client_id", "habit_date", name="uq_client_habits_habit_client_date"),
        CheckConstraint(f"times_done >= 0 AND times_done <= {MAX_TIMES_PER_DAY}", name="ck_client_habits_times_done_range"),
    )
