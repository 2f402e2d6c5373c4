from sqlalchemy import Column, String, Date, DateTime, Integer, Numeric, JSON, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime, date
from wellness.db.session import Base
from wellness.services.date_utils import in_window


class ProgrammeTemplate(Base):
    """Reusable blueprint programmes are created from."""
    __tablename__ = "programme_templates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    max_clients = Column(Integer, nullable=False, default=0)
    sessions_description = Column(JSON, nullable=True)
    programme_cost = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    adhoc_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    programmes = relationship("Programme", back_populates="template")


class Programme(Base):
    """
    A time-bounded offering clients enrol in.
    end_date may be null, in which case the programme is open-ended.
    """
    __tablename__ = "programmes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    programme_template_id = Column(Uuid(as_uuid=True), ForeignKey("programme_templates.id", ondelete="SET NULL"), nullable=True, index=True)
    human_readable_id = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True, index=True)
    max_clients = Column(Integer, nullable=False, default=0)
    sessions_description = Column(JSON, nullable=True)
    programme_cost = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    adhoc_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    template = relationship("ProgrammeTemplate", back_populates="programmes")
    programme_habits = relationship("ProgrammeHabit", back_populates="programme", cascade="all, delete-orphan")
    enrolments = relationship("ProgrammeEnrolment", back_populates="programme", cascade="all, delete-orphan")

    @property
    def enrolment_count(self) -> int:
        return len(self.enrolments)

    def covers(self, day: date) -> bool:
        """True if day falls inside [start_date, end_date]; a null end_date is open."""
        return in_window(day, self.start_date, self.end_date)
