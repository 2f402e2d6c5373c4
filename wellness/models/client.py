from sqlalchemy import Column, String, DateTime, Boolean, JSON, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship, backref
import uuid
from datetime import datetime
from wellness.db.session import Base


class Client(Base):
    """
    A person receiving coaching. Linked one-to-one with the User they sign in as.
    """
    __tablename__ = "clients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    contact_info = Column(JSON, nullable=True)  # List of {"type": ..., "value": ...}
    current = Column(Boolean, default=True, nullable=False)
    disabled = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", backref=backref("client", uselist=False))
    enrolments = relationship("ProgrammeEnrolment", back_populates="client", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
