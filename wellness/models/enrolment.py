from sqlalchemy import Column, DateTime, JSON, Text, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from wellness.db.session import Base


class ProgrammeEnrolment(Base):
    """
    Links a Client to a Programme. A client may only record completions for
    programmes they are enrolled in.
    """
    __tablename__ = "programme_enrolments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    programme_id = Column(Uuid(as_uuid=True), ForeignKey("programmes.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    adhoc_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    programme = relationship("Programme", back_populates="enrolments")
    client = relationship("Client", back_populates="enrolments")

    # One enrolment per client per programme
    __table_args__ = (
        UniqueConstraint("client_id", "programme_id", name="uq_programme_enrolments_client_programme"),
    )
