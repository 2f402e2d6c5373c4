from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, ForeignKey, Uuid, UniqueConstraint
import uuid
from datetime import datetime
import enum
from wellness.db.session import Base


class OAuthProvider(str, enum.Enum):
    GMAIL = "gmail"
    FITBIT = "fitbit"


class OAuthToken(Base):
    """Third-party account connected by an administrator."""
    __tablename__ = "oauth_tokens"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    provider = Column(SQLEnum(OAuthProvider), nullable=False, index=True)
    account_id = Column(String, nullable=False)  # Gmail address or Fitbit user id
    account_email = Column(String, nullable=True)
    access_token = Column(String, nullable=False)  # encrypted
    refresh_token = Column(String, nullable=True)  # encrypted
    scope = Column(String, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    connected_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # One connection per provider account
    __table_args__ = (
        UniqueConstraint("provider", "account_id", name="uq_oauth_tokens_provider_account"),
    )

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= datetime.utcnow()
