from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, ForeignKey, Uuid
import uuid
from datetime import datetime
import enum
from wellness.db.session import Base


class AuditEventType(str, enum.Enum):
    """Types of security events to audit"""
    OAUTH_CONNECTED = "oauth_connected"
    OAUTH_DISCONNECTED = "oauth_disconnected"
    TOKEN_REFRESHED = "token_refreshed"
    TOKEN_DECRYPTED = "token_decrypted"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    UNAUTHORIZED_ACCESS = "unauthorized_access"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    event_type = Column(SQLEnum(AuditEventType), nullable=False, index=True)
    resource_type = Column(String, nullable=True)  # e.g., "oauth_account", "api_endpoint"
    resource_id = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    details = Column(Text, nullable=True)  # JSON string with additional details
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
