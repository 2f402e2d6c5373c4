from sqlalchemy import Column, String, Boolean, DateTime, Uuid, Enum as SQLEnum
import uuid
from datetime import datetime
import enum
from wellness.db.session import Base


class UserRole(str, enum.Enum):
    CLIENT = "client"
    TRAINER = "trainer"
    ADMIN = "admin"
    SYSTEM_ADMIN = "system_admin"


STAFF_ROLES = (UserRole.TRAINER, UserRole.ADMIN, UserRole.SYSTEM_ADMIN)
ADMIN_ROLES = (UserRole.ADMIN, UserRole.SYSTEM_ADMIN)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False, unique=True, index=True)  # Stored lower-cased
    hashed_password = Column(String, nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.CLIENT, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
