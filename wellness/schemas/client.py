from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import List, Literal, Optional
import uuid


ContactType = Literal["email", "phone", "address", "social", "website", "other"]


class ContactInfoItem(BaseModel):
    type: ContactType
    value: str
    label: Optional[str] = None
    primary: bool = False

    @field_validator('value')
    @classmethod
    def validate_value(cls, v):
        if not v or not v.strip():
            raise ValueError("Contact value cannot be empty")
        return v.strip()


class ClientProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_info: Optional[List[ContactInfoItem]] = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        if len(v) > 50:
            raise ValueError("Name must be 50 characters or less")
        return v


class ClientSummary(BaseModel):
    """Client fields shown when picking clients to enrol."""
    id: uuid.UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_info: Optional[List[ContactInfoItem]] = None

    class Config:
        from_attributes = True


class Client(ClientSummary):
    user_id: Optional[uuid.UUID] = None
    current: bool
    disabled: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
