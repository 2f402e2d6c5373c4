from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID


class UserLogin(BaseModel):
    email: str
    password: str


class UserBase(BaseModel):
    email: str  # str rather than EmailStr so .local test domains are accepted


class UserRegister(UserBase):
    password: str
    first_name: str
    last_name: str

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v.strip()) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) > 50:
            raise ValueError("Name must be 50 characters or less")
        return v


class User(UserBase):
    id: UUID
    role: str
    is_active: bool
    client_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str
