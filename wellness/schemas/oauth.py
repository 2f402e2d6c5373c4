from pydantic import BaseModel
from datetime import datetime
from typing import Optional
import uuid

from wellness.models.oauth_token import OAuthProvider


class OAuthStartResponse(BaseModel):
    redirect_url: str


class OAuthAccount(BaseModel):
    """A connected account; tokens are never returned."""
    id: uuid.UUID
    provider: OAuthProvider
    account_id: str
    account_email: Optional[str] = None
    scope: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_expired: bool
    connected_by_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
