from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import logging
import uuid

from wellness.db.session import get_db
from wellness.models.user import User
from wellness.models.client import Client
from wellness.core.security import decode_access_token
from wellness.core.config import settings

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 like a bad token, not FastAPI's default 403
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the bearer token to an active User.
    The user id claim is preferred; the email subject is the fallback.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    email: Optional[str] = payload.get("sub")
    user_id_from_token: Optional[str] = payload.get("user_id")
    if email is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )

    user = None
    if user_id_from_token:
        try:
            user = db.get(User, uuid.UUID(user_id_from_token))
        except (ValueError, TypeError):
            logger.warning(f"[AUTH] Invalid user_id format in token: {user_id_from_token}")
    if user is None:
        user = db.query(User).filter(User.email == email.lower()).first()

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def require_staff(user: User = Depends(get_current_user)) -> User:
    """Trainers and administrators."""
    if user.is_staff or user.email == settings.SUDO_ADMIN_EMAIL:
        return user
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Trainer or admin access required"
    )


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Admin and system admin roles; the sudo admin account is always allowed."""
    if user.is_admin or user.email == settings.SUDO_ADMIN_EMAIL:
        return user
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Admin access required"
    )


def get_current_client(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Client:
    """The Client profile of the signed-in user."""
    client = db.query(Client).filter(Client.user_id == user.id).first()
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No client profile for this user"
        )
    if client.disabled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Client profile is disabled"
        )
    return client
