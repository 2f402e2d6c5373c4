from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import timedelta
import logging

from wellness.db.session import get_db
from wellness.models.user import User, UserRole
from wellness.models.client import Client
from wellness.schemas.user import UserLogin, UserRegister, Token, User as UserSchema
from wellness.schemas.client import Client as ClientSchema, ClientProfileUpdate
from wellness.core.security import verify_password, create_access_token, get_password_hash
from wellness.core.config import settings
from wellness.core.rate_limit import rate_limit
from wellness.api.deps import get_current_user, get_current_client

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user: User) -> Token:
    access_token = create_access_token(
        data={
            "sub": user.email,
            "user_id": str(user.id),
            "role": user.role.value,
        },
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return Token(access_token=access_token, token_type="bearer")


def _user_schema(user: User) -> UserSchema:
    return UserSchema(
        id=user.id,
        email=user.email,
        role=user.role.value,
        is_active=user.is_active,
        client_id=user.client.id if user.client else None,
        created_at=user.created_at,
    )


@router.post("/login", response_model=Token)
@rate_limit(max_requests=10, window_seconds=300)
def login(
    user_credentials: UserLogin,
    request: Request,
    db: Session = Depends(get_db)
):
    # Normalize email and strip accidental whitespace from copy-paste
    normalized_email = user_credentials.email.lower().strip()
    normalized_password = user_credentials.password.strip()

    user = db.query(User).filter(User.email == normalized_email).first()
    if user is None or not user.is_active or not verify_password(normalized_password, user.hashed_password):
        # Don't reveal if user exists or not
        logger.info(f"[AUTH] Failed login for {normalized_email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _issue_token(user)


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
@rate_limit(max_requests=5, window_seconds=300)
def register(
    body: UserRegister,
    request: Request,
    db: Session = Depends(get_db)
):
    """Create a client account together with its Client profile."""
    if db.query(User).filter(User.email == body.email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password.strip()),
        role=UserRole.CLIENT,
    )
    db.add(user)
    try:
        db.flush()
        db.add(Client(
            user_id=user.id,
            first_name=body.first_name,
            last_name=body.last_name,
            contact_info=[{"type": "email", "value": body.email, "primary": True}],
        ))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )
    db.refresh(user)

    logger.info(f"[AUTH] Registered client account {user.email}")
    return _issue_token(user)


@router.get("/me", response_model=UserSchema)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    return _user_schema(current_user)


@router.get("/me/profile", response_model=ClientSchema)
def get_profile(client: Client = Depends(get_current_client)):
    return client


@router.put("/me/profile", response_model=ClientSchema)
def update_profile(
    body: ClientProfileUpdate,
    client: Client = Depends(get_current_client),
    db: Session = Depends(get_db)
):
    if body.first_name is not None:
        client.first_name = body.first_name
    if body.last_name is not None:
        client.last_name = body.last_name
    if body.contact_info is not None:
        client.contact_info = [item.model_dump(exclude_none=True) for item in body.contact_info]
    db.commit()
    db.refresh(client)
    return client
