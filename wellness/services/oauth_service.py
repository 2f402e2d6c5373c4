"""
Gmail and Fitbit account connections.

An administrator starts the flow, the provider redirects back with a code,
and the code is exchanged for tokens which are stored encrypted, one row per
provider account. Access tokens are refreshed on demand.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from urllib.parse import urlencode
import logging
import secrets
import uuid

import httpx
import jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wellness.core.audit import log_security_event
from wellness.core.config import settings
from wellness.core.encryption import decrypt_token, encrypt_token
from wellness.core.security import ALGORITHM
from wellness.core.errors import (
    ExternalServiceError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    StorageFailureError,
)
from wellness.models.audit_log import AuditEventType
from wellness.models.oauth_token import OAuthProvider, OAuthToken
from wellness.models.user import User

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 30.0
STATE_MAX_AGE_SECONDS = 15 * 60
STATE_PURPOSE = "oauth_state"


@dataclass(frozen=True)
class ProviderConfig:
    provider: OAuthProvider
    authorize_url: str
    token_url: str
    scopes: Tuple[str, ...]
    client_id: Optional[str]
    client_secret: Optional[str]
    redirect_uri: str
    # Fitbit authenticates the token endpoint with HTTP Basic, Google with form fields
    basic_auth: bool = False


def get_provider_config(provider: OAuthProvider) -> ProviderConfig:
    if provider == OAuthProvider.GMAIL:
        return ProviderConfig(
            provider=provider,
            authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
            token_url="https://oauth2.googleapis.com/token",
            scopes=(
                "https://www.googleapis.com/auth/gmail.send",
                "https://www.googleapis.com/auth/gmail.readonly",
            ),
            client_id=settings.GOOGLE_GMAIL_CLIENT_ID,
            client_secret=settings.GOOGLE_GMAIL_CLIENT_SECRET,
            redirect_uri=settings.GOOGLE_GMAIL_REDIRECT_URI,
        )
    if provider == OAuthProvider.FITBIT:
        return ProviderConfig(
            provider=provider,
            authorize_url="https://www.fitbit.com/oauth2/authorize",
            token_url="https://api.fitbit.com/oauth2/token",
            scopes=("activity", "heartrate", "location", "nutrition", "profile", "settings", "sleep", "social", "weight"),
            client_id=settings.FITBIT_CLIENT_ID,
            client_secret=settings.FITBIT_CLIENT_SECRET,
            redirect_uri=settings.FITBIT_REDIRECT_URI,
            basic_auth=True,
        )
    raise InvalidInputError(f"Unsupported provider: {provider}")


def _require_configured(config: ProviderConfig):
    if not config.client_id or not config.client_id.strip() or not config.client_secret:
        raise InvalidInputError(
            f"{config.provider.value} OAuth not configured. Set the client id and secret in the .env file and restart the backend."
        )


# State

def encode_state(provider: OAuthProvider, user_id: uuid.UUID) -> str:
    """Signed, short-lived state naming the admin who started the connection."""
    now = datetime.now(timezone.utc)
    state_data = {
        "purpose": STATE_PURPOSE,
        "provider": provider.value,
        "user_id": str(user_id),
        "nonce": secrets.token_urlsafe(16),
        "iat": now,
        "exp": now + timedelta(seconds=STATE_MAX_AGE_SECONDS),
    }
    return jwt.encode(state_data, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_state(state: str, provider: OAuthProvider) -> dict:
    """Verify a state value issued by encode_state."""
    try:
        state_data = jwt.decode(state, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise InvalidInputError("OAuth state has expired, start the connection again")
    except jwt.PyJWTError as e:
        raise InvalidInputError(f"Invalid OAuth state: {str(e)}")

    # Access tokens share the signing key
    if state_data.get("purpose") != STATE_PURPOSE:
        raise InvalidInputError("Invalid OAuth state")
    if state_data.get("provider") != provider.value:
        raise InvalidInputError("OAuth state does not match this provider")
    return state_data


def _resolve_state_admin(db: Session, state_data: dict) -> User:
    user = None
    try:
        user = db.get(User, uuid.UUID(state_data.get("user_id")))
    except (ValueError, TypeError):
        logger.warning(f"[OAUTH] State carried no valid user id: {state_data.get('user_id')}")

    if user is None or not user.is_active:
        raise ForbiddenError("The user who started this connection no longer exists")
    if not (user.is_admin or user.email == settings.SUDO_ADMIN_EMAIL):
        raise ForbiddenError("Only administrators can connect accounts")
    return user


def build_authorization_url(provider: OAuthProvider, user_id: uuid.UUID) -> str:
    config = get_provider_config(provider)
    _require_configured(config)

    params = {
        "response_type": "code",
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "scope": " ".join(config.scopes),
        "state": encode_state(provider, user_id),
        "prompt": "consent",
    }
    if provider == OAuthProvider.GMAIL:
        # Without offline access Google issues no refresh token
        params["access_type"] = "offline"
    return f"{config.authorize_url}?{urlencode(params)}"


# Token endpoint calls

def _post_token_request(config: ProviderConfig, data: dict) -> dict:
    auth = None
    if config.basic_auth:
        auth = (config.client_id, config.client_secret)
        data = {**data, "client_id": config.client_id}
    else:
        data = {**data, "client_id": config.client_id, "client_secret": config.client_secret}

    try:
        response = httpx.post(config.token_url, data=data, auth=auth, timeout=HTTP_TIMEOUT)
    except httpx.HTTPError as e:
        logger.error(f"[OAUTH] {config.provider.value} token request failed: {str(e)}")
        raise ExternalServiceError(f"Network error contacting {config.provider.value}: {str(e)}")

    if response.status_code != 200:
        error_data = response.json() if response.headers.get("content-type", "").startswith("application/json") else {}
        error_msg = error_data.get("error_description") or error_data.get("message") or f"HTTP {response.status_code}: {response.text}"
        logger.error(f"[OAUTH] {config.provider.value} token endpoint returned {response.status_code}: {error_msg}")
        raise ExternalServiceError(f"Token request failed: {error_msg}")

    token_data = response.json()
    if not token_data.get("access_token"):
        raise ExternalServiceError("No access token in response")
    return token_data


def exchange_code(provider: OAuthProvider, code: str) -> dict:
    config = get_provider_config(provider)
    _require_configured(config)
    return _post_token_request(config, {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": config.redirect_uri,
    })


def fetch_account_identity(provider: OAuthProvider, access_token: str, token_data: dict) -> Tuple[str, Optional[str]]:
    """Return (account_id, account_email) for the account that just authorized."""
    headers = {"Authorization": f"Bearer {access_token}"}
    if provider == OAuthProvider.GMAIL:
        url = "https://gmail.googleapis.com/gmail/v1/users/me/profile"
    else:
        url = "https://api.fitbit.com/1/user/-/profile.json"

    try:
        response = httpx.get(url, headers=headers, timeout=HTTP_TIMEOUT)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"[OAUTH] Failed to fetch {provider.value} profile: {str(e)}")
        raise ExternalServiceError(f"Error getting {provider.value} account profile")

    profile = response.json()
    if provider == OAuthProvider.GMAIL:
        email = profile.get("emailAddress")
        if not email:
            raise ExternalServiceError("Gmail profile has no email address")
        return email.lower(), email.lower()

    user = profile.get("user") or {}
    account_id = user.get("encodedId") or token_data.get("user_id")
    if not account_id:
        raise ExternalServiceError("Fitbit profile has no user id")
    return account_id, user.get("email")


def _expires_at(token_data: dict) -> Optional[datetime]:
    expires_in = token_data.get("expires_in")
    if expires_in is None:
        return None
    return datetime.utcnow() + timedelta(seconds=int(expires_in))


# Persistence

def store_tokens(
    db: Session,
    provider: OAuthProvider,
    account_id: str,
    account_email: Optional[str],
    token_data: dict,
    connected_by_id: Optional[uuid.UUID] = None,
) -> OAuthToken:
    """Insert or update the connection for (provider, account_id)."""
    refresh_token = token_data.get("refresh_token")
    try:
        existing = db.query(OAuthToken).filter(
            OAuthToken.provider == provider,
            OAuthToken.account_id == account_id
        ).first()

        if existing:
            existing.access_token = encrypt_token(token_data["access_token"])
            # Google only returns a refresh token on first consent; keep the stored one otherwise
            if refresh_token:
                existing.refresh_token = encrypt_token(refresh_token)
            existing.account_email = account_email or existing.account_email
            existing.scope = token_data.get("scope") or existing.scope
            existing.expires_at = _expires_at(token_data)
            existing.connected_by_id = connected_by_id or existing.connected_by_id
            oauth_token = existing
        else:
            if not refresh_token:
                raise ExternalServiceError(
                    "No refresh token issued. Check the OAuth client settings (offline access, consent prompt)."
                )
            oauth_token = OAuthToken(
                provider=provider,
                account_id=account_id,
                account_email=account_email,
                access_token=encrypt_token(token_data["access_token"]),
                refresh_token=encrypt_token(refresh_token),
                scope=token_data.get("scope"),
                expires_at=_expires_at(token_data),
                connected_by_id=connected_by_id,
            )
            db.add(oauth_token)

        db.commit()
        db.refresh(oauth_token)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[OAUTH] Failed to store {provider.value} tokens for {account_id}")
        raise StorageFailureError("Failed to store OAuth tokens", details={"error": str(e)})

    logger.info(f"[OAUTH] Stored {provider.value} connection for {account_id}")
    return oauth_token


def complete_connection(
    db: Session,
    provider: OAuthProvider,
    code: str,
    state: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> OAuthToken:
    """Handle the provider callback: verify state, exchange the code, store the tokens."""
    state_data = decode_state(state, provider)
    user_id = _resolve_state_admin(db, state_data).id

    token_data = exchange_code(provider, code)
    account_id, account_email = fetch_account_identity(provider, token_data["access_token"], token_data)
    oauth_token = store_tokens(db, provider, account_id, account_email, token_data, connected_by_id=user_id)

    log_security_event(
        db=db,
        event_type=AuditEventType.OAUTH_CONNECTED,
        user_id=user_id,
        resource_type="oauth_account",
        resource_id=str(oauth_token.id),
        ip_address=ip_address,
        user_agent=user_agent,
        details={"provider": provider.value, "account_id": account_id},
    )
    return oauth_token


def get_account_or_404(db: Session, account_id: uuid.UUID) -> OAuthToken:
    oauth_token = db.get(OAuthToken, account_id)
    if oauth_token is None:
        raise NotFoundError(f"Connected account {account_id} not found")
    return oauth_token


def refresh_access_token(db: Session, oauth_token: OAuthToken, user_id: Optional[uuid.UUID] = None) -> OAuthToken:
    if not oauth_token.refresh_token:
        raise InvalidInputError("No refresh token stored. Reconnect the account.")

    config = get_provider_config(oauth_token.provider)
    _require_configured(config)

    try:
        refresh_token = decrypt_token(
            oauth_token.refresh_token,
            audit_context={
                "db": db,
                "user_id": user_id,
                "resource_type": "oauth_account",
                "resource_id": str(oauth_token.id),
            }
        )
    except ValueError as e:
        raise InvalidInputError(f"{str(e)}. Reconnect the account.")

    token_data = _post_token_request(config, {
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
    })

    try:
        oauth_token.access_token = encrypt_token(token_data["access_token"])
        # Fitbit rotates refresh tokens on every refresh
        if token_data.get("refresh_token"):
            oauth_token.refresh_token = encrypt_token(token_data["refresh_token"])
        oauth_token.expires_at = _expires_at(token_data)
        oauth_token.scope = token_data.get("scope") or oauth_token.scope
        db.commit()
        db.refresh(oauth_token)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[OAUTH] Failed to save refreshed token for {oauth_token.id}")
        raise StorageFailureError("Failed to store refreshed token", details={"error": str(e)})

    log_security_event(
        db=db,
        event_type=AuditEventType.TOKEN_REFRESHED,
        user_id=user_id,
        resource_type="oauth_account",
        resource_id=str(oauth_token.id),
        details={"provider": oauth_token.provider.value},
    )
    logger.info(f"[OAUTH] Refreshed {oauth_token.provider.value} token for {oauth_token.account_id}")
    return oauth_token


def disconnect_account(
    db: Session,
    oauth_token: OAuthToken,
    user_id: Optional[uuid.UUID] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
):
    provider = oauth_token.provider
    account_id = oauth_token.account_id
    token_id = oauth_token.id
    try:
        db.delete(oauth_token)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[OAUTH] Failed to disconnect {provider.value} account {account_id}")
        raise StorageFailureError("Failed to disconnect account", details={"error": str(e)})

    log_security_event(
        db=db,
        event_type=AuditEventType.OAUTH_DISCONNECTED,
        user_id=user_id,
        resource_type="oauth_account",
        resource_id=str(token_id),
        ip_address=ip_address,
        user_agent=user_agent,
        details={"provider": provider.value, "account_id": account_id},
    )
    logger.info(f"[OAUTH] Disconnected {provider.value} account {account_id}")
