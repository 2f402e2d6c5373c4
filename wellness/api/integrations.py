"""
Connected third-party accounts (Gmail, Fitbit).

Administrators start the OAuth flow here; the provider redirects back to the
callback, which stores the encrypted tokens and sends the browser on to the
frontend settings page.
"""
from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from urllib.parse import urlencode
from uuid import UUID
import logging

from wellness.db.session import get_db
from wellness.api.deps import require_admin
from wellness.core.audit import request_metadata
from wellness.core.config import settings
from wellness.core.errors import HabitServiceError
from wellness.models.oauth_token import OAuthToken, OAuthProvider
from wellness.models.user import User
from wellness.schemas.oauth import OAuthAccount, OAuthStartResponse
from wellness.services import oauth_service

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_SETTINGS_PATH = "/dashboard/admin/oauth-settings"


def _frontend_redirect(**params) -> RedirectResponse:
    return RedirectResponse(
        url=f"{settings.FRONTEND_URL}{OAUTH_SETTINGS_PATH}?{urlencode(params)}",
        status_code=302
    )


@router.get("/accounts", response_model=List[OAuthAccount])
def list_accounts(
    provider: Optional[OAuthProvider] = Query(None),
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    query = db.query(OAuthToken)
    if provider:
        query = query.filter(OAuthToken.provider == provider)
    return query.order_by(OAuthToken.created_at.desc()).all()


@router.post("/{provider}/start", response_model=OAuthStartResponse)
def start_oauth(
    provider: OAuthProvider,
    admin_user: User = Depends(require_admin)
):
    redirect_url = oauth_service.build_authorization_url(provider, admin_user.id)
    logger.info(f"[OAUTH] {admin_user.email} started {provider.value} connection")
    return OAuthStartResponse(redirect_url=redirect_url)


@router.get("/{provider}/callback")
def oauth_callback(
    provider: OAuthProvider,
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    error_description: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Provider redirect target.

    Not authenticated: the browser arrives here straight from the provider.
    The signed-in admin is carried in the state parameter.
    """
    if error:
        logger.warning(f"[OAUTH] {provider.value} returned error: {error}")
        return _frontend_redirect(error=error, details=error_description or error)

    if not code or not state:
        return _frontend_redirect(error="missing_code", details="No authorization code provided")

    try:
        oauth_service.complete_connection(
            db,
            provider,
            code,
            state,
            **request_metadata(request),
        )
    except HabitServiceError as e:
        logger.error(f"[OAUTH] {provider.value} connection failed: {e.message}")
        return _frontend_redirect(error=e.code.lower(), details=e.message)

    return _frontend_redirect(success=f"{provider.value}_connected")


@router.post("/accounts/{account_id}/refresh", response_model=OAuthAccount)
def refresh_account(
    account_id: UUID,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    oauth_token = oauth_service.get_account_or_404(db, account_id)
    return oauth_service.refresh_access_token(db, oauth_token, user_id=admin_user.id)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def disconnect_account(
    account_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin)
):
    oauth_token = oauth_service.get_account_or_404(db, account_id)
    oauth_service.disconnect_account(
        db,
        oauth_token,
        user_id=admin_user.id,
        **request_metadata(request),
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
