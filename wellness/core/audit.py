"""
Audit logging for security events
"""
from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from wellness.models.audit_log import AuditLog, AuditEventType
from typing import Optional
import json
import logging
import uuid

logger = logging.getLogger(__name__)


def request_metadata(request: Optional[Request]) -> dict:
    """ip_address and user_agent of the request, for log_security_event."""
    if request is None:
        return {"ip_address": None, "user_agent": None}
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def log_security_event(
    db: Session,
    event_type: AuditEventType,
    user_id: Optional[uuid.UUID] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    details: Optional[dict] = None
):
    """
    Log a security event to the audit log.

    Args:
        db: Database session
        event_type: Type of security event
        user_id: User ID (if applicable)
        resource_type: Type of resource (e.g., "oauth_account", "api_endpoint")
        resource_id: ID of the resource
        ip_address: IP address of the request
        user_agent: User agent string
        details: Additional details as a dictionary (will be JSON-encoded)
    """
    try:
        audit_log = AuditLog(
            user_id=user_id,
            event_type=event_type,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            ip_address=ip_address,
            user_agent=user_agent,
            details=json.dumps(details, default=str) if details else None
        )
        db.add(audit_log)
        db.commit()
    except SQLAlchemyError as e:
        # An audit write failure must not fail the request it describes
        logger.error(f"[AUDIT] Failed to log security event {event_type.value}: {str(e)}")
        db.rollback()
