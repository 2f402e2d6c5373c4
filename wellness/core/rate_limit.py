"""
Simple in-memory rate limiting for API endpoints
"""
from functools import wraps
from fastapi import Request
from typing import Callable
from datetime import datetime, timedelta
from collections import defaultdict
import logging
import threading

from wellness.core.errors import HabitServiceError

logger = logging.getLogger(__name__)


class RateLimitExceededError(HabitServiceError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"


# In-memory store for rate limiting
# Format: {identifier: [timestamp, ...]}
_rate_limit_store = defaultdict(list)
_rate_limit_lock = threading.Lock()

# Cleanup old entries every 5 minutes
_last_cleanup = datetime.utcnow()
_cleanup_interval = timedelta(minutes=5)


def _cleanup_old_entries():
    """Remove entries older than the time window"""
    global _last_cleanup

    now = datetime.utcnow()
    if now - _last_cleanup < _cleanup_interval:
        return

    with _rate_limit_lock:
        _last_cleanup = now
        cutoff_time = now - timedelta(hours=1)  # Keep last hour of data

        for key in list(_rate_limit_store.keys()):
            _rate_limit_store[key] = [ts for ts in _rate_limit_store[key] if ts > cutoff_time]
            if not _rate_limit_store[key]:
                del _rate_limit_store[key]


def reset_rate_limits():
    """Forget all recorded requests."""
    with _rate_limit_lock:
        _rate_limit_store.clear()


def rate_limit(max_requests: int = 5, window_seconds: int = 300, identifier_func: Callable = None):
    """
    Rate limiting decorator for FastAPI endpoints.

    Args:
        max_requests: Maximum number of requests allowed
        window_seconds: Time window in seconds (default: 5 minutes)
        identifier_func: Function to extract identifier from request (default: client IP)

    Usage (the route decorator must be outermost so the wrapper is registered):
        @router.post("/endpoint")
        @rate_limit(max_requests=5, window_seconds=300)
        def my_endpoint(request: Request, ...):
            ...
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            request = None
            for value in list(args) + list(kwargs.values()):
                if isinstance(value, Request):
                    request = value
                    break

            if identifier_func:
                identifier = identifier_func(request)
            elif request is not None and request.client:
                identifier = request.client.host
            else:
                identifier = "unknown"
            identifier = f"{func.__name__}:{identifier}"

            _cleanup_old_entries()

            now = datetime.utcnow()
            window_start = now - timedelta(seconds=window_seconds)

            with _rate_limit_lock:
                recent_requests = [ts for ts in _rate_limit_store[identifier] if ts > window_start]
                if len(recent_requests) >= max_requests:
                    logger.warning(
                        f"[RATE_LIMIT] {identifier} exceeded {max_requests} requests per {window_seconds}s"
                    )
                    db = kwargs.get("db")
                    if db is not None:
                        from wellness.core.audit import log_security_event, request_metadata
                        from wellness.models.audit_log import AuditEventType

                        log_security_event(
                            db=db,
                            event_type=AuditEventType.RATE_LIMIT_EXCEEDED,
                            resource_type="api_endpoint",
                            resource_id=func.__name__,
                            **request_metadata(request),
                            details={
                                "max_requests": max_requests,
                                "window_seconds": window_seconds,
                                "recent_requests": len(recent_requests),
                            },
                        )
                    raise RateLimitExceededError(
                        f"Rate limit exceeded: {max_requests} requests per {window_seconds} seconds. Please try again later."
                    )
                _rate_limit_store[identifier] = recent_requests + [now]

            return func(*args, **kwargs)

        return wrapper
    return decorator
