from cryptography.fernet import Fernet, InvalidToken
from functools import lru_cache
from wellness.core.config import settings
import base64
import logging

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_encryption_key() -> bytes:
    """Get or generate encryption key for OAuth tokens"""
    if settings.ENCRYPTION_KEY:
        key = settings.ENCRYPTION_KEY.strip()
        # A Fernet key is 32 bytes url-safe base64 encoded (44 chars)
        if len(key) == 44:
            return key.encode()
        try:
            decoded = base64.b64decode(key)
        except ValueError as e:
            raise ValueError(f"Invalid ENCRYPTION_KEY format: {str(e)}")
        if len(decoded) != 32:
            raise ValueError("Invalid ENCRYPTION_KEY format: expected 32 bytes once decoded")
        return base64.urlsafe_b64encode(decoded)
    # For development, generate a key if not set.
    # Tokens encrypted with it do not survive a restart.
    key = Fernet.generate_key()
    logger.warning(f"[ENCRYPTION] Generated encryption key. Set ENCRYPTION_KEY={key.decode()} in .env")
    return key


def encrypt_token(token: str) -> str:
    """Encrypt a token for storage"""
    f = Fernet(get_encryption_key())
    return f.encrypt(token.encode()).decode()


def decrypt_token(encrypted_token: str, audit_context: dict = None) -> str:
    """
    Decrypt a stored token.

    Args:
        encrypted_token: Encrypted token string
        audit_context: Optional dict with audit info (db, user_id, resource_id, ...) for logging

    Returns:
        Decrypted token string
    """
    f = Fernet(get_encryption_key())
    try:
        decrypted = f.decrypt(encrypted_token.encode()).decode()
    except InvalidToken:
        raise ValueError("Stored token could not be decrypted with the configured ENCRYPTION_KEY")

    if audit_context and audit_context.get("db") is not None:
        from wellness.core.audit import log_security_event
        from wellness.models.audit_log import AuditEventType

        log_security_event(
            db=audit_context["db"],
            event_type=AuditEventType.TOKEN_DECRYPTED,
            user_id=audit_context.get("user_id"),
            resource_type=audit_context.get("resource_type", "oauth_account"),
            resource_id=audit_context.get("resource_id"),
            details={"token_length": len(decrypted)},
        )

    return decrypted
