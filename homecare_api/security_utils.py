"""
Security Utilities
Password hashing and audit logging for the account endpoints
"""

import hashlib
import logging
import re
import secrets
from datetime import datetime, timezone
from typing import Any, Optional

# Password hashing
from passlib.context import CryptContext

from .config import BCRYPT_ROUNDS

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

# Credentials created before bcrypt: sha512 hex of username + password + username
LEGACY_HASH_PATTERN = re.compile(r"^[0-9a-f]{128}$")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def legacy_hash(username: str, password: str) -> str:
    salted = f"{username}{password}{username}"
    return hashlib.sha512(salted.encode("utf-8")).hexdigest()


def is_legacy_hash(password_hash: str) -> bool:
    return bool(LEGACY_HASH_PATTERN.match(password_hash))


def verify_password(username: str, password: str, password_hash: Optional[str]) -> bool:
    """
    Verify a password against its stored hash.

    bcrypt hashes go through the passlib context; 128-character hex digests
    are checked against the legacy username-salted sha512.
    """
    if not password_hash:
        return False
    if is_legacy_hash(password_hash):
        return constant_time_compare(legacy_hash(username, password), password_hash)

    try:
        return pwd_context.verify(password, password_hash)
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """Legacy digests and bcrypt hashes made with other settings are replaced on login"""
    return is_legacy_hash(password_hash) or pwd_context.needs_update(password_hash)


# ============================================================================
# AUDIT LOGGING
# ============================================================================


def log_security_event(
    event_type: str,
    username: Optional[str] = None,
    ip_address: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
):
    """
    Log security-related events for audit trail

    Args:
        event_type: Type of security event (login, failed_login, role_change, ...)
        username: Account the event concerns
        ip_address: Client IP address
        details: Additional event details
    """
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "username": username,
        "ip_address": ip_address,
        "details": details or {},
    }
    logger.info(f"SECURITY_EVENT: {log_entry}")


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    return secrets.compare_digest(a.encode(), b.encode())


def mask_sensitive_data(data: Optional[str], visible_chars: int = 4) -> Optional[str]:
    """Mask all but the last visible_chars characters, e.g. for SSNs in change logs"""
    if data is None:
        return None
    if len(data) <= visible_chars:
        return "*" * len(data)

    return "*" * (len(data) - visible_chars) + data[-visible_chars:]
