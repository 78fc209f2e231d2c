import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .constants import Message, Role
from .database import get_db
from .models import Auth
from .security_utils import constant_time_compare
from .services.token_service import token_service

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Accept either a raw token or 'Bearer <token>'"""
    if not authorization:
        return None
    token = authorization.strip()
    if token.lower().startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):].strip()
    return token or None


async def get_current_auth(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Auth:
    """Resolve the Authorization header to the auth row that issued the token"""
    token = extract_token(authorization)
    if not token:
        logger.warning("⚠️ Request without Authorization header")
        raise HTTPException(status_code=401, detail=Message.TOKEN_REQUIRED)

    decoded = token_service.decode_token(token)
    if decoded is None or not isinstance(decoded.get("id"), int):
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(status_code=401, detail=Message.TOKEN_FORMAT_INVALID)

    if token_service.is_expired(decoded):
        logger.info(f"ℹ️ Expired token presented for account {decoded['id']}")
        raise HTTPException(status_code=401, detail=Message.TOKEN_EXPIRED)

    # Tokens are unsigned, so the stored copy is the only proof of issuance
    auth = db.query(Auth).filter(Auth.id == decoded["id"]).first()
    if not auth or not auth.token or not constant_time_compare(auth.token, token):
        logger.warning(f"⚠️ Token does not match the stored session for account {decoded['id']}")
        raise HTTPException(status_code=401, detail=Message.TOKEN_INVALID)

    logger.debug(f"✅ Authenticated account {auth.id} ({auth.username})")
    return auth


def is_admin(auth: Auth) -> bool:
    return auth.role == Role.ADMINISTRATOR


def is_manager_or_higher(auth: Auth) -> bool:
    return auth.role <= Role.MANAGER


async def get_current_manager(auth: Auth = Depends(get_current_auth)) -> Auth:
    """Dependency for endpoints restricted to managers and administrators"""
    if not is_manager_or_higher(auth):
        logger.warning(f"⚠️ Account {auth.id} with role {auth.role} attempted a manager-only action")
        raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)
    return auth


def ensure_self_or_manager(auth: Auth, user_id: int) -> None:
    """Raise 403 unless the caller is user_id or a manager"""
    if auth.id != user_id and not is_manager_or_higher(auth):
        logger.warning(f"⚠️ Account {auth.id} attempted to access data of user {user_id}")
        raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ACCESS)
