"""
Session Token Service

Tokens are base64-encoded JSON payloads ({id, username, role, expiration}).
They are NOT signed: anyone can build a token that decodes to valid
claims. The only integrity check is the comparison against the token
stored on the auth row, done by the request authentication dependency.
"""

import base64
import binascii
import json
import logging
import time
from typing import Any, Optional

from ..config import TOKEN_LIFETIME_MS

logger = logging.getLogger(__name__)


def current_millis() -> int:
    return int(time.time() * 1000)


class TokenService:
    """Issue, decode and check expiry of opaque session tokens"""

    def __init__(self, lifetime_ms: int = TOKEN_LIFETIME_MS):
        self.lifetime_ms = lifetime_ms

    def generate_expiration(self) -> int:
        """Expiration timestamp (ms since epoch) for a token issued now"""
        return current_millis() + self.lifetime_ms

    def create_token(self, user_id: int, username: str, role: int, expiration: int) -> str:
        payload = {
            "id": user_id,
            "username": username,
            "role": role,
            "expiration": expiration,
        }
        raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")

    def decode_token(self, token: Optional[str]) -> Optional[dict[str, Any]]:
        """Decode a token; returns None for anything that is not base64 JSON object"""
        if not token:
            return None
        try:
            raw = base64.b64decode(token, validate=True)
            payload = json.loads(raw.decode("utf-8"))
        except (binascii.Error, ValueError):
            # json.JSONDecodeError and UnicodeDecodeError are both ValueError
            logger.debug("Token rejected: not base64-encoded JSON")
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    def get_expiration(self, decoded: Optional[dict[str, Any]]) -> Optional[int]:
        if not decoded or decoded.get("expiration") is None:
            return None
        return decoded["expiration"]

    def is_expired(self, decoded: Optional[dict[str, Any]]) -> bool:
        """Fail closed: missing payload or expiration counts as expired"""
        expiration = self.get_expiration(decoded)
        if expiration is None:
            return True
        try:
            return int(expiration) < current_millis()
        except (TypeError, ValueError):
            return True


token_service = TokenService()
