"""Encryption at rest for sensitive profile fields"""

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ..config import SSN_ENCRYPTION_KEY

logger = logging.getLogger(__name__)

cipher_suite = Fernet(SSN_ENCRYPTION_KEY.encode())


def encrypt_ssn(ssn: str) -> str:
    """Encrypt a normalized SSN for storage"""
    return cipher_suite.encrypt(ssn.encode()).decode()


def decrypt_ssn(encrypted_ssn: Optional[str]) -> Optional[str]:
    """Decrypt a stored SSN; returns None when the value cannot be decrypted"""
    if not encrypted_ssn:
        return None
    try:
        return cipher_suite.decrypt(encrypted_ssn.encode()).decode()
    except InvalidToken:
        logger.error("❌ Stored SSN could not be decrypted with the configured key")
        return None
