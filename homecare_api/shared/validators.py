"""Shared validation utilities"""

import re
from datetime import datetime, timezone
from typing import Optional

from ..constants import ADDRESS_TYPES, Message

STATE_PATTERN = re.compile(r"^[A-Z]{2}$")
ZIPCODE_PATTERN = re.compile(r"^\d{5}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError(Message.EMAIL_INVALID)

    return email


def validate_state(state: Optional[str]) -> Optional[str]:
    """Uppercase a US state code and require exactly two letters"""
    if state is None:
        return state

    state = state.strip().upper()
    if not STATE_PATTERN.match(state):
        raise ValueError("State must be a 2-letter code")
    return state


def validate_zipcode(zipcode: Optional[str]) -> Optional[str]:
    """Require a 5-digit ZIP code"""
    if zipcode is None:
        return zipcode

    zipcode = str(zipcode).strip()
    if not ZIPCODE_PATTERN.match(zipcode):
        raise ValueError("ZIP code must be 5 digits")
    return zipcode


def validate_latitude(latitude: Optional[float]) -> Optional[float]:
    if latitude is not None and not -90 <= latitude <= 90:
        raise ValueError("Latitude must be between -90 and 90")
    return latitude


def validate_longitude(longitude: Optional[float]) -> Optional[float]:
    if longitude is not None and not -180 <= longitude <= 180:
        raise ValueError("Longitude must be between -180 and 180")
    return longitude


def validate_address_type(address_type: Optional[str]) -> Optional[str]:
    """Match an address type case-insensitively against the known types"""
    if address_type is None:
        return address_type

    for known in ADDRESS_TYPES:
        if known.lower() == address_type.strip().lower():
            return known
    raise ValueError(f"Address type must be one of: {', '.join(ADDRESS_TYPES)}")


def normalize_ssn(ssn: str) -> str:
    """
    Strip formatting from a Social Security Number.

    Returns:
        The 9 digits of the SSN

    Raises:
        ValueError: If fewer or more than 9 digits remain
    """
    digits = re.sub(r"\D", "", ssn or "")
    if len(digits) != 9:
        raise ValueError(Message.SSN_INVALID)
    return digits


def require_text(value: Optional[str], field: str) -> str:
    """Reject missing or whitespace-only strings with '<field> is required'"""
    if value is None or not str(value).strip():
        raise ValueError(f"{field} is required")
    return value.strip()


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored without zone; aware values are converted to UTC first"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
