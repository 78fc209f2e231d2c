"""Account domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ValidationInfo, field_validator

from ...shared.validators import normalize_ssn, require_text, validate_email
from ..addresses.schemas import AddressResponse


class UserUpdate(BaseModel):
    lastname: Optional[str] = None
    firstname: Optional[str] = None
    middlename: Optional[str] = None
    birthdate: Optional[date] = None
    code: Optional[str] = None
    phone: Optional[str] = None
    phone2: Optional[str] = None
    email: Optional[str] = None
    email2: Optional[str] = None
    languages: Optional[str] = None
    description: Optional[str] = None
    photo: Optional[str] = None
    ssn: Optional[str] = None

    @field_validator("lastname", "firstname", "email")
    @classmethod
    def not_blank(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name)

    @field_validator("email", "email2")
    @classmethod
    def email_format(cls, v):
        return validate_email(v)

    @field_validator("ssn")
    @classmethod
    def ssn_digits(cls, v):
        if v is None:
            return v
        return normalize_ssn(v)


class UserProfile(BaseModel):
    """Profile columns of a user; ssn is the decrypted value"""

    id: int
    lastname: Optional[str] = None
    firstname: Optional[str] = None
    middlename: Optional[str] = None
    birthdate: Optional[date] = None
    ssn: Optional[str] = None
    code: Optional[str] = None
    phone: Optional[str] = None
    phone2: Optional[str] = None
    email: str
    email2: Optional[str] = None
    languages: Optional[str] = None
    description: Optional[str] = None
    photo: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserResponse(UserProfile):
    addresses: list[AddressResponse] = []


class AccountResponse(UserProfile):
    """Auth row joined with its user profile"""

    username: str
    role: int
    role_name: str
    status: int
    status_name: str
    expiration: Optional[int] = None
