"""Auth domain schemas - Pydantic models for validation"""

from pydantic import BaseModel, ValidationInfo, field_validator

from ...constants import Message, Role
from ...shared.validators import require_text, validate_email


class Credentials(BaseModel):
    """Username/password pair used by login and password changes"""

    username: str
    password: str

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name).lower()

    @field_validator("password")
    @classmethod
    def password_present(cls, v, info: ValidationInfo):
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v


class RegisterRequest(Credentials):
    """Self-service sign up; the username must be an email address"""

    @field_validator("username")
    @classmethod
    def username_is_email(cls, v):
        return validate_email(v)


class UsernameRequest(BaseModel):
    username: str

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name).lower()


class ChangeRoleRequest(UsernameRequest):
    role: int

    @field_validator("role")
    @classmethod
    def known_role(cls, v):
        if v not in {r.value for r in Role}:
            raise ValueError(Message.ROLE_INVALID)
        return v
