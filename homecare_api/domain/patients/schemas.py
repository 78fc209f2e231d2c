"""Patient domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ValidationInfo, field_validator

from ...constants import Message, PatientStatus
from ...shared.validators import require_text
from ..addresses.schemas import AddressFields, AddressResponse


class PatientCreate(BaseModel):
    """Schema for creating a patient, optionally with its home address"""

    firstname: str
    lastname: str
    phone: str
    middlename: Optional[str] = None
    patient: Optional[str] = None
    admission: Optional[str] = None
    address: Optional[AddressFields] = None

    @field_validator("firstname", "lastname", "phone")
    @classmethod
    def not_blank(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name)


class PatientUpdate(BaseModel):
    firstname: Optional[str] = None
    middlename: Optional[str] = None
    lastname: Optional[str] = None
    phone: Optional[str] = None
    patient: Optional[str] = None
    admission: Optional[str] = None
    status: Optional[int] = None

    @field_validator("firstname", "lastname", "phone")
    @classmethod
    def not_blank(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name)

    @field_validator("status")
    @classmethod
    def known_status(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} is required")
        if v not in {s.value for s in PatientStatus}:
            raise ValueError(Message.STATUS_INVALID)
        return v


class PatientResponse(BaseModel):
    """Schema for patient response"""

    id: int
    patient: Optional[str] = None
    admission: Optional[str] = None
    firstname: str
    middlename: Optional[str] = None
    lastname: str
    phone: str
    status: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PatientWithAddresses(PatientResponse):
    addresses: list[AddressResponse] = []
