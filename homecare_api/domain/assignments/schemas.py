"""Assignment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ..addresses.schemas import AddressResponse
from ..patients.schemas import PatientResponse


class AssignPatientRequest(BaseModel):
    user_id: int
    patient_id: int
    notes: Optional[str] = None


class AssignPatientsRequest(BaseModel):
    """Bulk assignment; notes apply to every created or reactivated assignment"""

    user_id: int
    patient_ids: list[int]
    notes: Optional[str] = None

    @field_validator("patient_ids")
    @classmethod
    def at_least_one(cls, v):
        if not v:
            raise ValueError("At least one patient ID is required")
        # Keep the first occurrence of each id
        return list(dict.fromkeys(v))


class UnassignPatientsRequest(BaseModel):
    user_id: int
    patient_ids: list[int]

    @field_validator("patient_ids")
    @classmethod
    def at_least_one(cls, v):
        if not v:
            raise ValueError("At least one patient ID is required")
        return list(dict.fromkeys(v))


class AssignmentInfo(BaseModel):
    assigned_at: Optional[datetime] = None
    assigned_by: Optional[int] = None
    notes: Optional[str] = None
    status: int

    class Config:
        from_attributes = True


class AssignmentResponse(AssignmentInfo):
    """Schema for assignment response"""

    user_id: int
    patient_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AssignedPatient(PatientResponse):
    assignment: Optional[AssignmentInfo] = None


class AssignedPatientWithAddresses(AssignedPatient):
    addresses: list[AddressResponse] = []


class AssignedUser(BaseModel):
    """Caregiver profile with account role/status; the SSN is never included"""

    id: int
    firstname: Optional[str] = None
    middlename: Optional[str] = None
    lastname: Optional[str] = None
    code: Optional[str] = None
    phone: Optional[str] = None
    phone2: Optional[str] = None
    email: Optional[str] = None
    languages: Optional[str] = None
    photo: Optional[str] = None
    role: int
    role_name: str
    status: int
    status_name: str
    addresses: list[AddressResponse] = []
    assignment: Optional[AssignmentInfo] = None
