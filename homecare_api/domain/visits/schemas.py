"""Visit domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...constants import Message, Progress, VisitStatus
from ...services.visit_progress import validate_visit_times
from ...shared.validators import to_naive_utc
from ..patients.schemas import PatientResponse


class VisitCreate(BaseModel):
    """Schema for scheduling a visit; user_id defaults to the caller"""

    patient_id: int
    start_time: datetime
    end_time: datetime
    user_id: Optional[int] = None
    note: Optional[str] = None
    progress: Optional[int] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v)

    @field_validator("progress")
    @classmethod
    def known_progress(cls, v):
        if v is not None and v not in {p.value for p in Progress}:
            raise ValueError("Invalid progress value")
        return v

    @model_validator(mode="after")
    def ends_after_start(self):
        validate_visit_times(self.start_time, self.end_time)
        return self


class VisitUpdate(BaseModel):
    """Progress is excluded; it only moves through the lifecycle endpoints"""

    user_id: Optional[int] = None
    patient_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    note: Optional[str] = None
    status: Optional[int] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v)

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        if v is not None and v not in {s.value for s in VisitStatus}:
            raise ValueError(Message.STATUS_INVALID)
        return v


class VisitNote(BaseModel):
    note: Optional[str] = None


class ProgressUpdate(BaseModel):
    progress: int

    @field_validator("progress")
    @classmethod
    def known_progress(cls, v):
        if v not in {p.value for p in Progress}:
            raise ValueError("Invalid progress value")
        return v


class VisitUserSummary(BaseModel):
    """Caregiver fields shown alongside a visit"""

    id: int
    firstname: Optional[str] = None
    middlename: Optional[str] = None
    lastname: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    photo: Optional[str] = None

    class Config:
        from_attributes = True


class VisitResponse(BaseModel):
    """Schema for visit response"""

    id: int
    user_id: int
    patient_id: int
    start_time: datetime
    end_time: datetime
    note: Optional[str] = None
    progress: int
    progress_description: str
    duration_minutes: int
    status: int
    scheduled_by: Optional[int] = None
    checkin_by: Optional[int] = None
    checkout_by: Optional[int] = None
    canceled_by: Optional[int] = None
    approved_by: Optional[int] = None
    checkin_at: Optional[datetime] = None
    checkout_at: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VisitDetail(VisitResponse):
    user: Optional[VisitUserSummary] = None
    patient: Optional[PatientResponse] = None
