"""Patient router - FastAPI endpoints for patient operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_manager
from ...constants import PatientStatus
from ...database import get_db
from ...models import Auth
from ...shared.responses import success_response
from ..addresses.schemas import AddressResponse
from .schemas import PatientCreate, PatientResponse, PatientUpdate
from .service import PatientService

logger = logging.getLogger(__name__)

# Every patient endpoint is restricted to managers and administrators
router = APIRouter(tags=["Patients"], dependencies=[Depends(get_current_manager)])


def get_patient_service(db: Session = Depends(get_db)) -> PatientService:
    """Dependency injection for PatientService"""
    return PatientService(db)


@router.post("/patient")
async def create_patient(
    data: PatientCreate,
    current_auth: Auth = Depends(get_current_manager),
    service: PatientService = Depends(get_patient_service),
):
    patient, address = service.create_patient(data, current_auth)
    payload = {
        "message": "Patient created with address" if address else "Patient created successfully",
        "patient_id": patient.id,
        "patient": PatientResponse.model_validate(patient),
    }
    if address:
        payload["address_id"] = address.id
        payload["address"] = AddressResponse.model_validate(address)
    return success_response(payload, 201)


@router.get("/patients")
async def get_patients(
    status: Optional[int] = Query(None),
    service: PatientService = Depends(get_patient_service),
):
    """Patients ordered by last name, first name; archived and deleted only on request"""
    patients = [PatientResponse.model_validate(p) for p in service.get_patients(status)]
    return success_response({"count": len(patients), "patients": patients})


@router.get("/patients/addresses")
async def get_patients_with_addresses(
    status: Optional[int] = Query(None),
    service: PatientService = Depends(get_patient_service),
):
    patients = service.get_patients_with_addresses(status)
    return success_response({"count": len(patients), "patients": patients})


@router.get("/patient/{patient_id}")
async def get_patient(patient_id: int, service: PatientService = Depends(get_patient_service)):
    return success_response(PatientResponse.model_validate(service.get_patient(patient_id)))


@router.put("/patient/{patient_id}")
async def update_patient(
    patient_id: int,
    data: PatientUpdate,
    service: PatientService = Depends(get_patient_service),
):
    patient = service.update_patient(patient_id, data)
    return success_response(
        {"message": "Patient updated successfully", "patient": PatientResponse.model_validate(patient)}
    )


# ============================================================================
# STATUS TRANSITIONS
# ============================================================================


@router.put("/patient/{patient_id}/activate")
async def activate_patient(patient_id: int, service: PatientService = Depends(get_patient_service)):
    message = service.change_status(patient_id, PatientStatus.ACTIVE)
    return success_response({"message": message, "patient_id": patient_id})


@router.put("/patient/{patient_id}/archive")
async def archive_patient(patient_id: int, service: PatientService = Depends(get_patient_service)):
    message = service.change_status(patient_id, PatientStatus.ARCHIVED)
    return success_response({"message": message, "patient_id": patient_id})


@router.put("/patient/{patient_id}/delete")
async def soft_delete_patient(patient_id: int, service: PatientService = Depends(get_patient_service)):
    """Mark a patient deleted; the record and its history are kept"""
    message = service.change_status(patient_id, PatientStatus.DELETED)
    return success_response({"message": message, "patient_id": patient_id})


@router.delete("/patient/{patient_id}")
async def delete_patient(patient_id: int, service: PatientService = Depends(get_patient_service)):
    """Hard delete, only allowed while no visit references the patient"""
    service.delete_patient(patient_id)
    return success_response({"message": "Patient removed permanently", "patient_id": patient_id})
