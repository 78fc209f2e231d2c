"""Assignment router - FastAPI endpoints for caregiver/patient assignments"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_auth, get_current_manager
from ...database import get_db
from ...models import Auth
from ...shared.responses import success_response
from .schemas import AssignmentResponse, AssignPatientRequest, AssignPatientsRequest, UnassignPatientsRequest
from .service import AssignmentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Assignments"])


def get_assignment_service(db: Session = Depends(get_db)) -> AssignmentService:
    """Dependency injection for AssignmentService"""
    return AssignmentService(db)


@router.post("/assign/patient")
async def assign_patient(
    data: AssignPatientRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AssignmentService = Depends(get_assignment_service),
):
    assignment, action = service.assign_patient(data, current_auth)
    return success_response(
        {
            "message": f"User-patient assignment {action} successfully",
            "action": action,
            "assignment": AssignmentResponse.model_validate(assignment),
        },
        201,
    )


@router.post("/assign/patients")
async def assign_patients(
    data: AssignPatientsRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AssignmentService = Depends(get_assignment_service),
):
    status_code, payload = service.assign_patients(data, current_auth)
    return success_response(payload, status_code)


@router.post("/unassign/patients")
async def unassign_patients(
    data: UnassignPatientsRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AssignmentService = Depends(get_assignment_service),
):
    return success_response(service.unassign_patients(data, current_auth))


# ============================================================================
# PATIENTS OF A USER
# ============================================================================


@router.get("/assigned/patients/{user_id}")
async def get_assigned_patients(
    user_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AssignmentService = Depends(get_assignment_service),
):
    patients = service.get_assigned_patients(user_id, current_auth)
    return success_response({"count": len(patients), "patients": patients})


@router.get("/unassigned/patients/{user_id}")
async def get_unassigned_patients(
    user_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Active patients the user is not actively assigned to"""
    patients = service.get_unassigned_patients(user_id, current_auth)
    return success_response({"count": len(patients), "patients": patients})


@router.get("/assigned/patients/addresses/{user_id}")
async def get_assigned_patients_with_addresses(
    user_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AssignmentService = Depends(get_assignment_service),
):
    patients = service.get_assigned_patients(user_id, current_auth, include_addresses=True)
    return success_response({"count": len(patients), "patients": patients})


@router.get("/unassigned/patients/addresses/{user_id}")
async def get_unassigned_patients_with_addresses(
    user_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AssignmentService = Depends(get_assignment_service),
):
    patients = service.get_unassigned_patients(user_id, current_auth, include_addresses=True)
    return success_response({"count": len(patients), "patients": patients})


# ============================================================================
# USERS OF A PATIENT
# ============================================================================


@router.get("/assigned/users/{patient_id}")
async def get_assigned_users(
    patient_id: int,
    current_auth: Auth = Depends(get_current_manager),
    service: AssignmentService = Depends(get_assignment_service),
):
    users = service.get_assigned_users(patient_id)
    return success_response({"count": len(users), "users": users})


@router.get("/unassigned/users/{patient_id}")
async def get_unassigned_users(
    patient_id: int,
    current_auth: Auth = Depends(get_current_manager),
    service: AssignmentService = Depends(get_assignment_service),
):
    users = service.get_unassigned_users(patient_id)
    return success_response({"count": len(users), "users": users})
