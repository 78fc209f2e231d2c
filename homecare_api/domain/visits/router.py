"""Visit router - FastAPI endpoints for visit scheduling and progress"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_auth, get_current_manager
from ...constants import VisitStatus
from ...database import get_db
from ...models import Auth, Visit
from ...shared.responses import success_response
from .schemas import ProgressUpdate, VisitCreate, VisitDetail, VisitNote, VisitResponse, VisitUpdate
from .service import VisitService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Visits"])


def get_visit_service(db: Session = Depends(get_db)) -> VisitService:
    """Dependency injection for VisitService"""
    return VisitService(db)


def visit_list(visits: list[Visit]):
    items = [VisitResponse.model_validate(v) for v in visits]
    return success_response({"count": len(items), "visits": items})


def progress_payload(message: str, visit: Visit) -> dict:
    return {
        "message": message,
        "visit_id": visit.id,
        "progress": visit.progress,
        "progress_description": visit.progress_description,
        "duration_minutes": visit.duration_minutes,
    }


@router.post("/visit")
async def create_visit(
    data: VisitCreate,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    visit = service.create_visit(data, current_auth)
    return success_response(
        {
            "message": "Visit created successfully",
            "visit_id": visit.id,
            "progress": visit.progress,
            "duration_minutes": visit.duration_minutes,
            "visit": VisitResponse.model_validate(visit),
        },
        201,
    )


# ============================================================================
# LISTINGS
# ============================================================================


@router.get("/visits")
async def get_visits(
    user_id: Optional[int] = Query(None),
    patient_id: Optional[int] = Query(None),
    progress: Optional[int] = Query(None),
    status: int = Query(int(VisitStatus.ACTIVE)),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    """Visits filtered by user, patient, progress, status and start date range"""
    visits = service.search_visits(
        current_auth,
        user_id=user_id,
        patient_id=patient_id,
        progress=progress,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    return visit_list(visits)


@router.get("/visits/today")
async def get_today_visits(
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    return visit_list(service.get_today_visits(current_auth))


@router.get("/visits/user/{user_id}")
async def get_user_visits(
    user_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    return visit_list(service.get_user_visits(user_id, current_auth))


@router.get("/visits/patient/{patient_id}")
async def get_patient_visits(
    patient_id: int,
    current_auth: Auth = Depends(get_current_manager),
    service: VisitService = Depends(get_visit_service),
):
    return visit_list(service.get_patient_visits(patient_id))


# ============================================================================
# SINGLE VISIT
# ============================================================================


@router.get("/visit/{visit_id}")
async def get_visit(
    visit_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    """Visit with its caregiver and patient"""
    visit = service.get_visit(visit_id, current_auth)
    return success_response(VisitDetail.model_validate(visit))


@router.put("/visit/{visit_id}")
async def update_visit(
    visit_id: int,
    data: VisitUpdate,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    visit = service.update_visit(visit_id, data, current_auth)
    return success_response(
        {
            "message": "Visit updated successfully",
            "visit_id": visit.id,
            "progress": visit.progress,
            "duration_minutes": visit.duration_minutes,
            "visit": VisitResponse.model_validate(visit),
        }
    )


@router.delete("/visit/{visit_id}")
async def delete_visit(
    visit_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    service.delete_visit(visit_id, current_auth)
    return success_response({"message": "Visit deleted successfully", "visit_id": visit_id})


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.put("/visit/{visit_id}/progress")
async def change_progress(
    visit_id: int,
    data: ProgressUpdate,
    current_auth: Auth = Depends(get_current_manager),
    service: VisitService = Depends(get_visit_service),
):
    visit, old_progress = service.change_progress(visit_id, data.progress, current_auth)
    payload = progress_payload("Visit progress updated successfully", visit)
    payload["old_progress"] = old_progress
    payload["new_progress"] = visit.progress
    return success_response(payload)


@router.put("/visit/{visit_id}/checkin")
async def check_in(
    visit_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    visit = service.check_in(visit_id, current_auth)
    return success_response(progress_payload("Successfully checked in to visit", visit))


@router.put("/visit/{visit_id}/checkout")
async def check_out(
    visit_id: int,
    data: Optional[VisitNote] = None,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    visit = service.check_out(visit_id, current_auth, data.note if data else None)
    return success_response(progress_payload("Successfully checked out from visit", visit))


@router.put("/visit/{visit_id}/cancel")
async def cancel(
    visit_id: int,
    data: Optional[VisitNote] = None,
    current_auth: Auth = Depends(get_current_auth),
    service: VisitService = Depends(get_visit_service),
):
    visit = service.cancel(visit_id, current_auth, data.note if data else None)
    return success_response(progress_payload("Visit canceled successfully", visit))


@router.put("/visit/{visit_id}/approve")
async def approve(
    visit_id: int,
    current_auth: Auth = Depends(get_current_manager),
    service: VisitService = Depends(get_visit_service),
):
    visit = service.approve(visit_id, current_auth)
    return success_response(progress_payload("Visit approved successfully", visit))
