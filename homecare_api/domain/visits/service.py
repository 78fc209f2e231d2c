"""Visit service - Business logic for scheduling and the visit lifecycle"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import ensure_self_or_manager, is_manager_or_higher
from ...constants import Message, Progress, VisitStatus
from ...models import Auth, Patient, User, Visit
from ...services.visit_progress import (
    TRANSITIONS,
    TransitionError,
    VisitAction,
    action_for_target,
    check_transition,
    transition_values,
    validate_visit_times,
)
from .repository import VisitRepository
from .schemas import VisitCreate, VisitUpdate

logger = logging.getLogger(__name__)

OWN_VISIT_ONLY = {
    VisitAction.CHECK_IN: "You can only check in to your own visits",
    VisitAction.CHECK_OUT: "You can only check out from your own visits",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class VisitService:
    """Service layer for visit business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VisitRepository()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_visit(self, visit_id: int) -> Visit:
        visit = self.repo.get_by_id(self.db, visit_id)
        if not visit:
            raise HTTPException(status_code=404, detail=Message.VISIT_NOT_FOUND)
        return visit

    def _get_owned_visit(self, visit_id: int, actor: Auth) -> Visit:
        visit = self._get_visit(visit_id)
        if visit.user_id != actor.id and not is_manager_or_higher(actor):
            logger.warning(f"⚠️ Account {actor.id} attempted to access visit {visit_id}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ACCESS)
        return visit

    def _ensure_user(self, user_id: int) -> None:
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise HTTPException(status_code=404, detail=Message.USER_NOT_FOUND)

    def _ensure_active_patient(self, patient_id: int) -> None:
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise HTTPException(status_code=404, detail=Message.PATIENT_NOT_FOUND)
        if not patient.is_active:
            raise HTTPException(status_code=400, detail="Cannot create visit for inactive patient")

    def get_visit(self, visit_id: int, actor: Auth) -> Visit:
        return self._get_owned_visit(visit_id, actor)

    def search_visits(
        self,
        actor: Auth,
        user_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        progress: Optional[int] = None,
        status: Optional[int] = int(VisitStatus.ACTIVE),
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Visit]:
        """Filtered visit listing; caregivers only ever see their own visits"""
        if not is_manager_or_higher(actor):
            if user_id is None:
                user_id = actor.id
            elif user_id != actor.id:
                raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        if start_date and end_date and end_date < start_date:
            raise HTTPException(status_code=400, detail="end_date cannot be before start_date")

        return self.repo.search_visits(
            self.db,
            user_id=user_id,
            patient_id=patient_id,
            progress=progress,
            status=status,
            starts_from=datetime.combine(start_date, time.min) if start_date else None,
            starts_before=datetime.combine(end_date + timedelta(days=1), time.min) if end_date else None,
        )

    def get_user_visits(self, user_id: int, actor: Auth) -> list[Visit]:
        ensure_self_or_manager(actor, user_id)
        self._ensure_user(user_id)
        return self.repo.search_visits(self.db, user_id=user_id)

    def get_patient_visits(self, patient_id: int) -> list[Visit]:
        if not self.db.query(Patient.id).filter(Patient.id == patient_id).first():
            raise HTTPException(status_code=404, detail=Message.PATIENT_NOT_FOUND)
        return self.repo.search_visits(self.db, patient_id=patient_id)

    def get_today_visits(self, actor: Auth) -> list[Visit]:
        today = utc_now().date()
        return self.search_visits(actor, start_date=today, end_date=today)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def create_visit(self, data: VisitCreate, actor: Auth) -> Visit:
        user_id = data.user_id if data.user_id is not None else actor.id
        manager = is_manager_or_higher(actor)

        if user_id != actor.id and not manager:
            logger.warning(f"⚠️ Account {actor.id} attempted to schedule a visit for user {user_id}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        progress = Progress.SCHEDULED if data.progress is None else Progress(data.progress)
        if progress != Progress.SCHEDULED and not manager:
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        self._ensure_user(user_id)
        self._ensure_active_patient(data.patient_id)

        values = {
            "user_id": user_id,
            "patient_id": data.patient_id,
            "start_time": data.start_time,
            "end_time": data.end_time,
            "note": data.note,
            "progress": int(progress),
            "status": int(VisitStatus.ACTIVE),
            "scheduled_by": actor.id,
        }
        if progress != Progress.SCHEDULED:
            # Stamp the audit columns of the step that leads to the initial state
            action = next(a for a, t in TRANSITIONS.items() if t.target == progress)
            values.update(transition_values(action, actor.id, utc_now()))

        visit = self.repo.create_visit(self.db, **values)
        logger.info(
            f"✅ Visit {visit.id} scheduled for user {user_id} with patient {data.patient_id} "
            f"({progress.label}) by account {actor.id}"
        )
        return visit

    def update_visit(self, visit_id: int, data: VisitUpdate, actor: Auth) -> Visit:
        visit = self._get_owned_visit(visit_id, actor)
        updates = data.model_dump(exclude_unset=True)

        if "user_id" in updates:
            if updates["user_id"] is None:
                raise HTTPException(status_code=400, detail="user_id is required")
            if updates["user_id"] != visit.user_id:
                if not is_manager_or_higher(actor):
                    raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)
                self._ensure_user(updates["user_id"])

        if "patient_id" in updates:
            if updates["patient_id"] is None:
                raise HTTPException(status_code=400, detail="patient_id is required")
            if updates["patient_id"] != visit.patient_id:
                self._ensure_active_patient(updates["patient_id"])

        for field in ("start_time", "end_time", "status"):
            if field in updates and updates[field] is None:
                raise HTTPException(status_code=400, detail=f"{field} is required")

        if "status" in updates and updates["status"] != visit.status and not is_manager_or_higher(actor):
            logger.warning(f"⚠️ Account {actor.id} attempted to change the status of visit {visit_id}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        try:
            validate_visit_times(
                updates.get("start_time", visit.start_time),
                updates.get("end_time", visit.end_time),
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        visit = self.repo.update_visit(self.db, visit, **updates)
        logger.info(f"✅ Visit {visit_id} updated by account {actor.id}: {', '.join(updates)}")
        return visit

    def delete_visit(self, visit_id: int, actor: Auth) -> None:
        """Soft delete; the visit stays in history with status SoftDeleted"""
        visit = self._get_owned_visit(visit_id, actor)
        if visit.status == VisitStatus.SOFT_DELETED:
            raise HTTPException(status_code=400, detail="Visit is already deleted")

        self.repo.update_visit(self.db, visit, status=int(VisitStatus.SOFT_DELETED))
        logger.info(f"🗑️ Visit {visit_id} deleted by account {actor.id}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def check_in(self, visit_id: int, actor: Auth) -> Visit:
        visit = self._get_visit(visit_id)
        return self._apply(visit, VisitAction.CHECK_IN, actor)

    def check_out(self, visit_id: int, actor: Auth, note: Optional[str] = None) -> Visit:
        visit = self._get_visit(visit_id)
        return self._apply(visit, VisitAction.CHECK_OUT, actor, note)

    def cancel(self, visit_id: int, actor: Auth, note: Optional[str] = None) -> Visit:
        visit = self._get_owned_visit(visit_id, actor)
        return self._apply(visit, VisitAction.CANCEL, actor, note)

    def approve(self, visit_id: int, actor: Auth) -> Visit:
        visit = self._get_visit(visit_id)
        return self._apply(visit, VisitAction.APPROVE, actor)

    def change_progress(self, visit_id: int, target: int, actor: Auth) -> tuple[Visit, int]:
        """Manager override: any single legal step from the current progress"""
        visit = self._get_visit(visit_id)
        old_progress = visit.progress
        try:
            action = action_for_target(old_progress, target)
        except TransitionError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return self._apply(visit, action, actor, enforce_owner=False), old_progress

    def _apply(
        self,
        visit: Visit,
        action: VisitAction,
        actor: Auth,
        note: Optional[str] = None,
        enforce_owner: bool = True,
    ) -> Visit:
        if not visit.is_active:
            raise HTTPException(status_code=400, detail="Cannot change progress of an inactive visit")

        if enforce_owner and action in OWN_VISIT_ONLY and visit.user_id != actor.id:
            logger.warning(f"⚠️ Account {actor.id} attempted to {action.value} visit {visit.id} of user {visit.user_id}")
            raise HTTPException(status_code=403, detail=OWN_VISIT_ONLY[action])

        expected = visit.progress
        try:
            check_transition(expected, action)
        except TransitionError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        values = transition_values(action, actor.id, utc_now())
        if note is not None:
            values["note"] = note

        if not self.repo.transition_visit(self.db, visit.id, expected, values):
            logger.warning(f"⚠️ Visit {visit.id} changed concurrently during {action.value}")
            raise HTTPException(status_code=409, detail=Message.VISIT_CONFLICT)

        self.db.refresh(visit)
        logger.info(
            f"✅ Visit {visit.id} {action.value}: {Progress(expected).label} -> "
            f"{visit.progress_description} by account {actor.id}"
        )
        return visit
