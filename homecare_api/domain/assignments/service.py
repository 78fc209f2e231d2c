"""Assignment service - Business logic for caregiver/patient assignments"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import ensure_self_or_manager
from ...constants import AssignmentStatus, Message, PersonType
from ...models import Auth, Patient, User, UserPatient
from ..addresses.repository import AddressRepository
from ..addresses.schemas import AddressResponse
from ..patients.schemas import PatientResponse
from .repository import AssignmentRepository
from .schemas import (
    AssignedPatient,
    AssignedPatientWithAddresses,
    AssignedUser,
    AssignmentInfo,
    AssignPatientRequest,
    AssignPatientsRequest,
    UnassignPatientsRequest,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AssignmentService:
    """Service layer for assignment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AssignmentRepository()
        self.address_repo = AddressRepository()

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(status_code=404, detail=Message.USER_NOT_FOUND)
        return user

    def _get_patient(self, patient_id: int) -> Patient:
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise HTTPException(status_code=404, detail=Message.PATIENT_NOT_FOUND)
        return patient

    # ------------------------------------------------------------------
    # Assign / unassign
    # ------------------------------------------------------------------

    def assign_patient(self, data: AssignPatientRequest, actor: Auth) -> tuple[UserPatient, str]:
        """Create an assignment, or reactivate an inactive one"""
        self._get_user(data.user_id)
        self._get_patient(data.patient_id)

        existing = self.repo.get_assignment(self.db, data.user_id, data.patient_id)
        if existing and existing.is_active:
            raise HTTPException(status_code=409, detail="User is already assigned to this patient")

        if existing:
            updates = {
                "status": int(AssignmentStatus.ACTIVE),
                "assigned_by": actor.id,
                "assigned_at": utc_now(),
            }
            if data.notes is not None:
                updates["notes"] = data.notes
            assignment = self.repo.update_assignment(self.db, existing, **updates)
            action = "reactivated"
        else:
            try:
                assignment = self.repo.create_assignment(
                    self.db,
                    user_id=data.user_id,
                    patient_id=data.patient_id,
                    assigned_by=actor.id,
                    notes=data.notes,
                    status=int(AssignmentStatus.ACTIVE),
                )
            except IntegrityError as e:
                self.db.rollback()
                raise HTTPException(status_code=409, detail="User is already assigned to this patient") from e
            action = "created"

        logger.info(f"✅ Assignment user {data.user_id} -> patient {data.patient_id} {action} by {actor.id}")
        return assignment, action

    def assign_patients(self, data: AssignPatientsRequest, actor: Auth) -> tuple[int, dict]:
        """
        Assign many patients to one user.

        Every patient id must exist, otherwise nothing is written and the
        unknown ids are reported. Each patient then lands in one of the
        success/skipped/failed result lists.
        """
        self._get_user(data.user_id)

        patients = {
            p.id: p for p in self.db.query(Patient).filter(Patient.id.in_(data.patient_ids)).all()
        }
        invalid = [pid for pid in data.patient_ids if pid not in patients]
        if invalid:
            raise HTTPException(
                status_code=404,
                detail={"message": "Some patient IDs were not found", "invalid_patient_ids": invalid},
            )

        existing = self.repo.get_assignments(self.db, data.user_id, data.patient_ids)
        results = {"success": [], "failed": [], "skipped": []}
        now = utc_now()

        for patient_id in data.patient_ids:
            patient = patients[patient_id]
            entry = {"patient_id": patient_id, "patient_name": patient.full_name}
            assignment = existing.get(patient_id)

            if assignment and assignment.is_active:
                results["skipped"].append({**entry, "reason": "already_assigned"})
                continue

            try:
                with self.db.begin_nested():
                    if assignment:
                        updates = {
                            "status": int(AssignmentStatus.ACTIVE),
                            "assigned_by": actor.id,
                            "assigned_at": now,
                        }
                        if data.notes:
                            updates["notes"] = data.notes
                        self.repo.update_assignment(self.db, assignment, commit=False, **updates)
                        action = "reactivated"
                    else:
                        self.repo.create_assignment(
                            self.db,
                            commit=False,
                            user_id=data.user_id,
                            patient_id=patient_id,
                            assigned_by=actor.id,
                            notes=data.notes,
                            status=int(AssignmentStatus.ACTIVE),
                        )
                        action = "created"
            except IntegrityError as e:
                logger.error(f"❌ Failed to assign patient {patient_id} to user {data.user_id}: {e}")
                results["failed"].append({**entry, "error": "Failed to save assignment"})
                continue

            results["success"].append({**entry, "action": action})

        self.db.commit()

        total_success = len(results["success"])
        total_failed = len(results["failed"])
        total_skipped = len(results["skipped"])

        if total_success == 0 and total_failed == 0:
            return 200, {
                "message": f"All {total_skipped} patients were already assigned to this user",
                "user_id": data.user_id,
                "results": results,
            }

        if total_success == 0:
            raise HTTPException(
                status_code=422,
                detail={
                    "message": "No patient assignments were created",
                    "user_id": data.user_id,
                    "results": results,
                },
            )

        message = f"{total_success} patient(s) assigned successfully"
        if total_skipped:
            message += f", {total_skipped} already assigned"
        if total_failed:
            message += f", {total_failed} failed"

        logger.info(f"✅ Bulk assignment for user {data.user_id} by {actor.id}: {message}")
        return 201, {
            "message": message,
            "user_id": data.user_id,
            "total_requested": len(data.patient_ids),
            "total_success": total_success,
            "total_failed": total_failed,
            "total_skipped": total_skipped,
            "results": results,
        }

    def unassign_patients(self, data: UnassignPatientsRequest, actor: Auth) -> dict:
        """Deactivate assignments; the rows stay so they can be reactivated"""
        self._get_user(data.user_id)

        existing = self.repo.get_assignments(self.db, data.user_id, data.patient_ids)
        results = {"success": [], "skipped": []}

        for patient_id in data.patient_ids:
            assignment = existing.get(patient_id)
            if not assignment or not assignment.is_active:
                results["skipped"].append({"patient_id": patient_id, "reason": "not_assigned"})
                continue

            self.repo.update_assignment(
                self.db, assignment, commit=False, status=int(AssignmentStatus.INACTIVE)
            )
            results["success"].append({"patient_id": patient_id, "action": "deactivated"})

        self.db.commit()

        total_success = len(results["success"])
        logger.info(f"✅ {total_success} assignment(s) of user {data.user_id} deactivated by {actor.id}")
        return {
            "message": f"{total_success} patient(s) unassigned successfully",
            "user_id": data.user_id,
            "total_requested": len(data.patient_ids),
            "total_success": total_success,
            "total_skipped": len(results["skipped"]),
            "results": results,
        }

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def get_assigned_patients(self, user_id: int, actor: Auth, include_addresses: bool = False) -> list:
        ensure_self_or_manager(actor, user_id)
        self._get_user(user_id)

        assignments = self.repo.get_active_by_user(self.db, user_id)
        patients = [(a.patient, a) for a in assignments]
        return self._patient_rows(patients, include_addresses)

    def get_unassigned_patients(self, user_id: int, actor: Auth, include_addresses: bool = False) -> list:
        ensure_self_or_manager(actor, user_id)
        self._get_user(user_id)

        patients = [(p, None) for p in self.repo.get_unassigned_patients(self.db, user_id)]
        return self._patient_rows(patients, include_addresses)

    def _patient_rows(self, patients: list[tuple[Patient, Optional[UserPatient]]], include_addresses: bool) -> list:
        addresses = {}
        if include_addresses:
            addresses = self.address_repo.get_by_owners(
                self.db, int(PersonType.PATIENT), [p.id for p, _ in patients]
            )

        rows = []
        for patient, assignment in patients:
            base = PatientResponse.model_validate(patient).model_dump()
            info = AssignmentInfo.model_validate(assignment) if assignment else None
            if include_addresses:
                rows.append(
                    AssignedPatientWithAddresses(
                        **base,
                        assignment=info,
                        addresses=[AddressResponse.model_validate(a) for a in addresses[patient.id]],
                    )
                )
            else:
                rows.append(AssignedPatient(**base, assignment=info))
        return rows

    def get_assigned_users(self, patient_id: int) -> list[AssignedUser]:
        self._get_patient(patient_id)
        assignments = self.repo.get_active_by_patient(self.db, patient_id)
        return self._user_rows([(a.user, a) for a in assignments])

    def get_unassigned_users(self, patient_id: int) -> list[AssignedUser]:
        self._get_patient(patient_id)
        users = self.repo.get_unassigned_users(self.db, patient_id)
        return self._user_rows([(u, None) for u in users])

    def _user_rows(self, users: list[tuple[User, Optional[UserPatient]]]) -> list[AssignedUser]:
        addresses = self.address_repo.get_by_owners(
            self.db, int(PersonType.USER), [u.id for u, _ in users]
        )
        return [
            AssignedUser(
                id=user.id,
                firstname=user.firstname,
                middlename=user.middlename,
                lastname=user.lastname,
                code=user.code,
                phone=user.phone,
                phone2=user.phone2,
                email=user.email,
                languages=user.languages,
                photo=user.photo,
                role=user.auth.role,
                role_name=user.auth.role_name,
                status=user.auth.status,
                status_name=user.auth.status_name,
                addresses=[AddressResponse.model_validate(a) for a in addresses[user.id]],
                assignment=AssignmentInfo.model_validate(assignment) if assignment else None,
            )
            for user, assignment in users
        ]
