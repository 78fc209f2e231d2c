"""Assignment repository - Database operations for user/patient assignments"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ...constants import AssignmentStatus, AuthStatus, PatientStatus
from ...models import Auth, Patient, User, UserPatient


class AssignmentRepository:
    """Repository for assignment database operations"""

    @staticmethod
    def get_assignment(db: Session, user_id: int, patient_id: int) -> Optional[UserPatient]:
        return (
            db.query(UserPatient)
            .filter(UserPatient.user_id == user_id, UserPatient.patient_id == patient_id)
            .first()
        )

    @staticmethod
    def get_assignments(db: Session, user_id: int, patient_ids: list[int]) -> dict[int, UserPatient]:
        """Existing assignments (any status) of a user, keyed by patient id"""
        rows = (
            db.query(UserPatient)
            .filter(UserPatient.user_id == user_id, UserPatient.patient_id.in_(patient_ids))
            .all()
        )
        return {row.patient_id: row for row in rows}

    @staticmethod
    def create_assignment(db: Session, commit: bool = True, **assignment_data) -> UserPatient:
        assignment = UserPatient(**assignment_data)
        db.add(assignment)
        if commit:
            db.commit()
            db.refresh(assignment)
        else:
            db.flush()
        return assignment

    @staticmethod
    def update_assignment(db: Session, assignment: UserPatient, commit: bool = True, **updates) -> UserPatient:
        for key, value in updates.items():
            if hasattr(assignment, key):
                setattr(assignment, key, value)

        if commit:
            db.commit()
            db.refresh(assignment)
        else:
            db.flush()
        return assignment

    @staticmethod
    def get_active_by_user(db: Session, user_id: int) -> list[UserPatient]:
        return (
            db.query(UserPatient)
            .options(joinedload(UserPatient.patient))
            .join(Patient, Patient.id == UserPatient.patient_id)
            .filter(
                UserPatient.user_id == user_id,
                UserPatient.status == int(AssignmentStatus.ACTIVE),
            )
            .order_by(Patient.lastname, Patient.firstname)
            .all()
        )

    @staticmethod
    def get_active_by_patient(db: Session, patient_id: int) -> list[UserPatient]:
        return (
            db.query(UserPatient)
            .options(joinedload(UserPatient.user).joinedload(User.auth))
            .join(User, User.id == UserPatient.user_id)
            .filter(
                UserPatient.patient_id == patient_id,
                UserPatient.status == int(AssignmentStatus.ACTIVE),
            )
            .order_by(User.lastname, User.firstname)
            .all()
        )

    @staticmethod
    def get_unassigned_patients(db: Session, user_id: int) -> list[Patient]:
        """Active patients without an active assignment to user_id"""
        assigned = select(UserPatient.patient_id).where(
            UserPatient.user_id == user_id,
            UserPatient.status == int(AssignmentStatus.ACTIVE),
        )
        return (
            db.query(Patient)
            .filter(Patient.status == int(PatientStatus.ACTIVE), Patient.id.not_in(assigned))
            .order_by(Patient.lastname, Patient.firstname)
            .all()
        )

    @staticmethod
    def get_unassigned_users(db: Session, patient_id: int) -> list[User]:
        """Users with an active account and no active assignment to patient_id"""
        assigned = select(UserPatient.user_id).where(
            UserPatient.patient_id == patient_id,
            UserPatient.status == int(AssignmentStatus.ACTIVE),
        )
        return (
            db.query(User)
            .options(joinedload(User.auth))
            .join(Auth, Auth.id == User.id)
            .filter(Auth.status == int(AuthStatus.ACTIVE), User.id.not_in(assigned))
            .order_by(User.lastname, User.firstname)
            .all()
        )
