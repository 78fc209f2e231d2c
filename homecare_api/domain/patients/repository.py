"""Patient repository - Database operations for patients"""

from typing import Optional

from sqlalchemy.orm import Session

from ...constants import PatientStatus
from ...models import Patient, UserPatient, Visit

HIDDEN_STATUSES = (int(PatientStatus.ARCHIVED), int(PatientStatus.DELETED))


class PatientRepository:
    """Repository for patient database operations"""

    @staticmethod
    def get_by_id(db: Session, patient_id: int) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.id == patient_id).first()

    @staticmethod
    def get_patients(db: Session, status: Optional[int] = None) -> list[Patient]:
        """
        Patients ordered by last name, first name.

        Without a status, archived and deleted patients are left out.
        """
        query = db.query(Patient)
        if status is None:
            query = query.filter(Patient.status.notin_(HIDDEN_STATUSES))
        else:
            query = query.filter(Patient.status == status)
        return query.order_by(Patient.lastname, Patient.firstname).all()

    @staticmethod
    def create_patient(db: Session, **patient_data) -> Patient:
        """Stage a new patient; the caller commits"""
        patient = Patient(**patient_data)
        db.add(patient)
        db.flush()
        return patient

    @staticmethod
    def update_patient(db: Session, patient: Patient, **updates) -> Patient:
        for key, value in updates.items():
            if hasattr(patient, key):
                setattr(patient, key, value)

        db.commit()
        db.refresh(patient)
        return patient

    @staticmethod
    def has_visits(db: Session, patient_id: int) -> bool:
        return db.query(Visit.id).filter(Visit.patient_id == patient_id).first() is not None

    @staticmethod
    def delete_patient(db: Session, patient: Patient) -> None:
        """Remove a patient with its assignments; the caller removes addresses first"""
        db.query(UserPatient).filter(UserPatient.patient_id == patient.id).delete(
            synchronize_session=False
        )
        db.delete(patient)
        db.commit()
