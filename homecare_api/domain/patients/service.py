"""Patient service - Business logic for patient operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...constants import Message, PatientStatus, PersonType
from ...models import Address, Auth, Patient
from ...services.zip_geocoder import fill_missing_coordinates
from ...shared.owner import PatientOwner
from ..addresses.repository import AddressRepository
from ..addresses.schemas import AddressResponse
from .repository import PatientRepository
from .schemas import PatientCreate, PatientUpdate, PatientWithAddresses

logger = logging.getLogger(__name__)

# target status -> (message when already in it, success message)
STATUS_CHANGES = {
    PatientStatus.ACTIVE: ("Patient is already activated", Message.PATIENT_ACTIVATED),
    PatientStatus.ARCHIVED: ("Patient is already archived", Message.PATIENT_ARCHIVED),
    PatientStatus.DELETED: ("Patient is already deleted", Message.PATIENT_DELETED),
}


class PatientService:
    """Service layer for patient business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PatientRepository()
        self.address_repo = AddressRepository()

    def get_patients(self, status: Optional[int] = None) -> list[Patient]:
        return self.repo.get_patients(self.db, status)

    def get_patients_with_addresses(self, status: Optional[int] = None) -> list[PatientWithAddresses]:
        patients = self.repo.get_patients(self.db, status)
        addresses = self.address_repo.get_by_owners(
            self.db, int(PersonType.PATIENT), [p.id for p in patients]
        )
        return [with_addresses(p, addresses[p.id]) for p in patients]

    def get_patient(self, patient_id: int) -> Patient:
        patient = self.repo.get_by_id(self.db, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail=Message.PATIENT_NOT_FOUND)
        return patient

    def create_patient(self, data: PatientCreate, actor: Auth) -> tuple[Patient, Optional[Address]]:
        """Create a patient and its optional address in a single transaction"""
        logger.info(f"📥 Creating patient {data.firstname} {data.lastname} by account {actor.id}")

        patient = self.repo.create_patient(
            self.db,
            firstname=data.firstname,
            middlename=data.middlename,
            lastname=data.lastname,
            phone=data.phone,
            patient=data.patient,
            admission=data.admission,
            status=int(PatientStatus.ACTIVE),
        )

        address = None
        if data.address is not None:
            values = fill_missing_coordinates(data.address.model_dump())
            address = self.address_repo.create_address(
                self.db, PatientOwner(patient.id), commit=False, **values
            )

        self.db.commit()
        self.db.refresh(patient)
        if address is not None:
            self.db.refresh(address)

        logger.info(f"✅ Patient {patient.id} created")
        return patient, address

    def update_patient(self, patient_id: int, data: PatientUpdate) -> Patient:
        patient = self.get_patient(patient_id)
        if patient.status == PatientStatus.DELETED:
            raise HTTPException(status_code=400, detail="Cannot update a deleted patient")

        return self.repo.update_patient(self.db, patient, **data.model_dump(exclude_unset=True))

    def change_status(self, patient_id: int, status: PatientStatus) -> str:
        already_message, success_message = STATUS_CHANGES[status]
        patient = self.get_patient(patient_id)
        if patient.status == status:
            raise HTTPException(status_code=400, detail=already_message)

        self.repo.update_patient(self.db, patient, status=int(status))
        logger.info(f"✅ Patient {patient_id} status set to {status.name.lower()}")
        return success_message

    def delete_patient(self, patient_id: int) -> None:
        """Physically remove a patient that has never been visited"""
        patient = self.get_patient(patient_id)
        if self.repo.has_visits(self.db, patient_id):
            logger.warning(f"⚠️ Refusing to delete patient {patient_id} with recorded visits")
            raise HTTPException(
                status_code=409,
                detail="Cannot delete a patient with existing visits; archive it instead",
            )

        removed = self.address_repo.delete_by_owner(self.db, PatientOwner(patient_id))
        self.repo.delete_patient(self.db, patient)
        logger.info(f"🗑️ Patient {patient_id} deleted with {removed} address(es)")


def with_addresses(patient: Patient, addresses: list[Address]) -> PatientWithAddresses:
    return PatientWithAddresses.model_validate(patient).model_copy(
        update={"addresses": [AddressResponse.model_validate(a) for a in addresses]}
    )
