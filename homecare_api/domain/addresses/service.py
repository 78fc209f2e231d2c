"""Address service - Business logic for address ownership and nearby search"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import is_manager_or_higher
from ...constants import Message, PersonType
from ...models import Address, Auth, Patient, User
from ...services.geo import GeoPoint, bounding_box, distance_to, validate_radius
from ...services.zip_geocoder import fill_missing_coordinates
from ...shared.owner import Owner, PatientOwner, UserOwner, owner_from_columns
from ...shared.validators import validate_latitude, validate_longitude
from .repository import AddressRepository
from .schemas import AddressCreate, AddressResponse, AddressUpdate, NearbyAddressResponse

logger = logging.getLogger(__name__)


class AddressService:
    """Service layer for address business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AddressRepository()

    # ------------------------------------------------------------------
    # Access rules
    # ------------------------------------------------------------------

    def _check_read_access(self, owner: Owner, actor: Auth) -> None:
        """User addresses are private to their owner and managers"""
        if isinstance(owner, UserOwner) and owner.id != actor.id and not is_manager_or_higher(actor):
            logger.warning(f"⚠️ Account {actor.id} attempted to read addresses of user {owner.id}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ACCESS)

    def _check_write_access(self, owner: Owner, actor: Auth) -> None:
        """Users edit their own addresses; everything else needs a manager"""
        if is_manager_or_higher(actor):
            return
        if isinstance(owner, UserOwner) and owner.id == actor.id:
            return
        logger.warning(f"⚠️ Account {actor.id} attempted to modify an address of {owner}")
        raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ACCESS)

    def _ensure_owner_exists(self, owner: Owner) -> None:
        if isinstance(owner, UserOwner):
            if not self.db.query(User.id).filter(User.id == owner.id).first():
                raise HTTPException(status_code=404, detail=Message.USER_NOT_FOUND)
        elif isinstance(owner, PatientOwner):
            if not self.db.query(Patient.id).filter(Patient.id == owner.id).first():
                raise HTTPException(status_code=404, detail=Message.PATIENT_NOT_FOUND)

    @staticmethod
    def _owner_for(person_id: int, person_type: int) -> Owner:
        if person_type not in (PersonType.USER, PersonType.PATIENT):
            raise HTTPException(status_code=400, detail=Message.PERSON_TYPE_INVALID)
        return owner_from_columns(person_id, person_type)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_address(self, address_id: int, actor: Auth) -> Address:
        address = self.repo.get_by_id(self.db, address_id)
        if not address:
            raise HTTPException(status_code=404, detail=Message.ADDRESS_NOT_FOUND)
        self._check_read_access(address.owner, actor)
        return address

    def get_person_addresses(self, person_id: int, person_type: int, actor: Auth) -> list[Address]:
        owner = self._owner_for(person_id, person_type)
        self._ensure_owner_exists(owner)
        self._check_read_access(owner, actor)
        return self.repo.get_by_owner(self.db, owner)

    def create_address(self, data: AddressCreate, actor: Auth) -> Address:
        owner = self._owner_for(data.person_id, data.person_type)
        self._check_write_access(owner, actor)
        self._ensure_owner_exists(owner)

        values = fill_missing_coordinates(data.model_dump(exclude={"person_id", "person_type"}))
        address = self.repo.create_address(self.db, owner, **values)
        logger.info(f"✅ Address {address.id} created for {owner} by account {actor.id}")
        return address

    def update_address(self, address_id: int, data: AddressUpdate, actor: Auth) -> Address:
        address = self.repo.get_by_id(self.db, address_id)
        if not address:
            raise HTTPException(status_code=404, detail=Message.ADDRESS_NOT_FOUND)
        self._check_write_access(address.owner, actor)

        updates = data.model_dump(exclude_unset=True)
        if "latitude" in updates or "longitude" in updates:
            # Sent coordinates are stored as given; null on both clears them
            latitude = updates.get("latitude", address.latitude)
            longitude = updates.get("longitude", address.longitude)
            if (latitude is None) != (longitude is None):
                raise HTTPException(status_code=400, detail="Latitude and longitude must be provided together")
        elif "zipcode" in updates or address.latitude is None:
            located = fill_missing_coordinates({"zipcode": updates.get("zipcode", address.zipcode)})
            if located.get("latitude") is not None:
                updates["latitude"], updates["longitude"] = located["latitude"], located["longitude"]

        return self.repo.update_address(self.db, address, **updates)

    def delete_address(self, address_id: int, actor: Auth) -> None:
        address = self.repo.get_by_id(self.db, address_id)
        if not address:
            raise HTTPException(status_code=404, detail=Message.ADDRESS_NOT_FOUND)
        self._check_write_access(address.owner, actor)

        self.repo.delete_address(self.db, address)
        logger.info(f"🗑️ Address {address_id} deleted by account {actor.id}")

    # ------------------------------------------------------------------
    # Nearby search
    # ------------------------------------------------------------------

    def find_nearby(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        person_type: Optional[int],
        actor: Auth,
    ) -> list[NearbyAddressResponse]:
        """
        Addresses inside the bounding box around a point, nearest first.

        The box is a range filter, so results in its corners may lie a
        little beyond the radius; each carries its exact distance.
        """
        try:
            validate_latitude(latitude)
            validate_longitude(longitude)
            validate_radius(radius)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        if person_type is not None and person_type not in (PersonType.USER, PersonType.PATIENT):
            raise HTTPException(status_code=400, detail=Message.PERSON_TYPE_INVALID)

        center = GeoPoint(latitude, longitude)
        addresses = self.repo.find_in_box(self.db, bounding_box(latitude, longitude, radius), person_type)

        if not is_manager_or_higher(actor):
            addresses = [
                a for a in addresses
                if a.person_type != PersonType.USER or a.person_id == actor.id
            ]

        results = [
            NearbyAddressResponse(
                **AddressResponse.model_validate(a).model_dump(),
                distance_miles=round(distance_to(center, a), 2),
            )
            for a in addresses
        ]
        results.sort(key=lambda r: r.distance_miles)
        logger.info(f"📊 Nearby search ({latitude}, {longitude}, {radius}mi) returned {len(results)} addresses")
        return results
