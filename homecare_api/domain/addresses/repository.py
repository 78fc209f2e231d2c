"""Address repository - Database operations for addresses"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Address
from ...services.geo import BoundingBox
from ...shared.owner import Owner


class AddressRepository:
    """Repository for address database operations"""

    @staticmethod
    def get_by_id(db: Session, address_id: int) -> Optional[Address]:
        return db.query(Address).filter(Address.id == address_id).first()

    @staticmethod
    def get_by_owner(db: Session, owner: Owner) -> list[Address]:
        person_id, person_type = owner.columns()
        return (
            db.query(Address)
            .filter(Address.person_id == person_id, Address.person_type == person_type)
            .order_by(Address.id)
            .all()
        )

    @staticmethod
    def get_by_owners(db: Session, person_type: int, person_ids: list[int]) -> dict[int, list[Address]]:
        """Addresses for many owners of one type, grouped by person id"""
        grouped: dict[int, list[Address]] = {person_id: [] for person_id in person_ids}
        if not person_ids:
            return grouped

        addresses = (
            db.query(Address)
            .filter(Address.person_type == person_type, Address.person_id.in_(person_ids))
            .order_by(Address.id)
            .all()
        )
        for address in addresses:
            grouped[address.person_id].append(address)
        return grouped

    @staticmethod
    def find_in_box(db: Session, box: BoundingBox, person_type: Optional[int] = None) -> list[Address]:
        """Addresses with coordinates inside the box; NULL coordinates never match"""
        query = db.query(Address).filter(
            Address.latitude.between(box.lat_min, box.lat_max),
            Address.longitude.between(box.lon_min, box.lon_max),
        )
        if person_type is not None:
            query = query.filter(Address.person_type == person_type)
        return query.all()

    @staticmethod
    def create_address(db: Session, owner: Owner, commit: bool = True, **address_data) -> Address:
        address = Address(**address_data)
        address.owner = owner
        db.add(address)
        if commit:
            db.commit()
            db.refresh(address)
        return address

    @staticmethod
    def update_address(db: Session, address: Address, **updates) -> Address:
        for key, value in updates.items():
            if hasattr(address, key):
                setattr(address, key, value)

        db.commit()
        db.refresh(address)
        return address

    @staticmethod
    def delete_address(db: Session, address: Address) -> None:
        db.delete(address)
        db.commit()

    @staticmethod
    def delete_by_owner(db: Session, owner: Owner) -> int:
        """Remove every address of an owner; the caller commits"""
        person_id, person_type = owner.columns()
        return (
            db.query(Address)
            .filter(Address.person_id == person_id, Address.person_type == person_type)
            .delete(synchronize_session=False)
        )
