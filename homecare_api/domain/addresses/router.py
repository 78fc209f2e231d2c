"""Address router - FastAPI endpoints for address operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_auth
from ...database import get_db
from ...models import Auth
from ...shared.responses import success_response
from .schemas import AddressCreate, AddressResponse, AddressUpdate
from .service import AddressService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/address", tags=["Addresses"])


def get_address_service(db: Session = Depends(get_db)) -> AddressService:
    """Dependency injection for AddressService"""
    return AddressService(db)


@router.post("")
async def create_address(
    data: AddressCreate,
    current_auth: Auth = Depends(get_current_auth),
    service: AddressService = Depends(get_address_service),
):
    address = service.create_address(data, current_auth)
    return success_response(
        {
            "message": "Address created successfully",
            "address": AddressResponse.model_validate(address),
        },
        201,
    )


# Declared before /{address_id} so "nearby" is not parsed as an id
@router.get("/nearby")
async def find_nearby(
    latitude: float = Query(...),
    longitude: float = Query(...),
    radius: float = Query(...),
    person_type: Optional[int] = Query(None),
    current_auth: Auth = Depends(get_current_auth),
    service: AddressService = Depends(get_address_service),
):
    """Addresses within radius miles of a point, nearest first"""
    results = service.find_nearby(latitude, longitude, radius, person_type, current_auth)
    return success_response(results)


@router.get("/person/{person_id}/{person_type}")
async def get_person_addresses(
    person_id: int,
    person_type: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AddressService = Depends(get_address_service),
):
    addresses = service.get_person_addresses(person_id, person_type, current_auth)
    return success_response([AddressResponse.model_validate(a) for a in addresses])


@router.get("/{address_id}")
async def get_address(
    address_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AddressService = Depends(get_address_service),
):
    address = service.get_address(address_id, current_auth)
    return success_response(AddressResponse.model_validate(address))


@router.put("/{address_id}")
async def update_address(
    address_id: int,
    data: AddressUpdate,
    current_auth: Auth = Depends(get_current_auth),
    service: AddressService = Depends(get_address_service),
):
    address = service.update_address(address_id, data, current_auth)
    return success_response(
        {
            "message": "Address updated successfully",
            "address": AddressResponse.model_validate(address),
        }
    )


@router.delete("/{address_id}")
async def delete_address(
    address_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AddressService = Depends(get_address_service),
):
    service.delete_address(address_id, current_auth)
    return success_response({"message": "Address deleted successfully", "address_id": address_id})
