"""Address domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ValidationInfo, field_validator, model_validator

from ...constants import DEFAULT_COUNTRY, Message, PersonType
from ...shared.validators import (
    require_text,
    validate_address_type,
    validate_latitude,
    validate_longitude,
    validate_state,
    validate_zipcode,
)


class AddressFields(BaseModel):
    """Address body shared by standalone and nested (patient) creation"""

    type: str
    address: str
    city: str
    county: str
    state: str
    zipcode: str
    country: Optional[str] = DEFAULT_COUNTRY
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("zipcode", mode="before")
    @classmethod
    def zipcode_as_text(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("type", "address", "city", "county", "state", "zipcode")
    @classmethod
    def not_blank(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name)

    @field_validator("type")
    @classmethod
    def known_type(cls, v):
        return validate_address_type(v)

    @field_validator("state")
    @classmethod
    def two_letter_state(cls, v):
        return validate_state(v)

    @field_validator("zipcode")
    @classmethod
    def five_digit_zipcode(cls, v):
        return validate_zipcode(v)

    @field_validator("country")
    @classmethod
    def default_country(cls, v):
        return v.strip() if v and v.strip() else DEFAULT_COUNTRY

    @field_validator("latitude")
    @classmethod
    def latitude_range(cls, v):
        return validate_latitude(v)

    @field_validator("longitude")
    @classmethod
    def longitude_range(cls, v):
        return validate_longitude(v)

    @model_validator(mode="after")
    def coordinates_together(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must be provided together")
        return self


class AddressCreate(AddressFields):
    person_id: int
    person_type: int

    @field_validator("person_type")
    @classmethod
    def person_type_owner(cls, v):
        if v not in (PersonType.USER, PersonType.PATIENT):
            raise ValueError(Message.PERSON_TYPE_INVALID)
        return v


class AddressUpdate(BaseModel):
    """Partial update; the owner of an address never changes"""

    type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("zipcode", mode="before")
    @classmethod
    def zipcode_as_text(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("address", "city", "county", "country")
    @classmethod
    def not_blank(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name)

    @field_validator("type", "state", "zipcode")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator("type")
    @classmethod
    def known_type(cls, v):
        return validate_address_type(v)

    @field_validator("state")
    @classmethod
    def two_letter_state(cls, v):
        return validate_state(v)

    @field_validator("zipcode")
    @classmethod
    def five_digit_zipcode(cls, v):
        return validate_zipcode(v)

    @field_validator("latitude")
    @classmethod
    def latitude_range(cls, v):
        return validate_latitude(v)

    @field_validator("longitude")
    @classmethod
    def longitude_range(cls, v):
        return validate_longitude(v)


class AddressResponse(BaseModel):
    """Schema for address response"""

    id: int
    person_id: int
    person_type: int
    type: str
    address: str
    city: str
    county: str
    state: str
    zipcode: str
    country: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    formatted: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NearbyAddressResponse(AddressResponse):
    distance_miles: float
