"""Address ownership as a tagged union persisted in (person_id, person_type)"""

from dataclasses import dataclass
from typing import Union

from ..constants import PersonType


@dataclass(frozen=True)
class UserOwner:
    id: int

    def columns(self) -> tuple[int, int]:
        return self.id, int(PersonType.USER)


@dataclass(frozen=True)
class PatientOwner:
    id: int

    def columns(self) -> tuple[int, int]:
        return self.id, int(PersonType.PATIENT)


@dataclass(frozen=True)
class SystemOwner:
    """Shared community address not tied to a person"""

    def columns(self) -> tuple[int, int]:
        return 0, int(PersonType.SYSTEM)


Owner = Union[UserOwner, PatientOwner, SystemOwner]


def owner_from_columns(person_id: int, person_type: int) -> Owner:
    """Build the owner variant for stored columns; raises ValueError on unknown types"""
    kind = PersonType(person_type)
    if kind == PersonType.USER:
        return UserOwner(person_id)
    if kind == PersonType.PATIENT:
        return PatientOwner(person_id)
    return SystemOwner()
