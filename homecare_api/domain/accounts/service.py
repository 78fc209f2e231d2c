"""Account service - Business logic for accounts and user profiles"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import ensure_self_or_manager
from ...constants import Message
from ...models import Auth, User
from ...security_utils import mask_sensitive_data
from ...shared.encryption import decrypt_ssn, encrypt_ssn
from ...shared.owner import UserOwner
from ..addresses.repository import AddressRepository
from ..addresses.schemas import AddressResponse
from .repository import AccountRepository
from .schemas import AccountResponse, UserProfile, UserResponse, UserUpdate

logger = logging.getLogger(__name__)


def profile_of(user: User) -> dict:
    """Profile columns of a user with the SSN decrypted"""
    profile = UserProfile.model_validate(user).model_dump()
    profile["ssn"] = decrypt_ssn(user.ssn)
    return profile


def account_view(auth: Auth) -> AccountResponse:
    return AccountResponse(
        **profile_of(auth.user),
        username=auth.username,
        role=auth.role,
        role_name=auth.role_name,
        status=auth.status,
        status_name=auth.status_name,
        expiration=auth.expiration,
    )


class AccountService:
    """Service layer for account business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()
        self.address_repo = AddressRepository()

    def get_accounts(self, status: Optional[int] = None) -> list[AccountResponse]:
        return [account_view(auth) for auth in self.repo.get_accounts(self.db, status)]

    def get_account(self, account_id: int, actor: Auth) -> AccountResponse:
        ensure_self_or_manager(actor, account_id)
        auth = self.repo.get_account(self.db, account_id)
        if not auth or not auth.user:
            raise HTTPException(status_code=404, detail=Message.ACCOUNT_NOT_FOUND)
        return account_view(auth)

    def _get_user(self, user_id: int, actor: Auth) -> User:
        ensure_self_or_manager(actor, user_id)
        user = self.repo.get_user(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail=Message.USER_NOT_FOUND)
        return user

    def get_user(self, user_id: int, actor: Auth) -> UserResponse:
        user = self._get_user(user_id, actor)
        addresses = self.address_repo.get_by_owner(self.db, UserOwner(user.id))
        return UserResponse(
            **profile_of(user),
            addresses=[AddressResponse.model_validate(a) for a in addresses],
        )

    def update_user(self, user_id: int, data: UserUpdate, actor: Auth) -> tuple[UserProfile, dict]:
        """
        Apply profile changes and report them as {field: {from, to}}.

        Fields whose value does not change are left out of the report.
        SSNs are stored encrypted and reported masked.
        """
        user = self._get_user(user_id, actor)
        requested = data.model_dump(exclude_unset=True)

        changes = {}
        columns = {}
        for field, new_value in requested.items():
            if field == "ssn":
                old_value = decrypt_ssn(user.ssn)
                if old_value != new_value:
                    changes[field] = {
                        "from": mask_sensitive_data(old_value),
                        "to": mask_sensitive_data(new_value),
                    }
                    columns[field] = encrypt_ssn(new_value) if new_value else None
                continue

            old_value = getattr(user, field)
            if old_value != new_value:
                changes[field] = {"from": old_value, "to": new_value}
                columns[field] = new_value

        if columns:
            user = self.repo.update_user(self.db, user, **columns)
            logger.info(f"✅ User {user_id} updated by account {actor.id}: {', '.join(changes)}")
        else:
            logger.info(f"ℹ️ User {user_id} update by account {actor.id} changed nothing")

        return UserProfile(**profile_of(user)), changes
