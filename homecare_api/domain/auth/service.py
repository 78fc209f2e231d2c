"""Auth service - Business logic for accounts, credentials and sessions"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import is_admin, is_manager_or_higher
from ...constants import AuthStatus, Message, Role
from ...models import Auth
from ...security_utils import hash_password, log_security_event, password_needs_rehash, verify_password
from ...services.token_service import token_service
from .repository import AuthRepository
from .schemas import ChangeRoleRequest, Credentials, RegisterRequest

logger = logging.getLogger(__name__)

# status -> (success message, whether the current session is revoked)
STATUS_CHANGES = {
    AuthStatus.ACTIVE: (Message.USER_ACTIVATED, False),
    AuthStatus.INACTIVE: (Message.USER_INACTIVATED, True),
    AuthStatus.ARCHIVED: (Message.USER_ARCHIVED, True),
    AuthStatus.SOFT_DELETED: (Message.USER_DELETED, True),
}


class AuthService:
    """Service layer for auth business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AuthRepository()

    def _get_by_username(self, username: str) -> Auth:
        auth = self.repo.get_by_username(self.db, username)
        if not auth:
            raise HTTPException(status_code=404, detail=Message.EMAIL_NOT_FOUND)
        return auth

    def register(self, data: RegisterRequest) -> Auth:
        """Create a caregiver account awaiting verification"""
        logger.info(f"📥 Registration request for {data.username}")

        if self.repo.get_by_username(self.db, data.username):
            logger.warning(f"⚠️ Registration rejected, {data.username} already exists")
            raise HTTPException(status_code=409, detail=Message.EMAIL_REGISTERED)

        try:
            auth = self.repo.create_account(
                self.db,
                username=data.username,
                password_hash=hash_password(data.password),
                role=int(Role.CAREGIVER),
                status=int(AuthStatus.NOT_VERIFIED),
            )
        except IntegrityError as e:
            # Another request registered the same username between check and insert
            self.db.rollback()
            logger.error(f"❌ Username {data.username} taken concurrently")
            raise HTTPException(status_code=409, detail=Message.EMAIL_REGISTERED) from e

        logger.info(f"✅ Account {auth.id} registered for {auth.username}")
        return auth

    def login(self, data: Credentials, ip_address: Optional[str] = None) -> str:
        """Verify credentials and start a new session"""
        auth = self.repo.get_by_username(self.db, data.username)
        if not auth or not verify_password(data.username, data.password, auth.password_hash):
            log_security_event("failed_login", username=data.username, ip_address=ip_address)
            raise HTTPException(status_code=401, detail=Message.INVALID_CREDENTIALS)

        if not auth.is_active:
            logger.warning(f"⚠️ Login blocked for {auth.username}, status {auth.status_name}")
            raise HTTPException(status_code=403, detail=Message.ACCOUNT_NOT_ACTIVATED)

        if password_needs_rehash(auth.password_hash):
            self.repo.update_password(self.db, auth, hash_password(data.password))
            logger.info(f"🔐 Password hash of account {auth.id} upgraded")

        token = self._start_session(auth)
        log_security_event("login", username=auth.username, ip_address=ip_address)
        return token

    def renew_token(self, auth: Auth) -> str:
        token = self._start_session(auth)
        logger.info(f"🔄 Token renewed for account {auth.id}")
        return token

    def _start_session(self, auth: Auth) -> str:
        expiration = token_service.generate_expiration()
        token = token_service.create_token(auth.id, auth.username, auth.role, expiration)
        self.repo.save_session(self.db, auth, token, expiration)
        return token

    def change_password(self, data: Credentials, actor: Auth) -> str:
        """
        Set a new password and end the account's current session.

        Everyone may change their own password. Managers may change those of
        managers and caregivers; administrator passwords are changed only by
        an administrator.
        """
        if data.username != actor.username and not is_manager_or_higher(actor):
            logger.warning(f"⚠️ Account {actor.id} attempted to change the password of {data.username}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        target = self._get_by_username(data.username)
        if target.id != actor.id and target.role == Role.ADMINISTRATOR and not is_admin(actor):
            logger.warning(f"⚠️ Account {actor.id} attempted to change the password of administrator {target.username}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        self.repo.update_password(self.db, target, hash_password(data.password), end_session=True)
        log_security_event("password_change", username=target.username, details={"changed_by": actor.id})
        return Message.PASSWORD_CHANGED

    def change_role(self, data: ChangeRoleRequest, actor: Auth) -> str:
        """Managers may assign Manager/Caregiver; only administrators touch the Administrator role"""
        target = self._get_by_username(data.username)

        if not is_admin(actor) and (
            data.role == Role.ADMINISTRATOR or target.role == Role.ADMINISTRATOR
        ):
            logger.warning(f"⚠️ Account {actor.id} attempted to change administrator role of {target.username}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        self.repo.update_role(self.db, target, data.role)
        log_security_event(
            "role_change",
            username=target.username,
            details={"role": Role(data.role).label, "changed_by": actor.id},
        )
        return Message.ROLE_CHANGED

    def change_status(self, username: str, status: AuthStatus, actor: Auth) -> str:
        message, end_session = STATUS_CHANGES[status]
        target = self._get_by_username(username)

        if target.role == Role.ADMINISTRATOR and not is_admin(actor):
            logger.warning(f"⚠️ Account {actor.id} attempted to change status of administrator {target.username}")
            raise HTTPException(status_code=403, detail=Message.UNAUTHORIZED_ROLE)

        self.repo.update_status(self.db, target, int(status), end_session)
        logger.info(f"✅ Account {target.username} set to {status.label} by {actor.id}")
        return message
