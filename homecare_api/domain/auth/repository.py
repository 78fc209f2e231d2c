"""Auth repository - Database operations for credentials and sessions"""

from typing import Optional

from sqlalchemy.orm import Session

from ...constants import DEFAULT_USER_PHOTO, PLACEHOLDER_NAME
from ...models import Auth, User


class AuthRepository:
    """Repository for auth database operations"""

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[Auth]:
        return db.query(Auth).filter(Auth.username == username).first()

    @staticmethod
    def get_by_id(db: Session, auth_id: int) -> Optional[Auth]:
        return db.query(Auth).filter(Auth.id == auth_id).first()

    @staticmethod
    def create_account(db: Session, username: str, password_hash: str, role: int, status: int) -> Auth:
        """Create the auth row and its placeholder user profile in one transaction"""
        auth = Auth(username=username, password_hash=password_hash, role=role, status=status)
        auth.user = User(
            lastname=PLACEHOLDER_NAME,
            firstname=PLACEHOLDER_NAME,
            email=username,
            photo=DEFAULT_USER_PHOTO,
        )
        db.add(auth)
        db.commit()
        db.refresh(auth)
        return auth

    @staticmethod
    def save_session(db: Session, auth: Auth, token: str, expiration: int) -> Auth:
        # token and expiration always change together
        auth.token = token
        auth.expiration = expiration
        db.commit()
        db.refresh(auth)
        return auth

    @staticmethod
    def update_status(db: Session, auth: Auth, status: int, end_session: bool) -> Auth:
        auth.status = status
        if end_session:
            auth.token = None
            auth.expiration = None
        db.commit()
        db.refresh(auth)
        return auth

    @staticmethod
    def update_role(db: Session, auth: Auth, role: int) -> Auth:
        auth.role = role
        db.commit()
        db.refresh(auth)
        return auth

    @staticmethod
    def update_password(db: Session, auth: Auth, password_hash: str, end_session: bool = False) -> Auth:
        auth.password_hash = password_hash
        if end_session:
            auth.token = None
            auth.expiration = None
        db.commit()
        db.refresh(auth)
        return auth
