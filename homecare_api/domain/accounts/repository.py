"""Account repository - Database operations for auth and user profiles"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...constants import AuthStatus
from ...models import Auth, User

HIDDEN_STATUSES = (int(AuthStatus.ARCHIVED), int(AuthStatus.SOFT_DELETED))


class AccountRepository:
    """Repository for account database operations"""

    @staticmethod
    def get_accounts(db: Session, status: Optional[int] = None) -> list[Auth]:
        """
        Auth rows with their profiles, ordered by last name, first name.

        Without a status, archived and soft deleted accounts are left out.
        """
        query = db.query(Auth).join(User, User.id == Auth.id).options(joinedload(Auth.user))
        if status is None:
            query = query.filter(Auth.status.notin_(HIDDEN_STATUSES))
        else:
            query = query.filter(Auth.status == status)
        return query.order_by(User.lastname, User.firstname).all()

    @staticmethod
    def get_account(db: Session, account_id: int) -> Optional[Auth]:
        return (
            db.query(Auth)
            .options(joinedload(Auth.user))
            .filter(Auth.id == account_id)
            .first()
        )

    @staticmethod
    def get_user(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)

        db.commit()
        db.refresh(user)
        return user
