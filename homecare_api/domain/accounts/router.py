"""Account router - FastAPI endpoints for accounts and user profiles"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_auth, get_current_manager
from ...constants import Message
from ...database import get_db
from ...models import Auth
from ...shared.responses import success_response
from .schemas import UserUpdate
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Accounts"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db)


@router.get("/accounts")
async def get_accounts(
    status: Optional[int] = Query(None),
    current_auth: Auth = Depends(get_current_manager),
    service: AccountService = Depends(get_account_service),
):
    """Accounts by name; archived and soft deleted ones only when asked for by status"""
    accounts = service.get_accounts(status)
    return success_response({"count": len(accounts), "accounts": accounts})


@router.get("/account/{account_id}")
async def get_account(
    account_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AccountService = Depends(get_account_service),
):
    return success_response(service.get_account(account_id, current_auth))


@router.get("/user/{user_id}")
async def get_user(
    user_id: int,
    current_auth: Auth = Depends(get_current_auth),
    service: AccountService = Depends(get_account_service),
):
    """User profile with its addresses"""
    return success_response(service.get_user(user_id, current_auth))


@router.put("/user/{user_id}")
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_auth: Auth = Depends(get_current_auth),
    service: AccountService = Depends(get_account_service),
):
    user, changes = service.update_user(user_id, data, current_auth)
    return success_response({"message": Message.USER_UPDATED, "user": user, "updates": changes})
