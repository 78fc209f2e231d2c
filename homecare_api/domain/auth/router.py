"""Auth router - FastAPI endpoints for registration, login and account status"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import get_current_auth, get_current_manager
from ...constants import AuthStatus, Message
from ...database import get_db
from ...models import Auth
from ...shared.responses import success_response
from .schemas import ChangeRoleRequest, Credentials, RegisterRequest, UsernameRequest
from .service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


@router.post("/register")
async def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Create a caregiver account; an administrator activates it later"""
    auth = service.register(data)
    return success_response(
        {"message": Message.USER_CREATED, "id": auth.id, "username": auth.username}, 201
    )


@router.post("/login")
async def login(
    data: Credentials,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    client_ip = request.client.host if request.client else None
    token = service.login(data, client_ip)
    return success_response({"token": token})


@router.put("/renew/token")
async def renew_token(
    current_auth: Auth = Depends(get_current_auth),
    service: AuthService = Depends(get_auth_service),
):
    """Issue a fresh token with a new expiration"""
    return success_response({"token": service.renew_token(current_auth)})


@router.put("/change/password")
async def change_password(
    data: Credentials,
    current_auth: Auth = Depends(get_current_auth),
    service: AuthService = Depends(get_auth_service),
):
    """Change a password; the account has to log in again afterwards"""
    return success_response({"message": service.change_password(data, current_auth)}, 202)


@router.put("/change/role")
async def change_role(
    data: ChangeRoleRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AuthService = Depends(get_auth_service),
):
    return success_response({"message": service.change_role(data, current_auth)}, 202)


# ============================================================================
# ACCOUNT STATUS
# ============================================================================


@router.put("/activate/account")
async def activate_account(
    data: UsernameRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AuthService = Depends(get_auth_service),
):
    message = service.change_status(data.username, AuthStatus.ACTIVE, current_auth)
    return success_response({"message": message}, 202)


@router.put("/inactivate/account")
async def inactivate_account(
    data: UsernameRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AuthService = Depends(get_auth_service),
):
    message = service.change_status(data.username, AuthStatus.INACTIVE, current_auth)
    return success_response({"message": message}, 202)


@router.put("/archive/account")
async def archive_account(
    data: UsernameRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AuthService = Depends(get_auth_service),
):
    message = service.change_status(data.username, AuthStatus.ARCHIVED, current_auth)
    return success_response({"message": message}, 202)


@router.put("/delete/account")
async def delete_account(
    data: UsernameRequest,
    current_auth: Auth = Depends(get_current_manager),
    service: AuthService = Depends(get_auth_service),
):
    """Soft delete: the row stays, the account can no longer log in"""
    message = service.change_status(data.username, AuthStatus.SOFT_DELETED, current_auth)
    return success_response({"message": message}, 202)
