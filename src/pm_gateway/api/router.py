"""Auth API router: login, change password.

All endpoints return ApiResponse[T]. request_id is read from
request.state (injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.database import get_db_session, transaction
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_gateway.user.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    UserInfo,
)
from src.pm_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _user_info(user: UserModel) -> UserInfo:
    return UserInfo(
        username=user.username,
        user_type=user.user_type,
        must_change_password=user.must_change_password,
    )


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, access_token = await _service.login(body.username, body.password, db)

    data = LoginResponse(
        access_token=access_token,
        token_type="Bearer",
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=_user_info(user),
    )
    resp = success_response(data.model_dump(by_alias=True))
    resp.request_id = _get_request_id(request)
    resp.message = "Login successful"
    return resp


@router.post(
    "/change-password",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Change password (clears mustChangePassword)",
)
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    async with transaction(db):
        user = await _service.change_password(
            current_user, body.current_password, body.new_password, db
        )

    resp = success_response(_user_info(user).model_dump(by_alias=True))
    resp.request_id = _get_request_id(request)
    resp.message = "Password changed"
    return resp
