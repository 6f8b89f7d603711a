# src/pm_admin/api/router.py
"""Admin REST API. Every endpoint requires user_type ADMIN."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_admin.application.schemas import ResolveRequest
from src.pm_admin.application.service import AdminService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import require_admin
from src.pm_gateway.user.db_models import UserModel
from src.pm_gateway.user.schemas import CreateUserRequest

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.post("/markets/{market_id}/resolve")
async def resolve_market(
    market_id: int,
    body: ResolveRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve_market(db, market_id, body.outcome)
    resp = success_response(result.model_dump(by_alias=True))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def add_user(
    body: CreateUserRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.add_user(db, body)
    resp = success_response(result.model_dump(by_alias=True))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
