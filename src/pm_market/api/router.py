"""pm_market REST endpoints.

POST /markets                                : create (charges createMarketCost)
GET  /markets                                : list with cursor pagination
GET  /markets/{market_id}                    : detail + probability trajectory
GET  /markets/{market_id}/bets               : bets with probability after each
GET  /markets/{market_id}/projection         : probability after a hypothetical bet
GET  /markets/{market_id}/positions          : every user's net position
GET  /markets/{market_id}/positions/{username}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_trader, get_current_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_market.application.schemas import CreateMarketRequest
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


def _wrap(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_trader)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_market(db, current_user.username, body)
    return _wrap(request, result.model_dump(by_alias=True))


@router.get("")
async def list_markets(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: str | None = Query(
        None, description="active (default), resolved, or all"
    ),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
    q: str | None = Query(None, description="case-insensitive title substring"),
) -> ApiResponse:
    result = await _service.list_markets(db, status, cursor, limit, query=q)
    return _wrap(request, result.model_dump(by_alias=True))


@router.get("/{market_id}")
async def get_market(
    market_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market(db, market_id)
    return _wrap(request, result.model_dump(by_alias=True))


@router.get("/{market_id}/bets")
async def list_market_bets(
    market_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_market_bets(db, market_id)
    return _wrap(request, result.model_dump(by_alias=True))


@router.get("/{market_id}/projection")
async def get_projection(
    market_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    amount: int = Query(...),
    outcome: str = Query(...),
) -> ApiResponse:
    result = await _service.project(db, market_id, amount, outcome)
    return _wrap(request, result.model_dump(by_alias=True))


@router.get("/{market_id}/positions")
async def list_positions(
    market_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_positions(db, market_id)
    return _wrap(request, result.model_dump(by_alias=True))


@router.get("/{market_id}/positions/{username}")
async def get_user_position(
    market_id: int,
    username: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_user_position(db, market_id, username)
    return _wrap(request, result.model_dump(by_alias=True))
