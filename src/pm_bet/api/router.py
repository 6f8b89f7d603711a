"""pm_bet REST endpoints.

POST /bets        : buy shares (201)
POST /bets/sell   : sell held shares (201)

Both require a validated bearer token and a user that is not pending a
password change.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_bet.application.schemas import PlaceBetRequest, SellSharesRequest
from src.pm_bet.application.service import BetApplicationService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_trader
from src.pm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/bets", tags=["bets"])

_service = BetApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_bet(
    body: PlaceBetRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_trader)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_bet(db, current_user.username, body)
    resp = success_response(result.model_dump(by_alias=True))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/sell", status_code=status.HTTP_201_CREATED)
async def sell_shares(
    body: SellSharesRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_trader)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.sell_shares(db, current_user.username, body)
    resp = success_response(result.model_dump(by_alias=True))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
