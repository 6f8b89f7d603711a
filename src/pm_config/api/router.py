"""GET /config/economics: the platform economics clients price against.

Public: the fee schedule and credit floor are shown before login.
"""

from fastapi import APIRouter, Request

from config.economics import get_economics
from src.pm_common.response import ApiResponse, success_response

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/economics")
async def get_economics_config(request: Request) -> ApiResponse:
    resp = success_response(get_economics().model_dump(by_alias=True))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
