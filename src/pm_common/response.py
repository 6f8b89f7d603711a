"""Unified API response envelope.

All API endpoints return this format:
{
    "code": 0,           // 0=success, non-0=AppError code
    "message": "success",
    "data": { ... },     // null on error; camelCase keys
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.pm_common.errors import AppError


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str, request_id: str | None = None) -> ApiResponse:
    return ApiResponse(
        code=code, message=message, data=None, request_id=request_id or _new_request_id()
    )


def app_error_response(exc: AppError, request_id: str | None = None) -> ApiResponse:
    return error_response(exc.code, exc.message, request_id)
