"""Request deadline middleware.

Each request gets REQUEST_TIMEOUT_SECONDS. On expiry the handler is
cancelled in place, which unwinds any open ``transaction(db)`` block and
rolls it back, and the client receives a 504 envelope (code 9003).

Plain ASGI rather than BaseHTTPMiddleware: the downstream app must run in
this middleware's own task for the cancellation to reach the handler.
Register BEFORE RequestLogMiddleware so the log middleware stays outermost
and the request_id is already in scope["state"].
"""

import asyncio
import logging

from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.pm_common.errors import RequestTimeoutError
from src.pm_common.response import app_error_response

logger = logging.getLogger(__name__)


class TimeoutMiddleware:
    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        self.app = app
        self._timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            async with asyncio.timeout(self._timeout_seconds):
                await self.app(scope, receive, send_wrapper)
        except TimeoutError:
            request_id = scope.get("state", {}).get("request_id")
            logger.warning(
                "Request deadline exceeded after %.1fs: [%s] %s %s",
                self._timeout_seconds, scope["method"], scope["path"], request_id,
            )
            if response_started:
                raise
            exc = RequestTimeoutError()
            response = JSONResponse(
                status_code=exc.http_status,
                content=app_error_response(exc, request_id).model_dump(),
            )
            await response(scope, receive, send)
