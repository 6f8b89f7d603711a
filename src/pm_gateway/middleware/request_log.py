"""Request logging middleware.

Every request gets a short request ID, stored in request.state for the
response envelope and echoed back in the ``X-Request-ID`` header. A client
that sends its own ``X-Request-ID`` keeps it.

Log format:
    INFO [POST] /api/v1/bets -> 201 (23ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("social_predict.request")

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_CLIENT_ID_LENGTH = 64


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_id = request.headers.get(REQUEST_ID_HEADER, "")
        if client_id and len(client_id) <= _MAX_CLIENT_ID_LENGTH:
            request.state.request_id = client_id
        else:
            request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        logger.info(
            "[%s] %s -> %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        return response
