"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.economics import get_economics
from config.settings import settings
from src.pm_account.api.router import router as account_router
from src.pm_admin.api.router import router as admin_router
from src.pm_bet.api.router import router as bet_router
from src.pm_common.database import engine
from src.pm_common.errors import AppError
from src.pm_common.response import app_error_response
from src.pm_config.api.router import router as config_router
from src.pm_gateway.api.router import router as auth_router
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_gateway.middleware.timeout import TimeoutMiddleware
from src.pm_market.api.router import router as market_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: validate economics, verify DB connection. Shutdown: dispose."""
    # Startup
    economics = get_economics()
    logger.info(
        "Economics loaded: P0=%s I0=%d maxDebt=%d",
        economics.market_creation.initial_market_probability,
        economics.market_creation.initial_market_subsidization,
        economics.user.maximum_debt_allowed,
    )
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Last added runs outermost: request log wraps the deadline
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = app_error_response(exc, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(bet_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(config_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
