# src/pm_market/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market, NewMarket


class MarketRepositoryProtocol(Protocol):
    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: int,
    ) -> Market | None: ...

    async def share_market(
        self,
        db: AsyncSession,
        market_id: int,
    ) -> Market | None: ...

    async def lock_market(
        self,
        db: AsyncSession,
        market_id: int,
    ) -> Market | None: ...

    async def create_market(
        self,
        db: AsyncSession,
        market: NewMarket,
    ) -> Market: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        market_id: int,
        result: str,
        resolved_at: datetime,
    ) -> Market: ...

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor_id: int | None,
        limit: int,
        title_query: str | None = None,
    ) -> list[Market]: ...
