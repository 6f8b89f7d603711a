"""Repository Protocol for the bet ledger: append-only."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_bet.domain.models import Bet


class BetRepositoryProtocol(Protocol):
    async def has_prior_bet(
        self, db: AsyncSession, username: str, market_id: int
    ) -> bool: ...

    async def insert_bet(
        self,
        db: AsyncSession,
        username: str,
        market_id: int,
        amount: int,
        outcome: str,
        placed_at: datetime,
    ) -> Bet: ...

    async def list_bets_for_market(
        self, db: AsyncSession, market_id: int
    ) -> list[Bet]: ...
