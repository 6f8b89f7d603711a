"""BetRepository: raw text() SQL over the append-only bets table.

Ordering contract: bets of a market are always returned by
(placed_at ASC, id ASC), the order the pricing engines replay them in.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_bet.domain.models import Bet
from src.pm_common.errors import InternalError

_HAS_PRIOR_BET_SQL = text("""
    SELECT EXISTS (
        SELECT 1 FROM bets
        WHERE username = :username AND market_id = :market_id
    ) AS has_bet
""")

_INSERT_BET_SQL = text("""
    INSERT INTO bets (username, market_id, amount, outcome, placed_at)
    VALUES (:username, :market_id, :amount, :outcome, :placed_at)
    RETURNING id, username, market_id, amount, outcome, placed_at
""")

_LIST_MARKET_BETS_SQL = text("""
    SELECT id, username, market_id, amount, outcome, placed_at
    FROM bets
    WHERE market_id = :market_id
    ORDER BY placed_at ASC, id ASC
""")


def _row_to_bet(row: object) -> Bet:
    return Bet(
        id=row.id,  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        placed_at=row.placed_at,  # type: ignore[attr-defined]
    )


class BetRepository:
    async def has_prior_bet(self, db: AsyncSession, username: str, market_id: int) -> bool:
        result = await db.execute(
            _HAS_PRIOR_BET_SQL, {"username": username, "market_id": market_id}
        )
        return bool(result.scalar())

    async def insert_bet(
        self,
        db: AsyncSession,
        username: str,
        market_id: int,
        amount: int,
        outcome: str,
        placed_at: datetime,
    ) -> Bet:
        result = await db.execute(
            _INSERT_BET_SQL,
            {
                "username": username,
                "market_id": market_id,
                "amount": amount,
                "outcome": outcome,
                "placed_at": placed_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Bet insert returned no rows")
        return _row_to_bet(row)

    async def list_bets_for_market(self, db: AsyncSession, market_id: int) -> list[Bet]:
        result = await db.execute(_LIST_MARKET_BETS_SQL, {"market_id": market_id})
        return [_row_to_bet(row) for row in result.fetchall()]
