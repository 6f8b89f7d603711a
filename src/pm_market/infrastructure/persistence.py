"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import InternalError, MarketNotFoundError
from src.pm_market.domain.models import Market, NewMarket

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, question_title, description, outcome_type, creator_username,
    resolution_date_time, utc_offset, yes_label, no_label,
    initial_probability, is_resolved, resolution_result,
    final_resolution_at, created_at
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_SHARE_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR SHARE
""")

_LOCK_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

_INSERT_MARKET_SQL = text(f"""
    INSERT INTO markets
        (question_title, description, outcome_type, creator_username,
         resolution_date_time, utc_offset, yes_label, no_label,
         initial_probability, is_resolved, created_at, updated_at)
    VALUES
        (:question_title, :description, :outcome_type, :creator_username,
         :resolution_date_time, :utc_offset, :yes_label, :no_label,
         :initial_probability, FALSE, :created_at, :created_at)
    RETURNING {_MARKET_COLUMNS}
""")

_RESOLVE_MARKET_SQL = text(f"""
    UPDATE markets
    SET is_resolved = TRUE,
        resolution_result = :result,
        final_resolution_at = :resolved_at,
        updated_at = NOW()
    WHERE id = :market_id AND is_resolved = FALSE
    RETURNING {_MARKET_COLUMNS}
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:is_resolved AS BOOLEAN) IS NULL OR is_resolved = CAST(:is_resolved AS BOOLEAN))
        AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
        AND (CAST(:title_pattern AS TEXT) IS NULL
             OR question_title ILIKE CAST(:title_pattern AS TEXT) ESCAPE '\\')
    ORDER BY id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        question_title=row.question_title,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        outcome_type=row.outcome_type,  # type: ignore[attr-defined]
        creator_username=row.creator_username,  # type: ignore[attr-defined]
        resolution_date_time=row.resolution_date_time,  # type: ignore[attr-defined]
        utc_offset=row.utc_offset,  # type: ignore[attr-defined]
        yes_label=row.yes_label,  # type: ignore[attr-defined]
        no_label=row.no_label,  # type: ignore[attr-defined]
        initial_probability=row.initial_probability,  # type: ignore[attr-defined]
        is_resolved=row.is_resolved,  # type: ignore[attr-defined]
        resolution_result=row.resolution_result,  # type: ignore[attr-defined]
        final_resolution_at=row.final_resolution_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _title_pattern(title_query: str | None) -> str | None:
    """Case-insensitive substring pattern; LIKE wildcards in the query match literally."""
    if title_query is None:
        return None
    escaped = (
        title_query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return f"%{escaped}%"


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class MarketRepository:
    """Concrete repository. Mutations rely on the caller's transaction."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: int
    ) -> Market | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def share_market(
        self, db: AsyncSession, market_id: int
    ) -> Market | None:
        """Read the market holding a shared row lock until commit.

        Concurrent bets share it; resolution (FOR UPDATE) waits for them.
        """
        result = await db.execute(_SHARE_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def lock_market(
        self, db: AsyncSession, market_id: int
    ) -> Market | None:
        result = await db.execute(_LOCK_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def create_market(self, db: AsyncSession, market: NewMarket) -> Market:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "question_title": market.question_title,
                "description": market.description,
                "outcome_type": market.outcome_type,
                "creator_username": market.creator_username,
                "resolution_date_time": market.resolution_date_time,
                "utc_offset": market.utc_offset,
                "yes_label": market.yes_label,
                "no_label": market.no_label,
                "initial_probability": market.initial_probability,
                "created_at": market.created_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Market insert returned no rows")
        return _row_to_market(row)

    async def mark_resolved(
        self, db: AsyncSession, market_id: int, result: str, resolved_at: datetime
    ) -> Market:
        res = await db.execute(
            _RESOLVE_MARKET_SQL,
            {"market_id": market_id, "result": result, "resolved_at": resolved_at},
        )
        row = res.fetchone()
        if row is None:
            raise MarketNotFoundError(market_id)
        return _row_to_market(row)

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor_id: int | None,
        limit: int,
        title_query: str | None = None,
    ) -> list[Market]:
        is_resolved = None if status is None else status == "resolved"
        result = await db.execute(
            _LIST_MARKETS_SQL,
            {
                "is_resolved": is_resolved,
                "cursor_id": cursor_id,
                "title_pattern": _title_pattern(title_query),
                "limit": limit,
            },
        )
        return [_row_to_market(row) for row in result.fetchall()]
