"""Pydantic schemas for pm_market API requests and responses.

Wire format is camelCase. Cursor format for the market list:
  {"id": <market_id>}  (BIGSERIAL, strictly decreasing page order)
  Encoded as Base64 JSON string.
"""

import base64
import json
from datetime import datetime

from src.pm_bet.domain.models import Bet
from src.pm_common.schemas import CamelModel
from src.pm_market.domain.models import Market
from src.pm_pricing.domain.models import PositionSummary, ProbabilityChange

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_market: Market) -> str:
    """Encode cursor from last market in page."""
    payload = {"id": last_market.id}
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode cursor -> market_id, or None on error."""
    if cursor is None:
        return None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(data["id"])
    except (ValueError, KeyError, TypeError):
        return None


def _iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateMarketRequest(CamelModel):
    """Lengths and the resolution horizon are checked by the service (400)."""

    question_title: str
    description: str = ""
    resolution_date_time: datetime
    utc_offset: int = 0
    yes_label: str | None = None
    no_label: str | None = None


# ---------------------------------------------------------------------------
# Market
# ---------------------------------------------------------------------------


class MarketOut(CamelModel):
    id: int
    question_title: str
    description: str
    outcome_type: str
    creator_username: str
    resolution_date_time: str
    utc_offset: int
    yes_label: str
    no_label: str
    initial_probability: float
    status: str
    is_resolved: bool
    resolution_result: str | None
    final_resolution_at: str | None
    created_at: str

    @classmethod
    def from_domain(cls, m: Market) -> "MarketOut":
        return cls(
            id=m.id,
            question_title=m.question_title,
            description=m.description,
            outcome_type=m.outcome_type,
            creator_username=m.creator_username,
            resolution_date_time=m.resolution_date_time.isoformat(),
            utc_offset=m.utc_offset,
            yes_label=m.yes_label,
            no_label=m.no_label,
            initial_probability=m.initial_probability,
            status=m.status,
            is_resolved=m.is_resolved,
            resolution_result=m.resolution_result,
            final_resolution_at=_iso(m.final_resolution_at),
            created_at=m.created_at.isoformat(),
        )


class MarketListResponse(CamelModel):
    items: list[MarketOut]
    next_cursor: str | None
    has_more: bool


class ProbabilityPoint(CamelModel):
    probability: float
    timestamp: str

    @classmethod
    def from_domain(cls, change: ProbabilityChange) -> "ProbabilityPoint":
        return cls(probability=change.probability, timestamp=change.timestamp.isoformat())


class MarketDetailResponse(CamelModel):
    market: MarketOut
    probability_changes: list[ProbabilityPoint]
    current_probability: float
    total_volume: int
    num_users: int


# ---------------------------------------------------------------------------
# Bets
# ---------------------------------------------------------------------------


class MarketBetItem(CamelModel):
    id: int
    username: str
    outcome: str
    amount: int
    placed_at: str
    probability: float  # market probability right after this bet

    @classmethod
    def from_domain(cls, bet: Bet, probability: float) -> "MarketBetItem":
        return cls(
            id=bet.id,
            username=bet.username,
            outcome=bet.outcome,
            amount=bet.amount,
            placed_at=bet.placed_at.isoformat(),
            probability=probability,
        )


class MarketBetsResponse(CamelModel):
    market_id: int
    items: list[MarketBetItem]


class ProjectionResponse(CamelModel):
    market_id: int
    amount: int
    outcome: str
    current_probability: float
    projected_probability: float


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


class PositionOut(CamelModel):
    username: str
    market_id: int
    yes_shares: int
    no_shares: int
    value: int
    total_spent: int
    total_spent_in_play: int
    is_resolved: bool
    resolution_result: str | None

    @classmethod
    def from_domain(cls, p: PositionSummary) -> "PositionOut":
        return cls(
            username=p.username,
            market_id=p.market_id,
            yes_shares=p.yes_shares,
            no_shares=p.no_shares,
            value=p.value,
            total_spent=p.total_spent,
            total_spent_in_play=p.total_spent_in_play,
            is_resolved=p.is_resolved,
            resolution_result=p.resolution_result,
        )


class MarketPositionsResponse(CamelModel):
    market_id: int
    items: list[PositionOut]
