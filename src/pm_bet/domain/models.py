"""Domain models for pm_bet: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime

from src.pm_pricing.domain.models import BetRecord


@dataclass(frozen=True)
class Bet:
    """A persisted bet. Immutable once written; amount < 0 records a sale."""

    id: int
    username: str
    market_id: int
    amount: int
    outcome: str
    placed_at: datetime

    def to_record(self) -> BetRecord:
        return BetRecord(
            username=self.username,
            outcome=self.outcome,
            amount=self.amount,
            placed_at=self.placed_at,
            id=self.id,
        )


@dataclass(frozen=True)
class SaleResult:
    username: str
    market_id: int
    shares_sold: int
    sale_value: int
    dust: int
    outcome: str
    transaction_at: datetime
