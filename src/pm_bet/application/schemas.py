"""Request/response schemas for pm_bet. Wire format is camelCase.

Amount and outcome are validated by the service (400 InvalidAmount /
InvalidOutcome), not by the schema, so clients get the domain error codes.
"""

from src.pm_bet.domain.models import Bet, SaleResult
from src.pm_common.schemas import CamelModel


class PlaceBetRequest(CamelModel):
    market_id: int
    amount: int
    outcome: str


class SellSharesRequest(CamelModel):
    market_id: int
    amount: int  # shares to sell
    outcome: str


class PlaceBetResponse(CamelModel):
    username: str
    market_id: int
    amount: int
    outcome: str
    placed_at: str

    @classmethod
    def from_domain(cls, bet: Bet) -> "PlaceBetResponse":
        return cls(
            username=bet.username,
            market_id=bet.market_id,
            amount=bet.amount,
            outcome=bet.outcome,
            placed_at=bet.placed_at.isoformat(),
        )


class SellSharesResponse(CamelModel):
    username: str
    market_id: int
    shares_sold: int
    sale_value: int
    dust: int
    outcome: str
    transaction_at: str

    @classmethod
    def from_domain(cls, sale: SaleResult) -> "SellSharesResponse":
        return cls(
            username=sale.username,
            market_id=sale.market_id,
            shares_sold=sale.shares_sold,
            sale_value=sale.sale_value,
            dust=sale.dust,
            outcome=sale.outcome,
            transaction_at=sale.transaction_at.isoformat(),
        )
