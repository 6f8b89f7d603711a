"""Value types for the pricing engines: frozen dataclasses, no I/O."""

from dataclasses import dataclass
from datetime import datetime

from config.economics import EconomicsConfig


@dataclass(frozen=True)
class WpamSeeds:
    """Initial market state: P₀, I₀, Y₀, N₀."""

    initial_probability: float
    initial_subsidization: int
    initial_yes: int = 0
    initial_no: int = 0

    @classmethod
    def from_economics(cls, economics: EconomicsConfig) -> "WpamSeeds":
        mc = economics.market_creation
        return cls(
            initial_probability=mc.initial_market_probability,
            initial_subsidization=mc.initial_market_subsidization,
            initial_yes=mc.initial_market_yes,
            initial_no=mc.initial_market_no,
        )


@dataclass(frozen=True)
class BetRecord:
    """One entry of a market's bet history as the engines see it.

    amount > 0 is a buy, amount < 0 a sale of |amount| shares on ``outcome``.
    """

    username: str
    outcome: str
    amount: int
    placed_at: datetime
    id: int = 0


@dataclass(frozen=True)
class ProbabilityChange:
    probability: float
    timestamp: datetime


@dataclass(frozen=True)
class CoursePayout:
    payout: float
    outcome: str


@dataclass(frozen=True)
class MarketPosition:
    username: str
    yes_shares: int = 0
    no_shares: int = 0


@dataclass(frozen=True)
class PositionSummary:
    """Display view of a user's stake in one market."""

    username: str
    market_id: int
    yes_shares: int
    no_shares: int
    value: int
    total_spent: int
    total_spent_in_play: int
    is_resolved: bool
    resolution_result: str | None


@dataclass(frozen=True)
class SaleQuote:
    shares: int
    held: int
    sale_value: int
    dust: int
