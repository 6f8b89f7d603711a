"""Domain models for pm_market: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from config.economics import EconomicsConfig
from src.pm_common.enums import MarketStatus, OutcomeType
from src.pm_pricing.domain.models import WpamSeeds


@dataclass
class Market:
    id: int
    question_title: str
    description: str
    outcome_type: str
    creator_username: str
    resolution_date_time: datetime
    utc_offset: int
    yes_label: str
    no_label: str
    initial_probability: float
    is_resolved: bool
    resolution_result: str | None
    final_resolution_at: datetime | None
    created_at: datetime

    @property
    def status(self) -> str:
        return MarketStatus.RESOLVED.value if self.is_resolved else MarketStatus.ACTIVE.value

    def is_open(self, now: datetime) -> bool:
        """Bets are accepted strictly before the resolution time and while unresolved."""
        return not self.is_resolved and now < self.resolution_date_time

    def seeds(self, economics: EconomicsConfig) -> WpamSeeds:
        """WPAM seeds: this market's own P₀, the platform's I₀/Y₀/N₀."""
        mc = economics.market_creation
        return WpamSeeds(
            initial_probability=self.initial_probability,
            initial_subsidization=mc.initial_market_subsidization,
            initial_yes=mc.initial_market_yes,
            initial_no=mc.initial_market_no,
        )


@dataclass
class NewMarket:
    """Validated creation input, before an id is assigned."""

    question_title: str
    description: str
    creator_username: str
    resolution_date_time: datetime
    utc_offset: int
    yes_label: str
    no_label: str
    initial_probability: float
    created_at: datetime
    outcome_type: str = OutcomeType.BINARY.value
