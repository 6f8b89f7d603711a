"""Economics configuration: the platform's credit, fee and seeding rules.

Loaded once per process from environment variables such as
``ECONOMICS__BETTING__BET_FEES__INITIAL_BET_FEE=2`` and handed to services as
an immutable value. Pricing engines receive only the pieces they need
(see ``WpamSeeds``) so they stay pure.

Serialized with the section names clients already know:
``MarketCreation``, ``MarketIncentives``, ``User``, ``Betting.BetFees``.
"""

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class MarketCreation(_Section):
    initial_market_probability: float = Field(
        0.5, ge=0.0, le=1.0, alias="initialMarketProbability"
    )
    initial_market_subsidization: int = Field(10, ge=0, alias="initialMarketSubsidization")
    initial_market_yes: int = Field(0, alias="initialMarketYes")
    initial_market_no: int = Field(0, alias="initialMarketNo")
    minimum_future_hours: float = Field(1.0, ge=0.0, alias="minimumFutureHours")


class MarketIncentives(_Section):
    create_market_cost: int = Field(10, ge=0, alias="createMarketCost")
    # Served for clients only; resolution does not pay it yet
    trader_bonus: int = Field(1, ge=0, alias="traderBonus")


class UserEconomics(_Section):
    initial_account_balance: int = Field(0, alias="initialAccountBalance")
    maximum_debt_allowed: int = Field(500, ge=0, alias="maximumDebtAllowed")


class BetFees(_Section):
    initial_bet_fee: int = Field(1, ge=0, alias="initialBetFee")
    each_bet_fee: int = Field(0, ge=0, alias="eachBetFee")
    sell_shares_fee: int = Field(0, ge=0, alias="sellSharesFee")


class Betting(_Section):
    minimum_bet: int = Field(1, ge=1, alias="minimumBet")
    max_dust_per_sale: int = Field(2, ge=0, alias="maxDustPerSale")
    bet_fees: BetFees = Field(default_factory=BetFees, alias="BetFees")


class EconomicsConfig(_Section):
    market_creation: MarketCreation = Field(
        default_factory=MarketCreation, alias="MarketCreation"
    )
    market_incentives: MarketIncentives = Field(
        default_factory=MarketIncentives, alias="MarketIncentives"
    )
    user: UserEconomics = Field(default_factory=UserEconomics, alias="User")
    betting: Betting = Field(default_factory=Betting, alias="Betting")

    @model_validator(mode="after")
    def _seeds_not_degenerate(self) -> "EconomicsConfig":
        mc = self.market_creation
        if mc.initial_market_subsidization + mc.initial_market_yes + mc.initial_market_no <= 0:
            raise ValueError(
                "initial subsidization plus initial YES/NO contributions must be positive"
            )
        return self


class _EconomicsSettings(BaseSettings):
    """Environment reader; nested keys use ``__`` (ECONOMICS__USER__MAXIMUM_DEBT_ALLOWED)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    economics: EconomicsConfig = Field(default_factory=EconomicsConfig)


@lru_cache(maxsize=1)
def get_economics() -> EconomicsConfig:
    """Process-wide economics, read once. Tests build their own EconomicsConfig instead."""
    return _EconomicsSettings().economics
