"""EconomicsConfig: defaults, client-facing aliases, seed validation, env loading."""

import pytest
from pydantic import ValidationError

from config.economics import EconomicsConfig, _EconomicsSettings, get_economics


class TestDefaults:
    def test_platform_defaults(self) -> None:
        economics = EconomicsConfig()
        assert economics.market_creation.initial_market_probability == 0.5
        assert economics.market_creation.initial_market_subsidization == 10
        assert economics.market_incentives.create_market_cost == 10
        assert economics.user.maximum_debt_allowed == 500
        assert economics.betting.minimum_bet == 1
        assert economics.betting.bet_fees.initial_bet_fee == 1
        assert economics.betting.bet_fees.each_bet_fee == 0
        assert economics.betting.bet_fees.sell_shares_fee == 0

    def test_dump_uses_section_names(self) -> None:
        dumped = EconomicsConfig().model_dump(by_alias=True)
        assert set(dumped) == {"MarketCreation", "MarketIncentives", "User", "Betting"}
        assert dumped["Betting"]["BetFees"]["initialBetFee"] == 1
        assert dumped["User"]["maximumDebtAllowed"] == 500

    def test_partial_override_keeps_other_defaults(self) -> None:
        economics = EconomicsConfig.model_validate({"Betting": {"BetFees": {"eachBetFee": 3}}})
        assert economics.betting.bet_fees.each_bet_fee == 3
        assert economics.betting.bet_fees.initial_bet_fee == 1
        assert economics.betting.minimum_bet == 1

    def test_is_immutable(self) -> None:
        economics = EconomicsConfig()
        with pytest.raises(ValidationError):
            economics.user = economics.user  # type: ignore[misc]


class TestValidation:
    def test_degenerate_seeds_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EconomicsConfig.model_validate(
                {"MarketCreation": {"initialMarketSubsidization": 0}}
            )

    def test_zero_subsidy_with_seed_shares_is_allowed(self) -> None:
        economics = EconomicsConfig.model_validate(
            {"MarketCreation": {"initialMarketSubsidization": 0, "initialMarketYes": 5}}
        )
        assert economics.market_creation.initial_market_yes == 5

    @pytest.mark.parametrize(
        "override",
        [
            {"MarketCreation": {"initialMarketProbability": 1.5}},
            {"User": {"maximumDebtAllowed": -1}},
            {"Betting": {"minimumBet": 0}},
            {"Betting": {"BetFees": {"sellSharesFee": -2}}},
        ],
    )
    def test_out_of_range_values(self, override: dict) -> None:
        with pytest.raises(ValidationError):
            EconomicsConfig.model_validate(override)


class TestEnvironment:
    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ECONOMICS__USER__MAXIMUM_DEBT_ALLOWED", "250")
        monkeypatch.setenv("ECONOMICS__BETTING__BET_FEES__INITIAL_BET_FEE", "2")

        economics = _EconomicsSettings().economics

        assert economics.user.maximum_debt_allowed == 250
        assert economics.betting.bet_fees.initial_bet_fee == 2

    def test_get_economics_is_cached(self) -> None:
        assert get_economics() is get_economics()
