"""Fee & credit policy: pure rules, parameterized by the economics config.

    fee:     sell -> sellSharesFee; first buy on a market -> initialBetFee;
             later buys -> eachBetFee
    credit:  balance - max(amount, 0) - fee >= -maximumDebtAllowed
"""

from config.economics import EconomicsConfig
from src.pm_common.enums import normalize_outcome
from src.pm_common.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidOutcomeError,
)


class BetPolicy:
    def __init__(self, economics: EconomicsConfig) -> None:
        self._economics = economics

    @property
    def maximum_debt_allowed(self) -> int:
        return self._economics.user.maximum_debt_allowed

    def fee(self, has_prior_bet: bool, amount: int) -> int:
        fees = self._economics.betting.bet_fees
        if amount < 0:
            return fees.sell_shares_fee
        if not has_prior_bet:
            return fees.initial_bet_fee
        return fees.each_bet_fee

    def validate_amount(self, amount: int) -> None:
        minimum = self._economics.betting.minimum_bet
        if amount < minimum:
            raise InvalidAmountError(amount, minimum)

    @staticmethod
    def validate_outcome(outcome: str) -> str:
        """Returns the canonical 'YES'/'NO' form."""
        normalized = normalize_outcome(outcome)
        if normalized is None:
            raise InvalidOutcomeError(outcome)
        return normalized

    def available_credit(self, balance: int) -> int:
        return balance + self.maximum_debt_allowed

    def has_credit(self, balance: int, amount: int, fee: int) -> bool:
        return balance - max(amount, 0) - fee >= -self.maximum_debt_allowed

    def check_credit(self, balance: int, amount: int, fee: int) -> None:
        """Raises InsufficientBalanceError when the placement would breach the debt floor."""
        if not self.has_credit(balance, amount, fee):
            raise InsufficientBalanceError(
                max(amount, 0) + fee, self.available_credit(balance)
            )

    def check_sale_credit(self, balance: int, sale_value: int, fee: int) -> None:
        """Sales credit sale_value first; only the fee can push toward the floor."""
        if balance + sale_value - fee < -self.maximum_debt_allowed:
            raise InsufficientBalanceError(fee, self.available_credit(balance) + sale_value)
