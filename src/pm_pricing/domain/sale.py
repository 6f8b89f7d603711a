"""Sale pricing against the current market probability.

sale_value is the closed form ``round(shares · P_outcome)``. The held
position's own valuation, pro-rated to the shares sold, is computed as a
cross-check; the two differ by at most one unit, reported as dust and never
credited.
"""

from src.pm_common.enums import Outcome
from src.pm_common.errors import DustCapExceededError, InsufficientSharesError
from src.pm_pricing.domain.dbpm import round_half_away
from src.pm_pricing.domain.models import SaleQuote


def outcome_probability(probability: float, outcome: str) -> float:
    return probability if outcome == Outcome.YES else 1 - probability


def quote_sale(
    shares: int,
    held: int,
    probability: float,
    outcome: str,
    max_dust: int,
) -> SaleQuote:
    """Price selling ``shares`` of ``held`` at the current probability.

    Raises InsufficientSharesError when shares > held and DustCapExceededError
    when max_dust > 0 and |dust| exceeds it.
    """
    if shares > held:
        raise InsufficientSharesError(shares, held)

    p = outcome_probability(probability, outcome)
    sale_value = round_half_away(shares * p)
    position_value = round_half_away(held * p)
    pro_rata = round_half_away(position_value * shares / held)
    dust = sale_value - pro_rata

    check_dust_cap(dust, max_dust)
    return SaleQuote(shares=shares, held=held, sale_value=sale_value, dust=dust)


def check_dust_cap(dust: int, max_dust: int) -> None:
    # max_dust == 0 disables the cap
    if max_dust > 0 and abs(dust) > max_dust:
        raise DustCapExceededError(dust, max_dust)
