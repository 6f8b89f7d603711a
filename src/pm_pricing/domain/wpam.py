"""WPAM: Weighted Probability Average Market.

    P_k = (P₀·I₀ + totalYes_k) / (I₀ + totalYes_k + totalNo_k)

The accumulators start at the seeds' Y₀/N₀ and move by each bet's signed
amount, so sales pull the probability back. Bets must already be in
placement order (placed_at, id).
"""

from collections.abc import Sequence
from datetime import datetime

from src.pm_common.enums import Outcome
from src.pm_common.errors import DegenerateMarketError
from src.pm_pricing.domain.models import BetRecord, ProbabilityChange, WpamSeeds


def calculate_probabilities(
    seeds: WpamSeeds,
    created_at: datetime,
    bets: Sequence[BetRecord],
) -> list[ProbabilityChange]:
    """Trajectory of length len(bets) + 1, starting at (P₀, created_at)."""
    p0 = seeds.initial_probability
    i0 = seeds.initial_subsidization
    total_yes = seeds.initial_yes
    total_no = seeds.initial_no

    changes = [ProbabilityChange(probability=p0, timestamp=created_at)]
    for bet in bets:
        if bet.outcome == Outcome.YES:
            total_yes += bet.amount
        elif bet.outcome == Outcome.NO:
            total_no += bet.amount

        denominator = i0 + total_yes + total_no
        if denominator <= 0:
            raise DegenerateMarketError(
                f"pool I0+yes+no={denominator} after bet at {bet.placed_at.isoformat()}"
            )
        probability = (p0 * float(i0) + float(total_yes)) / float(denominator)
        changes.append(ProbabilityChange(probability=probability, timestamp=bet.placed_at))

    return changes


def current_probability(changes: Sequence[ProbabilityChange]) -> float:
    if not changes:
        raise DegenerateMarketError("empty probability trajectory")
    return changes[-1].probability


def project_probability(
    seeds: WpamSeeds,
    created_at: datetime,
    bets: Sequence[BetRecord],
    new_bet: BetRecord,
) -> float:
    """Probability the market would show if ``new_bet`` were appended."""
    return current_probability(calculate_probabilities(seeds, created_at, [*bets, new_bet]))
