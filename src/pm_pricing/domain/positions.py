"""Market positions with valuation: the read side of DBPM."""

from collections.abc import Sequence
from datetime import datetime

from src.pm_common.enums import ResolutionResult
from src.pm_pricing.domain.dbpm import calculate_net_positions, round_half_away
from src.pm_pricing.domain.models import BetRecord, MarketPosition, PositionSummary, WpamSeeds
from src.pm_pricing.domain.wpam import calculate_probabilities, current_probability


def sort_bets(bets: Sequence[BetRecord]) -> list[BetRecord]:
    return sorted(bets, key=lambda b: (b.placed_at, b.id))


def position_value(
    position: MarketPosition,
    probability: float,
    resolution_result: str | None = None,
) -> int:
    """Current worth of a net position in currency units.

    Once resolved the winning side is worth one unit per share and the losing
    side (or anything under N/A) nothing.
    """
    if resolution_result is not None:
        if resolution_result == ResolutionResult.YES:
            return position.yes_shares
        if resolution_result == ResolutionResult.NO:
            return position.no_shares
        return 0
    if position.yes_shares > 0:
        return round_half_away(position.yes_shares * probability)
    if position.no_shares > 0:
        return round_half_away(position.no_shares * (1 - probability))
    return 0


def calculate_market_positions(
    market_id: int,
    created_at: datetime,
    seeds: WpamSeeds,
    bets: Sequence[BetRecord],
    resolution_result: str | None = None,
) -> list[PositionSummary]:
    ordered = sort_bets(bets)
    trajectory = calculate_probabilities(seeds, created_at, ordered)
    probability = current_probability(trajectory)
    netted = calculate_net_positions(ordered, trajectory, seeds.initial_subsidization)

    is_resolved = resolution_result is not None
    spent: dict[str, int] = {}
    for bet in ordered:
        spent[bet.username] = spent.get(bet.username, 0) + bet.amount

    return [
        PositionSummary(
            username=pos.username,
            market_id=market_id,
            yes_shares=pos.yes_shares,
            no_shares=pos.no_shares,
            value=position_value(pos, probability, resolution_result),
            total_spent=spent.get(pos.username, 0),
            total_spent_in_play=0 if is_resolved else spent.get(pos.username, 0),
            is_resolved=is_resolved,
            resolution_result=resolution_result,
        )
        for pos in netted
    ]


def find_user_position(
    summaries: Sequence[PositionSummary], market_id: int, username: str
) -> PositionSummary:
    """The user's summary, or an all-zero one if they never bet here."""
    for summary in summaries:
        if summary.username == username:
            return summary
    resolution = summaries[0].resolution_result if summaries else None
    return PositionSummary(
        username=username,
        market_id=market_id,
        yes_shares=0,
        no_shares=0,
        value=0,
        total_spent=0,
        total_spent_in_play=0,
        is_resolved=resolution is not None,
        resolution_result=resolution,
    )
