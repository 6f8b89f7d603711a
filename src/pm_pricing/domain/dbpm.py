"""DBPM: Distributed Bet Payout Mechanism.

Turns a market's bet history plus its WPAM trajectory into integer share
positions. Pipeline (each step is a separate pure function so it can be
tested on its own):

  0. divide_market_pool       S = V + I₀ split by final probability R
  1. course_payouts           C_k = |R − P_{k−1}| · amount_k
  2. normalization_factors    F_side = S_side / ΣC_side (0 when ΣC_side ≤ 0)
  3. scaled_payouts           round_half_away(C_k · F_side)
  4. adjust_payouts           trim newest-first / pad oldest-first until Σ = V
  5. aggregate_user_payouts   per-user (yes, no), negatives clamped to 0
  6. net_positions            offset opposing shares, at most one side > 0

``trajectory[k]`` is the probability in force *before* bet k, so
``len(trajectory) == len(bets) + 1``.
"""

import math
from collections.abc import Sequence

from src.pm_common.enums import Outcome, ResolutionResult
from src.pm_pricing.domain.models import (
    BetRecord,
    CoursePayout,
    MarketPosition,
    ProbabilityChange,
)


def round_half_away(value: float) -> int:
    """Round to nearest int, ties away from zero; -0.0 comes back as 0.

    Python's round() is banker's rounding (round(2.5) == 2), which would
    shift share counts on exact halves.
    """
    truncated = math.trunc(value)
    if abs(value - truncated) >= 0.5:
        truncated += 1 if value > 0 else -1
    return int(truncated) or 0


def market_volume(bets: Sequence[BetRecord]) -> int:
    """Signed sum of bet amounts (sales subtract)."""
    return sum(bet.amount for bet in bets)


def single_share_direction(bets: Sequence[BetRecord]) -> str | None:
    net = 0
    for bet in bets:
        if bet.outcome == Outcome.YES:
            net += bet.amount
        elif bet.outcome == Outcome.NO:
            net -= bet.amount
    if net > 0:
        return Outcome.YES.value
    if net < 0:
        return Outcome.NO.value
    return None


def divide_market_pool(
    bets: Sequence[BetRecord],
    trajectory: Sequence[ProbabilityChange],
    initial_subsidization: int,
) -> tuple[int, int]:
    """(S_YES, S_NO). A market whose volume is exactly one share gives it to the net side."""
    if not trajectory:
        return 0, 0

    volume = market_volume(bets)
    if volume == 1:
        direction = single_share_direction(bets)
        if direction == Outcome.YES:
            return 1, 0
        if direction == Outcome.NO:
            return 0, 1
        return 0, 0

    r = trajectory[-1].probability
    pool = float(volume + initial_subsidization)
    return round_half_away(pool * r), round_half_away(pool * (1 - r))


def course_payouts(
    bets: Sequence[BetRecord],
    trajectory: Sequence[ProbabilityChange],
) -> list[CoursePayout]:
    if not trajectory:
        return []
    r = trajectory[-1].probability
    return [
        CoursePayout(
            payout=abs(r - trajectory[i].probability) * float(bet.amount),
            outcome=bet.outcome,
        )
        for i, bet in enumerate(bets)
    ]


def normalization_factors(
    s_yes: int, s_no: int, payouts: Sequence[CoursePayout]
) -> tuple[float, float]:
    c_yes = 0.0
    c_no = 0.0
    for p in payouts:
        if p.outcome == Outcome.YES:
            c_yes += p.payout
        elif p.outcome == Outcome.NO:
            c_no += p.payout

    f_yes = s_yes / c_yes if c_yes > 0 else 0.0
    f_no = s_no / c_no if c_no > 0 else 0.0
    return abs(f_yes), abs(f_no)


def scaled_payouts(
    payouts: Sequence[CoursePayout], f_yes: float, f_no: float
) -> list[int]:
    scaled: list[int] = []
    for p in payouts:
        if p.outcome == Outcome.YES:
            scaled.append(round_half_away(p.payout * f_yes))
        elif p.outcome == Outcome.NO:
            scaled.append(round_half_away(p.payout * f_no))
        else:
            scaled.append(0)
    return scaled


def adjust_payouts(bets: Sequence[BetRecord], scaled: Sequence[int]) -> list[int]:
    """Force Σpayouts == market volume.

    Excess is removed one unit at a time from positive entries, newest bet
    first; a shortfall is added one unit at a time, oldest bet first.
    """
    adjusted = list(scaled)
    excess = sum(adjusted) - market_volume(bets)

    while excess > 0:
        trimmed = False
        for i in range(len(adjusted) - 1, -1, -1):
            if adjusted[i] > 0:
                adjusted[i] -= 1
                excess -= 1
                trimmed = True
                if excess == 0:
                    break
        if not trimmed:
            break

    while excess < 0 and adjusted:
        for i in range(len(adjusted)):
            adjusted[i] += 1
            excess += 1
            if excess == 0:
                break

    return adjusted


def aggregate_user_payouts(
    bets: Sequence[BetRecord], final_payouts: Sequence[int]
) -> list[MarketPosition]:
    """Per-user (yes, no) totals in first-bet order, negatives clamped to 0."""
    totals: dict[str, list[int]] = {}
    for bet, payout in zip(bets, final_payouts):
        entry = totals.setdefault(bet.username, [0, 0])
        if bet.outcome == Outcome.YES:
            entry[0] += payout
        elif bet.outcome == Outcome.NO:
            entry[1] += payout

    return [
        MarketPosition(username=username, yes_shares=max(yes, 0), no_shares=max(no, 0))
        for username, (yes, no) in totals.items()
    ]


def net_positions(positions: Sequence[MarketPosition]) -> list[MarketPosition]:
    netted: list[MarketPosition] = []
    for pos in positions:
        if pos.yes_shares > pos.no_shares:
            netted.append(MarketPosition(pos.username, pos.yes_shares - pos.no_shares, 0))
        else:
            netted.append(MarketPosition(pos.username, 0, pos.no_shares - pos.yes_shares))
    return netted


def calculate_net_positions(
    bets: Sequence[BetRecord],
    trajectory: Sequence[ProbabilityChange],
    initial_subsidization: int,
) -> list[MarketPosition]:
    """Steps 0–6 end to end."""
    s_yes, s_no = divide_market_pool(bets, trajectory, initial_subsidization)
    payouts = course_payouts(bets, trajectory)
    f_yes, f_no = normalization_factors(s_yes, s_no, payouts)
    scaled = scaled_payouts(payouts, f_yes, f_no)
    final = adjust_payouts(bets, scaled)
    return net_positions(aggregate_user_payouts(bets, final))


def resolution_payouts(
    bets: Sequence[BetRecord],
    positions: Sequence[MarketPosition],
    result: str,
) -> dict[str, int]:
    """Currency owed to each user when the market resolves to ``result``.

    YES/NO pay the winning side's net shares one-for-one. N/A refunds the
    absolute amount of every bet to its bettor. Users owed nothing are omitted.
    """
    owed: dict[str, int] = {}
    if result == ResolutionResult.NA:
        for bet in bets:
            owed[bet.username] = owed.get(bet.username, 0) + abs(bet.amount)
    else:
        for pos in positions:
            shares = pos.yes_shares if result == ResolutionResult.YES else pos.no_shares
            if shares > 0:
                owed[pos.username] = owed.get(pos.username, 0) + shares
    return {username: amount for username, amount in owed.items() if amount > 0}
