"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class Outcome(str, Enum):
    YES = "YES"
    NO = "NO"


class ResolutionResult(str, Enum):
    YES = "YES"
    NO = "NO"
    NA = "N/A"


class MarketStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"


class OutcomeType(str, Enum):
    BINARY = "BINARY"


class UserType(str, Enum):
    REGULAR = "REGULAR"
    ADMIN = "ADMIN"


class LedgerEntryType(str, Enum):
    # Buy path (user side)
    BET_PURCHASE = "BET_PURCHASE"
    BET_FEE = "BET_FEE"
    # Sell path
    SALE_PROCEEDS = "SALE_PROCEEDS"
    SALE_FEE = "SALE_FEE"
    # Market lifecycle
    MARKET_CREATION_FEE = "MARKET_CREATION_FEE"
    RESOLUTION_PAYOUT = "RESOLUTION_PAYOUT"
    RESOLUTION_REFUND = "RESOLUTION_REFUND"


def normalize_outcome(outcome: str) -> str | None:
    """'  yes ' -> 'YES'; anything that is not a binary side -> None."""
    value = outcome.strip().upper()
    if value in (Outcome.YES.value, Outcome.NO.value):
        return value
    return None


def normalize_resolution(result: str) -> str | None:
    """'yes' -> 'YES', 'n/a' -> 'N/A'; anything else -> None."""
    value = result.strip().upper()
    if value in {r.value for r in ResolutionResult}:
        return value
    return None
