"""Pydantic schemas and cursor utilities for pm_account API."""

import base64
import json

from src.pm_account.domain.models import LedgerEntry, UserAccount
from src.pm_common.schemas import CamelModel

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(CamelModel):
    username: str
    account_balance: int
    initial_account_balance: int
    maximum_debt_allowed: int
    available_credit: int

    @classmethod
    def from_account(cls, account: UserAccount, maximum_debt_allowed: int) -> "BalanceResponse":
        return cls(
            username=account.username,
            account_balance=account.account_balance,
            initial_account_balance=account.initial_account_balance,
            maximum_debt_allowed=maximum_debt_allowed,
            available_credit=account.available_credit(maximum_debt_allowed),
        )


class LedgerEntryItem(CamelModel):
    id: int
    entry_type: str
    amount: int
    balance_after: int
    reference_type: str | None
    reference_id: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            entry_type=e.entry_type,
            amount=e.amount,
            balance_after=e.balance_after,
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            created_at=e.created_at.isoformat() if e.created_at else "",
        )


class LedgerResponse(CamelModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
