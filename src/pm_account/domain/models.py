"""Domain models for pm_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserAccount:
    """Balance-bearing view of a users row."""

    username: str
    user_type: str
    account_balance: int             # may be negative, floor is -maximum_debt_allowed
    initial_account_balance: int     # fixed at creation
    must_change_password: bool = False

    def available_credit(self, maximum_debt_allowed: int) -> int:
        return self.account_balance + maximum_debt_allowed


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    username: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # signed, positive=credit negative=debit
    balance_after: int               # account_balance snapshot after op
    reference_type: str | None = None
    reference_id: str | None = None
    created_at: datetime | None = None
