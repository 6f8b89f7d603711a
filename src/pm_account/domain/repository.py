"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import LedgerEntry, UserAccount


class AccountRepositoryProtocol(Protocol):
    async def get_account(
        self, db: AsyncSession, username: str
    ) -> UserAccount | None: ...

    async def lock_account(
        self, db: AsyncSession, username: str
    ) -> UserAccount | None: ...

    async def debit(
        self, db: AsyncSession, username: str, amount: int, maximum_debt_allowed: int
    ) -> int | None: ...

    async def credit(
        self, db: AsyncSession, username: str, amount: int
    ) -> int: ...

    async def add_ledger_entry(
        self,
        db: AsyncSession,
        username: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        reference_type: str | None,
        reference_id: str | None,
    ) -> LedgerEntry: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        username: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
