"""AccountApplicationService: thin composition layer.

Read-only: balance/credit view and the balance ledger. Balance mutations
happen inside the bet, market and admin services' transactions.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from config.economics import EconomicsConfig, get_economics
from src.pm_account.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.errors import UserNotFoundError


class AccountApplicationService:
    def __init__(
        self,
        repo: AccountRepositoryProtocol | None = None,
        economics: EconomicsConfig | None = None,
    ) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()
        self._economics = economics

    @property
    def economics(self) -> EconomicsConfig:
        return self._economics or get_economics()

    async def get_balance(self, db: AsyncSession, username: str) -> BalanceResponse:
        account = await self._repo.get_account(db, username)
        if account is None:
            raise UserNotFoundError(username)
        return BalanceResponse.from_account(
            account, self.economics.user.maximum_debt_allowed
        )

    async def list_ledger(
        self,
        db: AsyncSession,
        username: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, username, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [LedgerEntryItem.from_domain(e) for e in page]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)
