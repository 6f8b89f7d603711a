"""Unit tests for AccountApplicationService using a mock repository."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.economics import EconomicsConfig
from src.pm_account.application.schemas import (
    BalanceResponse,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_account.application.service import AccountApplicationService
from src.pm_account.domain.models import LedgerEntry, UserAccount
from src.pm_common.errors import UserNotFoundError

_ECONOMICS = EconomicsConfig.model_validate({"User": {"maximumDebtAllowed": 500}})


def _make_account(balance: int = 1000) -> UserAccount:
    return UserAccount(
        username="alice",
        user_type="REGULAR",
        account_balance=balance,
        initial_account_balance=1000,
    )


def _make_ledger_entry(
    entry_id: int = 1,
    amount: int = -100,
    balance_after: int = 900,
    entry_type: str = "BET_PURCHASE",
) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        username="alice",
        entry_type=entry_type,
        amount=amount,
        balance_after=balance_after,
        reference_type="BET",
        reference_id="1",
        created_at=datetime.now(UTC),
    )


class TestGetBalance:
    async def test_returns_balance_and_available_credit(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_account.return_value = _make_account(899)
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)
        db = MagicMock()

        result = await svc.get_balance(db, "alice")

        assert isinstance(result, BalanceResponse)
        assert result.account_balance == 899
        assert result.maximum_debt_allowed == 500
        assert result.available_credit == 1399

    async def test_negative_balance(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_account.return_value = _make_account(-500)
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)

        result = await svc.get_balance(MagicMock(), "alice")

        assert result.available_credit == 0

    async def test_serializes_camel_case(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_account.return_value = _make_account()
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)

        data = (await svc.get_balance(MagicMock(), "alice")).model_dump(by_alias=True)

        assert data["accountBalance"] == 1000
        assert data["availableCredit"] == 1500

    async def test_unknown_user(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_account.return_value = None
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)

        with pytest.raises(UserNotFoundError):
            await svc.get_balance(MagicMock(), "ghost")


class TestListLedger:
    async def test_returns_empty_ledger(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.list_ledger_entries.return_value = []
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)
        db = MagicMock()

        result = await svc.list_ledger(db, "alice", cursor=None, limit=20, entry_type=None)

        assert isinstance(result, LedgerResponse)
        assert result.items == []
        assert result.has_more is False
        assert result.next_cursor is None

    async def test_returns_items_no_more(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.list_ledger_entries.return_value = [_make_ledger_entry(5)]
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)

        result = await svc.list_ledger(MagicMock(), "alice", cursor=None, limit=20, entry_type=None)

        assert len(result.items) == 1
        assert result.items[0].id == 5
        assert result.items[0].entry_type == "BET_PURCHASE"
        assert result.has_more is False

    async def test_returns_next_cursor_when_full_page(self) -> None:
        mock_repo = AsyncMock()
        # Service fetches limit+1, so return 21 items to trigger has_more=True with limit=20
        entries = [_make_ledger_entry(i) for i in range(21, 0, -1)]
        mock_repo.list_ledger_entries.return_value = entries
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)

        result = await svc.list_ledger(MagicMock(), "alice", cursor=None, limit=20, entry_type=None)

        assert result.has_more is True
        assert len(result.items) == 20
        assert cursor_decode(result.next_cursor) == 2

    async def test_passes_cursor_and_filter_to_repo(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.list_ledger_entries.return_value = []
        svc = AccountApplicationService(repo=mock_repo, economics=_ECONOMICS)
        db = MagicMock()

        await svc.list_ledger(db, "alice", cursor=cursor_encode(40), limit=10, entry_type="BET_FEE")

        mock_repo.list_ledger_entries.assert_awaited_once_with(db, "alice", 40, 11, "BET_FEE")
