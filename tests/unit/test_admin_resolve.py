"""AdminService.resolve_market / add_user."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from config.economics import EconomicsConfig
from src.pm_admin.application.service import AdminService
from src.pm_common.errors import (
    InvalidOutcomeError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
)
from src.pm_gateway.user.db_models import UserModel
from src.pm_gateway.user.schemas import CreateUserRequest


@pytest.fixture
def service(market_repo, bet_repo, account_repo, economics, clock) -> AdminService:
    return AdminService(
        market_repo=market_repo,
        bet_repo=bet_repo,
        account_repo=account_repo,
        economics=economics,
        clock=clock,
    )


def _seed_market(store, clock):
    """alice: YES 3 then NO 1 (net 2 YES); bob: NO 5."""
    store.add_user("alice", 100)
    store.add_user("bob", 100)
    market = store.add_market()
    store.add_bet("alice", market.id, 3, "YES", clock.now)
    store.add_bet("alice", market.id, 1, "NO", clock.now + timedelta(minutes=1))
    store.add_bet("bob", market.id, 5, "NO", clock.now + timedelta(minutes=2))
    return market


class TestResolveMarket:
    async def test_na_refunds_every_bet(self, service, store, clock) -> None:
        market = _seed_market(store, clock)

        result = await service.resolve_market(store.session(), market.id, "n/a")

        assert result.resolution_result == "N/A"
        assert result.entry_type == "RESOLUTION_REFUND"
        assert {p.username: p.amount for p in result.payouts} == {"alice": 4, "bob": 5}
        assert store.balance("alice") == 104
        assert store.balance("bob") == 105
        assert store.markets[market.id].is_resolved is True
        assert store.markets[market.id].final_resolution_at == clock.now

    async def test_winning_side_paid_shares(self, service, store, clock) -> None:
        market = _seed_market(store, clock)

        result = await service.resolve_market(store.session(), market.id, "NO")

        paid = {p.username: p.amount for p in result.payouts}
        assert "alice" not in paid  # alice nets YES
        assert paid["bob"] > 0
        assert store.balance("bob") == 100 + paid["bob"]
        assert result.total_paid == sum(paid.values())
        [entry] = store.ledger_for("bob")
        assert entry.entry_type == "RESOLUTION_PAYOUT"
        assert entry.reference_id == str(market.id)

    async def test_payouts_never_exceed_pool(self, service, store, clock) -> None:
        market = _seed_market(store, clock)

        yes = await service.resolve_market(store.session(), market.id, "YES")

        # volume 9 plus subsidy 10 bounds what DBPM can distribute
        assert yes.total_paid <= 9 + 10

    async def test_second_resolution_is_rejected_and_changes_nothing(
        self, service, store, clock
    ) -> None:
        market = _seed_market(store, clock)
        await service.resolve_market(store.session(), market.id, "YES")
        balances = {u: store.balance(u) for u in ("alice", "bob")}
        ledger_size = len(store.ledger)

        with pytest.raises(MarketAlreadyResolvedError) as exc_info:
            await service.resolve_market(store.session(), market.id, "YES")

        assert exc_info.value.http_status == 409
        assert {u: store.balance(u) for u in ("alice", "bob")} == balances
        assert len(store.ledger) == ledger_size

    async def test_concurrent_resolutions_pay_once(self, service, store, clock) -> None:
        market = _seed_market(store, clock)

        results = await asyncio.gather(
            service.resolve_market(store.session(), market.id, "N/A"),
            service.resolve_market(store.session(), market.id, "N/A"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, MarketAlreadyResolvedError) for r in results) == 1
        assert store.balance("alice") == 104
        assert store.balance("bob") == 105

    async def test_invalid_outcome(self, service, store, clock) -> None:
        market = _seed_market(store, clock)

        with pytest.raises(InvalidOutcomeError):
            await service.resolve_market(store.session(), market.id, "MAYBE")
        assert store.markets[market.id].is_resolved is False

    async def test_unknown_market(self, service, store) -> None:
        with pytest.raises(MarketNotFoundError):
            await service.resolve_market(store.session(), 404, "YES")

    async def test_market_without_bets(self, service, store) -> None:
        market = store.add_market()

        result = await service.resolve_market(store.session(), market.id, "YES")

        assert result.payouts == []
        assert result.total_paid == 0
        assert store.markets[market.id].resolution_result == "YES"

    async def test_trader_bonus_is_not_paid(
        self, store, market_repo, bet_repo, account_repo, clock
    ) -> None:
        generous = EconomicsConfig.model_validate({"MarketIncentives": {"traderBonus": 50}})
        service = AdminService(
            market_repo=market_repo,
            bet_repo=bet_repo,
            account_repo=account_repo,
            economics=generous,
            clock=clock,
        )
        market = _seed_market(store, clock)

        result = await service.resolve_market(store.session(), market.id, "N/A")

        assert {p.username: p.amount for p in result.payouts} == {"alice": 4, "bob": 5}
        assert store.balance("alice") == 104


class TestAddUser:
    async def test_new_user_gets_initial_balance_and_must_change_password(
        self, store, economics, clock
    ) -> None:
        created = UserModel(
            username="newbie",
            password_hash="$2b$12$fakehash",
            user_type="REGULAR",
            account_balance=1000,
            initial_account_balance=1000,
            must_change_password=True,
        )
        created.created_at = clock.now
        users = AsyncMock()
        users.create_user.return_value = created
        svc = AdminService(user_service=users, economics=economics, clock=clock)
        session = store.session()

        result = await svc.add_user(
            session,
            CreateUserRequest.model_validate({"username": "newbie", "password": "Passw0rdX"}),
        )

        users.create_user.assert_awaited_once_with(session, "newbie", "Passw0rdX", "REGULAR", 1000)
        assert result.account_balance == 1000
        assert result.must_change_password is True
        assert session.commits == 1
