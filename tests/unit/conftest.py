"""In-memory stand-ins for the repositories and the AsyncSession.

FakeSession models what the services rely on from PostgreSQL:
  - row locks (SELECT ... FOR UPDATE / FOR SHARE) held until commit/rollback
  - rollback undoes every write made through the session
Repositories yield to the event loop on each call so concurrent requests
actually interleave.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from config.economics import EconomicsConfig
from src.pm_account.domain.models import LedgerEntry, UserAccount
from src.pm_bet.domain.models import Bet
from src.pm_common.errors import MarketNotFoundError, UserNotFoundError
from src.pm_market.domain.models import Market, NewMarket

T0 = datetime(2026, 1, 1, tzinfo=UTC)


class FakeSession:
    def __init__(self, store: "FakeStore") -> None:
        self.store = store
        self.commits = 0
        self.rollbacks = 0
        self._undo: list[Callable[[], None]] = []
        self._locks: list[asyncio.Lock] = []

    def on_rollback(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    async def acquire(self, lock: asyncio.Lock) -> None:
        if lock in self._locks:
            return
        await lock.acquire()
        self._locks.append(lock)

    async def commit(self) -> None:
        self.commits += 1
        self._undo.clear()
        self._release()

    async def rollback(self) -> None:
        self.rollbacks += 1
        for undo in reversed(self._undo):
            undo()
        self._undo.clear()
        self._release()

    def _release(self) -> None:
        for lock in self._locks:
            lock.release()
        self._locks.clear()


class FakeStore:
    def __init__(self) -> None:
        self.accounts: dict[str, UserAccount] = {}
        self.markets: dict[int, Market] = {}
        self.bets: list[Bet] = []
        self.ledger: list[LedgerEntry] = []
        self._user_locks: dict[str, asyncio.Lock] = {}
        self._market_locks: dict[int, asyncio.Lock] = {}
        self._next_bet_id = 1
        self._next_market_id = 1
        self._next_ledger_id = 1

    def session(self) -> FakeSession:
        return FakeSession(self)

    def user_lock(self, username: str) -> asyncio.Lock:
        return self._user_locks.setdefault(username, asyncio.Lock())

    def market_lock(self, market_id: int) -> asyncio.Lock:
        return self._market_locks.setdefault(market_id, asyncio.Lock())

    def add_user(self, username: str, balance: int = 0, user_type: str = "REGULAR") -> None:
        self.accounts[username] = UserAccount(
            username=username,
            user_type=user_type,
            account_balance=balance,
            initial_account_balance=balance,
        )

    def balance(self, username: str) -> int:
        return self.accounts[username].account_balance

    def add_market(
        self,
        created_at: datetime = T0,
        resolves_at: datetime | None = None,
        initial_probability: float = 0.5,
        is_resolved: bool = False,
    ) -> Market:
        market = Market(
            id=self._next_market_id,
            question_title="Will it rain?",
            description="",
            outcome_type="BINARY",
            creator_username="creator",
            resolution_date_time=resolves_at or created_at + timedelta(days=30),
            utc_offset=0,
            yes_label="YES",
            no_label="NO",
            initial_probability=initial_probability,
            is_resolved=is_resolved,
            resolution_result=None,
            final_resolution_at=None,
            created_at=created_at,
        )
        self._next_market_id += 1
        self.markets[market.id] = market
        return market

    def add_bet(
        self, username: str, market_id: int, amount: int, outcome: str, placed_at: datetime
    ) -> Bet:
        bet = Bet(
            id=self._next_bet_id,
            username=username,
            market_id=market_id,
            amount=amount,
            outcome=outcome,
            placed_at=placed_at,
        )
        self._next_bet_id += 1
        self.bets.append(bet)
        return bet

    def ledger_for(self, username: str) -> list[LedgerEntry]:
        return [e for e in self.ledger if e.username == username]


class FakeAccountRepository:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def _snapshot(self, username: str) -> UserAccount | None:
        account = self._store.accounts.get(username)
        if account is None:
            return None
        return UserAccount(
            username=account.username,
            user_type=account.user_type,
            account_balance=account.account_balance,
            initial_account_balance=account.initial_account_balance,
            must_change_password=account.must_change_password,
        )

    def _apply(self, db: FakeSession, username: str, delta: int) -> int:
        account = self._store.accounts[username]
        account.account_balance += delta
        db.on_rollback(lambda: setattr(account, "account_balance", account.account_balance - delta))
        return account.account_balance

    async def get_account(self, db: FakeSession, username: str) -> UserAccount | None:
        await asyncio.sleep(0)
        return self._snapshot(username)

    async def lock_account(self, db: FakeSession, username: str) -> UserAccount | None:
        await asyncio.sleep(0)
        if username not in self._store.accounts:
            return None
        await db.acquire(self._store.user_lock(username))
        return self._snapshot(username)

    async def debit(
        self, db: FakeSession, username: str, amount: int, maximum_debt_allowed: int
    ) -> int | None:
        await asyncio.sleep(0)
        account = self._store.accounts.get(username)
        if account is None or account.account_balance - amount < -maximum_debt_allowed:
            return None
        return self._apply(db, username, -amount)

    async def credit(self, db: FakeSession, username: str, amount: int) -> int:
        await asyncio.sleep(0)
        if username not in self._store.accounts:
            raise UserNotFoundError(username)
        return self._apply(db, username, amount)

    async def add_ledger_entry(
        self,
        db: FakeSession,
        username: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        reference_type: str | None,
        reference_id: str | None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            id=self._store._next_ledger_id,
            username=username,
            entry_type=entry_type,
            amount=amount,
            balance_after=balance_after,
            reference_type=reference_type,
            reference_id=reference_id,
            created_at=T0,
        )
        self._store._next_ledger_id += 1
        self._store.ledger.append(entry)
        db.on_rollback(lambda: self._store.ledger.remove(entry))
        return entry

    async def list_ledger_entries(
        self,
        db: FakeSession,
        username: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        entries = [
            e for e in reversed(self._store.ledger)
            if e.username == username
            and (cursor_id is None or e.id < cursor_id)
            and (entry_type is None or e.entry_type == entry_type)
        ]
        return entries[:limit]


class FakeBetRepository:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def has_prior_bet(self, db: FakeSession, username: str, market_id: int) -> bool:
        await asyncio.sleep(0)
        return any(
            b.username == username and b.market_id == market_id for b in self._store.bets
        )

    async def insert_bet(
        self,
        db: FakeSession,
        username: str,
        market_id: int,
        amount: int,
        outcome: str,
        placed_at: datetime,
    ) -> Bet:
        await asyncio.sleep(0)
        bet = self._store.add_bet(username, market_id, amount, outcome, placed_at)
        db.on_rollback(lambda: self._store.bets.remove(bet))
        return bet

    async def list_bets_for_market(self, db: FakeSession, market_id: int) -> list[Bet]:
        await asyncio.sleep(0)
        bets = [b for b in self._store.bets if b.market_id == market_id]
        return sorted(bets, key=lambda b: (b.placed_at, b.id))


class FakeMarketRepository:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def get_market_by_id(self, db: FakeSession, market_id: int) -> Market | None:
        await asyncio.sleep(0)
        return self._store.markets.get(market_id)

    async def share_market(self, db: FakeSession, market_id: int) -> Market | None:
        # FOR SHARE modelled as exclusive: bets on one market serialize here
        return await self.lock_market(db, market_id)

    async def lock_market(self, db: FakeSession, market_id: int) -> Market | None:
        await asyncio.sleep(0)
        if market_id not in self._store.markets:
            return None
        await db.acquire(self._store.market_lock(market_id))
        return self._store.markets[market_id]

    async def create_market(self, db: FakeSession, market: NewMarket) -> Market:
        created = self._store.add_market(
            created_at=market.created_at,
            resolves_at=market.resolution_date_time,
            initial_probability=market.initial_probability,
        )
        created.question_title = market.question_title
        created.description = market.description
        created.creator_username = market.creator_username
        created.utc_offset = market.utc_offset
        created.yes_label = market.yes_label
        created.no_label = market.no_label
        db.on_rollback(lambda: self._store.markets.pop(created.id))
        return created

    async def mark_resolved(
        self, db: FakeSession, market_id: int, result: str, resolved_at: datetime
    ) -> Market:
        market = self._store.markets.get(market_id)
        if market is None or market.is_resolved:
            raise MarketNotFoundError(market_id)
        market.is_resolved = True
        market.resolution_result = result
        market.final_resolution_at = resolved_at

        def _undo() -> None:
            market.is_resolved = False
            market.resolution_result = None
            market.final_resolution_at = None

        db.on_rollback(_undo)
        return market

    async def list_markets(
        self, db: FakeSession, status: str | None, cursor_id: int | None, limit: int,
        title_query: str | None = None,
    ) -> list[Market]:
        markets = [
            m for m in sorted(self._store.markets.values(), key=lambda m: m.id, reverse=True)
            if (status is None or m.status == status)
            and (cursor_id is None or m.id < cursor_id)
            and (title_query is None or title_query.lower() in m.question_title.lower())
        ]
        return markets[:limit]


class Clock:
    """Settable clock injected into services."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def clock() -> Clock:
    return Clock(T0 + timedelta(hours=1))


@pytest.fixture
def economics() -> EconomicsConfig:
    """Platform defaults with a 1000 starting balance, as in the scenarios."""
    return EconomicsConfig.model_validate({"User": {"initialAccountBalance": 1000}})


@pytest.fixture
def account_repo(store: FakeStore) -> FakeAccountRepository:
    return FakeAccountRepository(store)


@pytest.fixture
def bet_repo(store: FakeStore) -> FakeBetRepository:
    return FakeBetRepository(store)


@pytest.fixture
def market_repo(store: FakeStore) -> FakeMarketRepository:
    return FakeMarketRepository(store)
