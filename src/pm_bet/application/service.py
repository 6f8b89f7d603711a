"""BetApplicationService: the only mutator of user balance on the trade paths.

Each placement or sale runs in one transaction:

  buy:  market open? -> validate -> lock user -> prior bet? -> fee
        -> credit check -> guarded debit -> append bet -> ledger
  sell: market open? -> validate -> lock user -> DBPM position -> quote
        -> credit check on fee -> credit -> append negative bet -> ledger

The market row is read FOR SHARE, so resolution (which takes it FOR UPDATE)
cannot commit between the open check and the bet insert. The user row lock
(SELECT ... FOR UPDATE) serializes two requests by the same user; the second
sees the first's debit. The prior-bet read happens inside the same
transaction that writes the bet, so the first-bet fee is charged exactly once.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.economics import EconomicsConfig, get_economics
from src.pm_account.domain.models import UserAccount
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_bet.application.schemas import (
    PlaceBetRequest,
    PlaceBetResponse,
    SellSharesRequest,
    SellSharesResponse,
)
from src.pm_bet.domain.models import Bet, SaleResult
from src.pm_bet.domain.policy import BetPolicy
from src.pm_bet.domain.repository import BetRepositoryProtocol
from src.pm_bet.infrastructure.persistence import BetRepository
from src.pm_common.database import transaction
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    MarketClosedError,
    MarketNotFoundError,
    UserNotFoundError,
)
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_pricing.domain.dbpm import calculate_net_positions
from src.pm_pricing.domain.sale import quote_sale
from src.pm_pricing.domain.wpam import calculate_probabilities, current_probability

logger = logging.getLogger(__name__)

_REFERENCE_TYPE = "BET"


class BetApplicationService:
    def __init__(
        self,
        bet_repo: BetRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        market_repo: MarketRepositoryProtocol | None = None,
        economics: EconomicsConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._bets: BetRepositoryProtocol = bet_repo or BetRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._markets: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._economics = economics
        self._clock = clock

    @property
    def economics(self) -> EconomicsConfig:
        return self._economics or get_economics()

    # ------------------------------------------------------------------
    # Buy
    # ------------------------------------------------------------------

    async def place_bet(
        self, db: AsyncSession, username: str, req: PlaceBetRequest
    ) -> PlaceBetResponse:
        policy = BetPolicy(self.economics)
        async with transaction(db):
            bet = await self._place_bet(db, policy, username, req)
        logger.info(
            "Bet placed: user=%s market=%d outcome=%s amount=%d",
            bet.username, bet.market_id, bet.outcome, bet.amount,
        )
        return PlaceBetResponse.from_domain(bet)

    async def _place_bet(
        self, db: AsyncSession, policy: BetPolicy, username: str, req: PlaceBetRequest
    ) -> Bet:
        now = self._clock()
        await self._load_open_market(db, req.market_id, now)

        outcome = policy.validate_outcome(req.outcome)
        policy.validate_amount(req.amount)

        account = await self._lock_account(db, username)
        has_prior = await self._bets.has_prior_bet(db, username, req.market_id)
        fee = policy.fee(has_prior, req.amount)
        try:
            policy.check_credit(account.account_balance, req.amount, fee)
        except InsufficientBalanceError:
            logger.info(
                "Bet rejected, insufficient credit: user=%s balance=%d amount=%d fee=%d",
                username, account.account_balance, req.amount, fee,
            )
            raise

        total = req.amount + fee
        new_balance = await self._accounts.debit(
            db, username, total, policy.maximum_debt_allowed
        )
        if new_balance is None:
            # Row guard disagreed with the locked read; treat as a credit failure
            raise InsufficientBalanceError(total, policy.available_credit(account.account_balance))

        bet = await self._bets.insert_bet(db, username, req.market_id, req.amount, outcome, now)
        reference_id = str(bet.id)
        await self._accounts.add_ledger_entry(
            db, username, LedgerEntryType.BET_PURCHASE.value, -req.amount,
            new_balance + fee, _REFERENCE_TYPE, reference_id,
        )
        if fee > 0:
            await self._accounts.add_ledger_entry(
                db, username, LedgerEntryType.BET_FEE.value, -fee,
                new_balance, _REFERENCE_TYPE, reference_id,
            )
        return bet

    # ------------------------------------------------------------------
    # Sell
    # ------------------------------------------------------------------

    async def sell_shares(
        self, db: AsyncSession, username: str, req: SellSharesRequest
    ) -> SellSharesResponse:
        economics = self.economics
        policy = BetPolicy(economics)
        async with transaction(db):
            sale = await self._sell_shares(db, economics, policy, username, req)
        logger.info(
            "Shares sold: user=%s market=%d outcome=%s shares=%d value=%d dust=%d",
            sale.username, sale.market_id, sale.outcome,
            sale.shares_sold, sale.sale_value, sale.dust,
        )
        return SellSharesResponse.from_domain(sale)

    async def _sell_shares(
        self,
        db: AsyncSession,
        economics: EconomicsConfig,
        policy: BetPolicy,
        username: str,
        req: SellSharesRequest,
    ) -> SaleResult:
        now = self._clock()
        market = await self._load_open_market(db, req.market_id, now)

        outcome = policy.validate_outcome(req.outcome)
        shares = req.amount
        if shares < 1:
            raise InvalidAmountError(shares, 1)

        account = await self._lock_account(db, username)

        bets = await self._bets.list_bets_for_market(db, req.market_id)
        records = [b.to_record() for b in bets]
        seeds = market.seeds(economics)
        trajectory = calculate_probabilities(seeds, market.created_at, records)
        positions = calculate_net_positions(records, trajectory, seeds.initial_subsidization)
        position = next((p for p in positions if p.username == username), None)
        held = 0
        if position is not None:
            held = position.yes_shares if outcome == "YES" else position.no_shares

        quote = quote_sale(
            shares, held, current_probability(trajectory), outcome,
            economics.betting.max_dust_per_sale,
        )
        fee = policy.fee(True, -shares)
        policy.check_sale_credit(account.account_balance, quote.sale_value, fee)

        net = quote.sale_value - fee
        if net >= 0:
            new_balance = await self._accounts.credit(db, username, net)
        else:
            debited = await self._accounts.debit(
                db, username, -net, policy.maximum_debt_allowed
            )
            if debited is None:
                raise InsufficientBalanceError(fee, policy.available_credit(account.account_balance))
            new_balance = debited

        bet = await self._bets.insert_bet(db, username, req.market_id, -shares, outcome, now)
        reference_id = str(bet.id)
        await self._accounts.add_ledger_entry(
            db, username, LedgerEntryType.SALE_PROCEEDS.value, quote.sale_value,
            new_balance + fee, _REFERENCE_TYPE, reference_id,
        )
        if fee > 0:
            await self._accounts.add_ledger_entry(
                db, username, LedgerEntryType.SALE_FEE.value, -fee,
                new_balance, _REFERENCE_TYPE, reference_id,
            )

        return SaleResult(
            username=username,
            market_id=req.market_id,
            shares_sold=shares,
            sale_value=quote.sale_value,
            dust=quote.dust,
            outcome=outcome,
            transaction_at=now,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_open_market(self, db: AsyncSession, market_id: int, now: datetime) -> Market:
        market = await self._markets.share_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if not market.is_open(now):
            raise MarketClosedError(market_id)
        return market

    async def _lock_account(self, db: AsyncSession, username: str) -> UserAccount:
        account = await self._accounts.lock_account(db, username)
        if account is None:
            raise UserNotFoundError(username)
        return account
