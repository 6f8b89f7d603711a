# src/pm_admin/application/service.py
"""Admin application service: market resolution and user provisioning.

Resolution runs in one transaction with the market row locked, so a second
resolve of the same market waits, then sees is_resolved and gets 409; no
payout is ever credited twice.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.economics import EconomicsConfig, get_economics
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_admin.application.schemas import PayoutItem, ResolveResponse
from src.pm_bet.domain.repository import BetRepositoryProtocol
from src.pm_bet.infrastructure.persistence import BetRepository
from src.pm_common.database import transaction
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import LedgerEntryType, ResolutionResult, normalize_resolution
from src.pm_common.errors import (
    InvalidOutcomeError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
)
from src.pm_gateway.user.db_models import UserModel
from src.pm_gateway.user.schemas import CreatedUserResponse, CreateUserRequest
from src.pm_gateway.user.service import UserService
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_pricing.domain.dbpm import calculate_net_positions, resolution_payouts
from src.pm_pricing.domain.wpam import calculate_probabilities

logger = logging.getLogger(__name__)

_REFERENCE_TYPE = "MARKET"


class AdminService:
    def __init__(
        self,
        market_repo: MarketRepositoryProtocol | None = None,
        bet_repo: BetRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        user_service: UserService | None = None,
        economics: EconomicsConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._markets: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._bets: BetRepositoryProtocol = bet_repo or BetRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._users = user_service or UserService()
        self._economics = economics
        self._clock = clock

    @property
    def economics(self) -> EconomicsConfig:
        return self._economics or get_economics()

    async def resolve_market(
        self, db: AsyncSession, market_id: int, outcome: str
    ) -> ResolveResponse:
        result = normalize_resolution(outcome)
        if result is None:
            raise InvalidOutcomeError(outcome, "YES, NO or N/A")
        economics = self.economics
        entry_type = (
            LedgerEntryType.RESOLUTION_REFUND
            if result == ResolutionResult.NA
            else LedgerEntryType.RESOLUTION_PAYOUT
        )

        async with transaction(db):
            market = await self._markets.lock_market(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            if market.is_resolved:
                raise MarketAlreadyResolvedError(market_id)

            records = [b.to_record() for b in await self._bets.list_bets_for_market(db, market_id)]
            seeds = market.seeds(economics)
            trajectory = calculate_probabilities(seeds, market.created_at, records)
            positions = calculate_net_positions(records, trajectory, seeds.initial_subsidization)
            owed = resolution_payouts(records, positions, result)

            payouts: list[PayoutItem] = []
            # Sorted so concurrent writers take user row locks in one order
            for username in sorted(owed):
                amount = owed[username]
                balance = await self._accounts.credit(db, username, amount)
                await self._accounts.add_ledger_entry(
                    db, username, entry_type.value, amount, balance,
                    _REFERENCE_TYPE, str(market_id),
                )
                payouts.append(PayoutItem(username=username, amount=amount))

            resolved_at = self._clock()
            await self._markets.mark_resolved(db, market_id, result, resolved_at)

        total = sum(p.amount for p in payouts)
        logger.info(
            "Market resolved: id=%d result=%s payees=%d total=%d",
            market_id, result, len(payouts), total,
        )
        return ResolveResponse(
            market_id=market_id,
            resolution_result=result,
            final_resolution_at=resolved_at.isoformat(),
            entry_type=entry_type.value,
            payouts=payouts,
            total_paid=total,
        )

    async def add_user(self, db: AsyncSession, req: CreateUserRequest) -> CreatedUserResponse:
        initial_balance = self.economics.user.initial_account_balance
        async with transaction(db):
            user: UserModel = await self._users.create_user(
                db, req.username, req.password, req.user_type.value, initial_balance
            )
        logger.info("User provisioned: user=%s type=%s", user.username, user.user_type)
        return CreatedUserResponse(
            username=user.username,
            user_type=user.user_type,
            account_balance=user.account_balance,
            must_change_password=user.must_change_password,
            created_at=user.created_at.isoformat(),
        )
