"""MarketApplicationService: market creation and the read views.

Creation is the only mutation here and runs in one transaction:
validate -> lock creator -> credit check -> debit cost -> insert -> ledger.
Read views replay the market's bet history through WPAM/DBPM on each call;
nothing derived is stored.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.economics import EconomicsConfig, get_economics
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_bet.domain.models import Bet
from src.pm_bet.domain.policy import BetPolicy
from src.pm_bet.domain.repository import BetRepositoryProtocol
from src.pm_bet.infrastructure.persistence import BetRepository
from src.pm_common.database import transaction
from src.pm_common.datetime_utils import ensure_utc, utc_now
from src.pm_common.enums import LedgerEntryType, MarketStatus
from src.pm_common.errors import (
    InsufficientBalanceError,
    InvalidMarketInputError,
    MarketNotFoundError,
    UserNotFoundError,
)
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    MarketBetItem,
    MarketBetsResponse,
    MarketDetailResponse,
    MarketListResponse,
    MarketOut,
    MarketPositionsResponse,
    PositionOut,
    ProbabilityPoint,
    ProjectionResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_market.domain.models import Market, NewMarket
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.domain.validation import (
    normalize_labels,
    validate_description,
    validate_question_title,
    validate_resolution_time,
)
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_pricing.domain.dbpm import market_volume
from src.pm_pricing.domain.models import BetRecord
from src.pm_pricing.domain.positions import calculate_market_positions, find_user_position
from src.pm_pricing.domain.wpam import (
    calculate_probabilities,
    current_probability,
    project_probability,
)

logger = logging.getLogger(__name__)

_REFERENCE_TYPE = "MARKET"
_LIST_STATUSES = {MarketStatus.ACTIVE.value, MarketStatus.RESOLVED.value}
_MAX_TITLE_QUERY_LENGTH = 100


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        bet_repo: BetRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        economics: EconomicsConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._bets: BetRepositoryProtocol = bet_repo or BetRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._economics = economics
        self._clock = clock

    @property
    def economics(self) -> EconomicsConfig:
        return self._economics or get_economics()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_market(
        self, db: AsyncSession, username: str, req: CreateMarketRequest
    ) -> MarketOut:
        economics = self.economics
        now = self._clock()

        title = validate_question_title(req.question_title)
        description = validate_description(req.description)
        yes_label, no_label = normalize_labels(req.yes_label, req.no_label)
        resolution_at = validate_resolution_time(
            ensure_utc(req.resolution_date_time),
            now,
            economics.market_creation.minimum_future_hours,
        )

        policy = BetPolicy(economics)
        cost = economics.market_incentives.create_market_cost
        async with transaction(db):
            account = await self._accounts.lock_account(db, username)
            if account is None:
                raise UserNotFoundError(username)
            try:
                policy.check_credit(account.account_balance, cost, 0)
            except InsufficientBalanceError:
                logger.info(
                    "Market creation rejected, insufficient credit: user=%s balance=%d cost=%d",
                    username, account.account_balance, cost,
                )
                raise

            new_balance = account.account_balance
            if cost > 0:
                debited = await self._accounts.debit(
                    db, username, cost, policy.maximum_debt_allowed
                )
                if debited is None:
                    raise InsufficientBalanceError(
                        cost, policy.available_credit(account.account_balance)
                    )
                new_balance = debited

            market = await self._repo.create_market(
                db,
                NewMarket(
                    question_title=title,
                    description=description,
                    creator_username=username,
                    resolution_date_time=resolution_at,
                    utc_offset=req.utc_offset,
                    yes_label=yes_label,
                    no_label=no_label,
                    initial_probability=economics.market_creation.initial_market_probability,
                    created_at=now,
                ),
            )
            if cost > 0:
                await self._accounts.add_ledger_entry(
                    db, username, LedgerEntryType.MARKET_CREATION_FEE.value, -cost,
                    new_balance, _REFERENCE_TYPE, str(market.id),
                )

        logger.info(
            "Market created: id=%d creator=%s resolves=%s",
            market.id, username, market.resolution_date_time.isoformat(),
        )
        return MarketOut.from_domain(market)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor: str | None,
        limit: int,
        query: str | None = None,
    ) -> MarketListResponse:
        # status=None -> default active; status='all' -> no filter
        normalized = (status or MarketStatus.ACTIVE.value).lower()
        if normalized == "all":
            sql_status = None
        elif normalized in _LIST_STATUSES:
            sql_status = normalized
        else:
            raise InvalidMarketInputError(f"unknown status filter {status!r}")
        title_query = (query or "").strip() or None
        if title_query is not None and len(title_query) > _MAX_TITLE_QUERY_LENGTH:
            raise InvalidMarketInputError(
                f"search query longer than {_MAX_TITLE_QUERY_LENGTH} characters"
            )
        cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        markets = await self._repo.list_markets(
            db, sql_status, cursor_id, limit + 1, title_query
        )
        has_more = len(markets) > limit
        page = markets[:limit]

        items = [MarketOut.from_domain(m) for m in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return MarketListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def get_market(self, db: AsyncSession, market_id: int) -> MarketDetailResponse:
        market, bets = await self._load(db, market_id)
        trajectory = calculate_probabilities(
            market.seeds(self.economics), market.created_at, _records(bets)
        )
        return MarketDetailResponse(
            market=MarketOut.from_domain(market),
            probability_changes=[ProbabilityPoint.from_domain(c) for c in trajectory],
            current_probability=current_probability(trajectory),
            total_volume=market_volume(_records(bets)),
            num_users=len({b.username for b in bets}),
        )

    async def list_market_bets(self, db: AsyncSession, market_id: int) -> MarketBetsResponse:
        market, bets = await self._load(db, market_id)
        trajectory = calculate_probabilities(
            market.seeds(self.economics), market.created_at, _records(bets)
        )
        # trajectory[0] is the seed point; trajectory[k + 1] follows bets[k]
        items = [
            MarketBetItem.from_domain(bet, trajectory[k + 1].probability)
            for k, bet in enumerate(bets)
        ]
        return MarketBetsResponse(market_id=market.id, items=items)

    async def project(
        self, db: AsyncSession, market_id: int, amount: int, outcome: str
    ) -> ProjectionResponse:
        economics = self.economics
        market, bets = await self._load(db, market_id)
        policy = BetPolicy(economics)
        canonical = policy.validate_outcome(outcome)
        policy.validate_amount(amount)

        seeds = market.seeds(economics)
        records = _records(bets)
        trajectory = calculate_probabilities(seeds, market.created_at, records)
        hypothetical = BetRecord(
            username="", outcome=canonical, amount=amount, placed_at=self._clock()
        )
        projected = project_probability(seeds, market.created_at, records, hypothetical)
        return ProjectionResponse(
            market_id=market.id,
            amount=amount,
            outcome=canonical,
            current_probability=current_probability(trajectory),
            projected_probability=projected,
        )

    async def list_positions(
        self, db: AsyncSession, market_id: int
    ) -> MarketPositionsResponse:
        market, bets = await self._load(db, market_id)
        summaries = calculate_market_positions(
            market.id, market.created_at, market.seeds(self.economics),
            _records(bets), market.resolution_result,
        )
        return MarketPositionsResponse(
            market_id=market.id,
            items=[PositionOut.from_domain(s) for s in summaries],
        )

    async def get_user_position(
        self, db: AsyncSession, market_id: int, username: str
    ) -> PositionOut:
        market, bets = await self._load(db, market_id)
        summaries = calculate_market_positions(
            market.id, market.created_at, market.seeds(self.economics),
            _records(bets), market.resolution_result,
        )
        return PositionOut.from_domain(find_user_position(summaries, market.id, username))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, db: AsyncSession, market_id: int) -> tuple[Market, list[Bet]]:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        bets = await self._bets.list_bets_for_market(db, market_id)
        return market, bets


def _records(bets: list[Bet]) -> list[BetRecord]:
    return [b.to_record() for b in bets]
