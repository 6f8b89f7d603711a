"""AccountRepository: concrete implementation of AccountRepositoryProtocol.

Balance mutations use atomic PostgreSQL UPDATE ... RETURNING.
The debit guard repeats the debt floor, so a result of 0 rows means the
credit rule would have been violated.

Transaction ownership: The CALLER (application service) is responsible for
starting and committing the transaction via `async with transaction(db)`.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import LedgerEntry, UserAccount
from src.pm_common.errors import InternalError, UserNotFoundError

# ---------------------------------------------------------------------------
# SQL: users balance
# ---------------------------------------------------------------------------

_GET_ACCOUNT_SQL = text("""
    SELECT username, user_type, account_balance, initial_account_balance,
           must_change_password
    FROM users
    WHERE username = :username
""")

_LOCK_ACCOUNT_SQL = text("""
    SELECT username, user_type, account_balance, initial_account_balance,
           must_change_password
    FROM users
    WHERE username = :username
    FOR UPDATE
""")

_DEBIT_SQL = text("""
    UPDATE users
    SET account_balance = account_balance - :amount,
        updated_at = NOW()
    WHERE username = :username
      AND account_balance - :amount >= -CAST(:max_debt AS BIGINT)
    RETURNING account_balance
""")

_CREDIT_SQL = text("""
    UPDATE users
    SET account_balance = account_balance + :amount,
        updated_at = NOW()
    WHERE username = :username
    RETURNING account_balance
""")

# ---------------------------------------------------------------------------
# SQL: ledger
# ---------------------------------------------------------------------------

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (username, entry_type, amount, balance_after,
         reference_type, reference_id)
    VALUES
        (:username, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id)
    RETURNING id, username, entry_type, amount, balance_after,
              reference_type, reference_id, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, username, entry_type, amount, balance_after,
           reference_type, reference_id, created_at
    FROM ledger_entries
    WHERE username = :username
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = CAST(:entry_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_account(row: object) -> UserAccount:
    return UserAccount(
        username=row.username,  # type: ignore[attr-defined]
        user_type=row.user_type,  # type: ignore[attr-defined]
        account_balance=row.account_balance,  # type: ignore[attr-defined]
        initial_account_balance=row.initial_account_balance,  # type: ignore[attr-defined]
        must_change_password=row.must_change_password,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository: all operations atomic at the SQL level."""

    async def get_account(self, db: AsyncSession, username: str) -> UserAccount | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"username": username})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def lock_account(self, db: AsyncSession, username: str) -> UserAccount | None:
        """SELECT ... FOR UPDATE: serializes concurrent mutations of one user."""
        result = await db.execute(_LOCK_ACCOUNT_SQL, {"username": username})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def debit(
        self, db: AsyncSession, username: str, amount: int, maximum_debt_allowed: int
    ) -> int | None:
        """Returns the new balance, or None when the debt floor blocks the debit."""
        result = await db.execute(
            _DEBIT_SQL,
            {"username": username, "amount": amount, "max_debt": maximum_debt_allowed},
        )
        row = result.fetchone()
        return row.account_balance if row else None

    async def credit(self, db: AsyncSession, username: str, amount: int) -> int:
        result = await db.execute(_CREDIT_SQL, {"username": username, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise UserNotFoundError(username)
        return row.account_balance

    async def add_ledger_entry(
        self,
        db: AsyncSession,
        username: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        reference_type: str | None,
        reference_id: str | None,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "username": username,
                "entry_type": entry_type,
                "amount": amount,
                "balance_after": balance_after,
                "reference_type": reference_type,
                "reference_id": reference_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_ledger(row)

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        username: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "username": username,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]
