"""005: create ledger_entries table

Revision ID: 005
Revises: 004
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            username        VARCHAR(64)     NOT NULL,
            entry_type      VARCHAR(30)     NOT NULL,
            amount          BIGINT          NOT NULL,
            balance_after   BIGINT          NOT NULL,
            reference_type  VARCHAR(30),
            reference_id    VARCHAR(64),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN (
                    'BET_PURCHASE', 'BET_FEE',
                    'SALE_PROCEEDS', 'SALE_FEE',
                    'MARKET_CREATION_FEE',
                    'RESOLUTION_PAYOUT', 'RESOLUTION_REFUND'
                )
            )
        );
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_ledger_user_id ON ledger_entries (username, id DESC);"
    )
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_ledger_reference
        ON ledger_entries (reference_type, reference_id)
        WHERE reference_id IS NOT NULL;
    """)
    op.execute("COMMENT ON TABLE ledger_entries IS 'Balance ledger: append-only, never updated';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
