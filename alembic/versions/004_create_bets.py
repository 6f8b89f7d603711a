"""004: create bets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Append-only: amount > 0 buys, amount < 0 records a sale of |amount| shares
    op.execute("""
        CREATE TABLE IF NOT EXISTS bets (
            id          BIGSERIAL       PRIMARY KEY,
            username    VARCHAR(64)     NOT NULL REFERENCES users (username),
            market_id   BIGINT          NOT NULL REFERENCES markets (id),
            amount      BIGINT          NOT NULL,
            outcome     VARCHAR(3)      NOT NULL,
            placed_at   TIMESTAMPTZ     NOT NULL,
            CONSTRAINT ck_bets_outcome     CHECK (outcome IN ('YES', 'NO')),
            CONSTRAINT ck_bets_amount_nz   CHECK (amount <> 0)
        );
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_bets_market_order ON bets (market_id, placed_at, id);"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_bets_user_market ON bets (username, market_id);"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bets CASCADE;")
