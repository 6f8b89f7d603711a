"""003: create markets table

Revision ID: 003
Revises: 002
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS markets (
            id                      BIGSERIAL           PRIMARY KEY,
            question_title          VARCHAR(160)        NOT NULL,
            description             TEXT                NOT NULL DEFAULT '',
            outcome_type            VARCHAR(20)         NOT NULL DEFAULT 'BINARY',
            creator_username        VARCHAR(64)         NOT NULL REFERENCES users (username),
            resolution_date_time    TIMESTAMPTZ         NOT NULL,
            utc_offset              INTEGER             NOT NULL DEFAULT 0,
            initial_probability     DOUBLE PRECISION    NOT NULL,
            is_resolved             BOOLEAN             NOT NULL DEFAULT FALSE,
            resolution_result       VARCHAR(3),
            final_resolution_at     TIMESTAMPTZ,
            created_at              TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_outcome_type CHECK (outcome_type = 'BINARY'),
            CONSTRAINT ck_markets_probability  CHECK (initial_probability BETWEEN 0 AND 1),
            CONSTRAINT ck_markets_resolution   CHECK (
                (is_resolved = FALSE AND resolution_result IS NULL)
                OR (is_resolved = TRUE AND resolution_result IN ('YES', 'NO', 'N/A'))
            )
        );
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_markets_resolved ON markets (is_resolved, id DESC);"
    )
    op.execute("DROP TRIGGER IF EXISTS trg_markets_updated_at ON markets;")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
