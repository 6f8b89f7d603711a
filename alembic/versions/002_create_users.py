"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id                      BIGSERIAL       PRIMARY KEY,
            username                VARCHAR(64)     NOT NULL,
            password_hash           VARCHAR(255)    NOT NULL,
            user_type               VARCHAR(10)     NOT NULL DEFAULT 'REGULAR',
            account_balance         BIGINT          NOT NULL DEFAULT 0,
            initial_account_balance BIGINT          NOT NULL DEFAULT 0,
            must_change_password    BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username     UNIQUE (username),
            CONSTRAINT ck_users_username_len CHECK (LENGTH(username) >= 3),
            CONSTRAINT ck_users_user_type    CHECK (user_type IN ('REGULAR', 'ADMIN'))
        );
    """)
    op.execute("DROP TRIGGER IF EXISTS trg_users_updated_at ON users;")
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE users IS 'Users: credentials plus balance; "
        "balance may go negative down to -maximumDebtAllowed';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
