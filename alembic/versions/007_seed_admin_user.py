"""007: seed admin user

Revision ID: 007
Revises: 006
Create Date: 2026-10-08
"""
import os
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Bootstrap credentials; the account must change its password on first login.
_ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
_ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "ChangeMe123")


def upgrade() -> None:
    # pgcrypto's bf salt yields $2a$ bcrypt hashes, which bcrypt.checkpw accepts
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")
    op.get_bind().execute(
        sa.text("""
            INSERT INTO users (username, password_hash, user_type, must_change_password)
            VALUES (:username, crypt(:password, gen_salt('bf')), 'ADMIN', TRUE)
            ON CONFLICT (username) DO NOTHING
        """),
        {"username": _ADMIN_USERNAME, "password": _ADMIN_PASSWORD},
    )


def downgrade() -> None:
    op.get_bind().execute(
        sa.text("DELETE FROM users WHERE username = :username AND user_type = 'ADMIN'"),
        {"username": _ADMIN_USERNAME},
    )
