"""006: add market labels

Revision ID: 006
Revises: 005
Create Date: 2026-10-08
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Markets created before custom labels existed read as YES/NO
    op.execute("ALTER TABLE markets ADD COLUMN IF NOT EXISTS yes_label VARCHAR(20);")
    op.execute("ALTER TABLE markets ADD COLUMN IF NOT EXISTS no_label VARCHAR(20);")
    op.execute("""
        UPDATE markets SET yes_label = 'YES'
        WHERE yes_label IS NULL OR BTRIM(yes_label) = '';
    """)
    op.execute("""
        UPDATE markets SET no_label = 'NO'
        WHERE no_label IS NULL OR BTRIM(no_label) = '';
    """)
    op.execute("ALTER TABLE markets ALTER COLUMN yes_label SET DEFAULT 'YES';")
    op.execute("ALTER TABLE markets ALTER COLUMN no_label SET DEFAULT 'NO';")
    op.execute("ALTER TABLE markets ALTER COLUMN yes_label SET NOT NULL;")
    op.execute("ALTER TABLE markets ALTER COLUMN no_label SET NOT NULL;")


def downgrade() -> None:
    op.execute("ALTER TABLE markets DROP COLUMN IF EXISTS no_label;")
    op.execute("ALTER TABLE markets DROP COLUMN IF EXISTS yes_label;")
