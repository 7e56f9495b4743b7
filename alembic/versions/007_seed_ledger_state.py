"""007: seed ledger_state

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Empty marketplace; listing fee of 25 cents
    op.execute("""
        INSERT INTO ledger_state (id, next_item_id, sold_count, listing_fee, balance)
        VALUES (1, 1, 0, 25, 0)
        ON CONFLICT (id) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DELETE FROM ledger_state WHERE id = 1;")
