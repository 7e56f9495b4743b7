"""004: create ledger_state table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_state (
            id              INTEGER         PRIMARY KEY,
            next_item_id    BIGINT          NOT NULL DEFAULT 1,
            sold_count      BIGINT          NOT NULL DEFAULT 0,
            listing_fee     BIGINT          NOT NULL,
            balance         BIGINT          NOT NULL DEFAULT 0,
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_state_singleton    CHECK (id = 1),
            CONSTRAINT ck_ledger_state_next_gte_1   CHECK (next_item_id >= 1),
            CONSTRAINT ck_ledger_state_sold_gte_0   CHECK (sold_count >= 0),
            CONSTRAINT ck_ledger_state_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_state_updated_at
            BEFORE UPDATE ON ledger_state
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE ledger_state IS 'Single-row marketplace counters, listing fee and held balance (cents)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_state CASCADE;")
