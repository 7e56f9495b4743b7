"""005: create ledger_entries table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            entry_type      VARCHAR(30)     NOT NULL,
            party_id        VARCHAR(64)     NOT NULL,
            amount          BIGINT          NOT NULL,
            balance_after   BIGINT          NOT NULL,
            item_id         BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN (
                    'LISTING_FEE_IN',
                    'SALE_PAYMENT_IN',
                    'OPERATOR_PAYOUT',
                    'SELLER_PAYOUT'
                )
            ),
            CONSTRAINT ck_ledger_balance_gte_0 CHECK (balance_after >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_party_time ON ledger_entries (party_id, created_at DESC);")
    op.execute("CREATE INDEX idx_ledger_item ON ledger_entries (item_id);")
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_append_only
            BEFORE UPDATE OR DELETE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_reject_ledger_rewrite();
    """)
    op.execute("COMMENT ON TABLE ledger_entries IS 'Fund movements: append-only, never updated or deleted. Amounts in cents';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
