"""006: create ledger_events table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_events (
            id              BIGSERIAL       PRIMARY KEY,
            event_type      VARCHAR(30)     NOT NULL,
            item_id         BIGINT,
            payload         JSONB           NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_event_type CHECK (
                event_type IN (
                    'MARKET_ITEM_CREATED',
                    'MARKET_ITEM_RELISTED',
                    'MARKET_ITEM_SOLD',
                    'LISTING_FEE_CHANGED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_events_item_time ON ledger_events (item_id, created_at);")
    op.execute("CREATE INDEX idx_ledger_events_type ON ledger_events (event_type, created_at);")
    op.execute("""
        CREATE TRIGGER trg_ledger_events_append_only
            BEFORE UPDATE OR DELETE ON ledger_events
            FOR EACH ROW EXECUTE FUNCTION fn_reject_ledger_rewrite();
    """)
    op.execute("COMMENT ON TABLE ledger_events IS 'Marketplace event log: append-only, for audit and downstream consumers';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_events CASCADE;")
