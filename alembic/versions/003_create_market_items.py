"""003: create market_items table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_items (
            item_id         BIGINT          PRIMARY KEY,
            seller          VARCHAR(64)     NOT NULL,
            holder          VARCHAR(64)     NOT NULL DEFAULT '',
            price           BIGINT          NOT NULL,
            sold            BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT fk_market_items_registry
                FOREIGN KEY (item_id) REFERENCES registry_items (item_id),
            CONSTRAINT ck_market_items_price_gte_0 CHECK (price >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_market_items_updated_at
            BEFORE UPDATE ON market_items
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("CREATE INDEX idx_market_items_holder ON market_items (holder);")
    op.execute("CREATE INDEX idx_market_items_seller ON market_items (seller);")
    op.execute("COMMENT ON TABLE market_items IS 'Marketplace records; holder is empty once an item is sold. Amounts in cents';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_items CASCADE;")
