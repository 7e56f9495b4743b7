"""002: create registry_items table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE registry_items (
            item_id             BIGINT          PRIMARY KEY,
            holder              VARCHAR(64)     NOT NULL,
            metadata_reference  VARCHAR(2048),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_registry_item_id_gte_1 CHECK (item_id >= 1)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_registry_items_updated_at
            BEFORE UPDATE ON registry_items
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("CREATE INDEX idx_registry_holder ON registry_items (holder);")
    op.execute("COMMENT ON TABLE registry_items IS 'Item custody registry: current holder and metadata reference per item';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS registry_items CASCADE;")
