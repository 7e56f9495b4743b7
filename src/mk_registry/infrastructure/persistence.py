"""RegistryRepository — raw SQL load/save for registry_items.

Transaction ownership: the CALLER (marketplace engine) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_registry.domain.models import RegistryItem

_LIST_ITEMS_SQL = text("""
    SELECT item_id, holder, metadata_reference
    FROM registry_items
    ORDER BY item_id ASC
""")

_UPSERT_ITEM_SQL = text("""
    INSERT INTO registry_items (item_id, holder, metadata_reference)
    VALUES (:item_id, :holder, :metadata_reference)
    ON CONFLICT (item_id) DO UPDATE
        SET holder = EXCLUDED.holder,
            metadata_reference = EXCLUDED.metadata_reference
""")


def _row_to_item(row: object) -> RegistryItem:
    return RegistryItem(
        item_id=row.item_id,  # type: ignore[attr-defined]
        holder=row.holder,  # type: ignore[attr-defined]
        metadata_reference=row.metadata_reference,  # type: ignore[attr-defined]
    )


class RegistryRepository:
    async def list_items(self, db: AsyncSession) -> list[RegistryItem]:
        result = await db.execute(_LIST_ITEMS_SQL)
        return [_row_to_item(row) for row in result.fetchall()]

    async def save_item(self, db: AsyncSession, item: RegistryItem) -> None:
        await db.execute(
            _UPSERT_ITEM_SQL,
            {
                "item_id": item.item_id,
                "holder": item.holder,
                "metadata_reference": item.metadata_reference,
            },
        )
