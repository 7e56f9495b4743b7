"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

All queries use raw text() SQL (no ORM).

Transaction ownership: The CALLER (MarketplaceEngine) is responsible for
committing or rolling back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_ledger.domain.models import FundMovement, LedgerEvent, LedgerState, MarketItem
from src.mk_ledger.infrastructure.ledger_writer import write_fund_movement, write_ledger_event

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_STATE_SQL = text("""
    SELECT next_item_id, sold_count, listing_fee, balance
    FROM ledger_state
    WHERE id = 1
""")

_UPSERT_STATE_SQL = text("""
    INSERT INTO ledger_state (id, next_item_id, sold_count, listing_fee, balance)
    VALUES (1, :next_item_id, :sold_count, :listing_fee, :balance)
    ON CONFLICT (id) DO UPDATE
        SET next_item_id = EXCLUDED.next_item_id,
            sold_count   = EXCLUDED.sold_count,
            listing_fee  = EXCLUDED.listing_fee,
            balance      = EXCLUDED.balance,
            updated_at   = NOW()
""")

_LIST_ITEMS_SQL = text("""
    SELECT item_id, seller, holder, price, sold
    FROM market_items
    ORDER BY item_id ASC
""")

_UPSERT_ITEM_SQL = text("""
    INSERT INTO market_items (item_id, seller, holder, price, sold)
    VALUES (:item_id, :seller, :holder, :price, :sold)
    ON CONFLICT (item_id) DO UPDATE
        SET seller = EXCLUDED.seller,
            holder = EXCLUDED.holder,
            price  = EXCLUDED.price,
            sold   = EXCLUDED.sold
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_item(row: object) -> MarketItem:
    return MarketItem(
        item_id=row.item_id,  # type: ignore[attr-defined]
        seller=row.seller,  # type: ignore[attr-defined]
        holder=row.holder,  # type: ignore[attr-defined]
        price=row.price,  # type: ignore[attr-defined]
        sold=row.sold,  # type: ignore[attr-defined]
    )


def _row_to_state(row: object) -> LedgerState:
    return LedgerState(
        next_item_id=row.next_item_id,  # type: ignore[attr-defined]
        sold_count=row.sold_count,  # type: ignore[attr-defined]
        listing_fee=row.listing_fee,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LedgerRepository:
    async def get_state(self, db: AsyncSession) -> LedgerState | None:
        result = await db.execute(_GET_STATE_SQL)
        row = result.fetchone()
        if row is None:
            return None
        return _row_to_state(row)

    async def save_state(self, db: AsyncSession, state: LedgerState) -> None:
        await db.execute(
            _UPSERT_STATE_SQL,
            {
                "next_item_id": state.next_item_id,
                "sold_count": state.sold_count,
                "listing_fee": state.listing_fee,
                "balance": state.balance,
            },
        )

    async def list_items(self, db: AsyncSession) -> list[MarketItem]:
        result = await db.execute(_LIST_ITEMS_SQL)
        return [_row_to_item(row) for row in result.fetchall()]

    async def save_item(self, db: AsyncSession, item: MarketItem) -> None:
        await db.execute(
            _UPSERT_ITEM_SQL,
            {
                "item_id": item.item_id,
                "seller": item.seller,
                "holder": item.holder,
                "price": item.price,
                "sold": item.sold,
            },
        )

    async def append_fund_movements(
        self, db: AsyncSession, movements: list[FundMovement]
    ) -> None:
        for movement in movements:
            await write_fund_movement(movement, db)

    async def append_events(self, db: AsyncSession, events: list[LedgerEvent]) -> None:
        for event in events:
            await write_ledger_event(event, db)
