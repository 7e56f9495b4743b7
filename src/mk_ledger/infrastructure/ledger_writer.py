"""DB helpers for ledger_entries and ledger_events.

Called from LedgerRepository within the engine's transaction.
"""
import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_ledger.domain.models import FundMovement, LedgerEvent

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries
        (entry_type, party_id, amount, balance_after, item_id)
    VALUES (:entry_type, :party_id, :amount, :balance_after, :item_id)
""")

_INSERT_EVENT_SQL = text("""
    INSERT INTO ledger_events (event_type, item_id, payload, created_at)
    VALUES (:event_type, :item_id, :payload, :created_at)
""")


async def write_fund_movement(movement: FundMovement, db: AsyncSession) -> None:
    """Insert one row into ledger_entries within the caller's transaction."""
    await db.execute(
        _INSERT_ENTRY_SQL,
        {
            "entry_type": movement.entry_type,
            "party_id": movement.party_id,
            "amount": movement.amount,
            "balance_after": movement.balance_after,
            "item_id": movement.item_id,
        },
    )


async def write_ledger_event(event: LedgerEvent, db: AsyncSession) -> None:
    """Insert one row into ledger_events within the caller's transaction.

    The payload is stored as JSONB; for MARKET_ITEM_CREATED it carries
    (item_id, seller, holder, price, sold).
    """
    await db.execute(
        _INSERT_EVENT_SQL,
        {
            "event_type": event.event_type,
            "item_id": event.item_id,
            "payload": json.dumps(event.payload),
            "created_at": event.created_at,
        },
    )
