"""Domain models for mk_ledger — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime

from src.mk_common.datetime_utils import utc_now

# Holder of a record once settlement has finished (see MarketplaceLedger.purchase_item)
UNASSIGNED_PARTY = ""


@dataclass
class MarketItem:
    # Field order is the persisted layout: (item_id, seller, holder, price, sold)
    item_id: int
    seller: str
    holder: str
    price: int      # cents
    sold: bool = False


@dataclass
class LedgerState:
    """Scalar ledger state, stored as the single ledger_state row."""

    next_item_id: int
    sold_count: int
    listing_fee: int    # cents
    balance: int        # cents, accumulated fees + unsettled payments


@dataclass(frozen=True)
class FundMovement:
    entry_type: str     # LedgerEntryType value
    party_id: str
    amount: int         # cents, positive=into ledger, negative=paid out
    balance_after: int  # cents, ledger balance after this movement
    item_id: int


@dataclass(frozen=True)
class LedgerEvent:
    event_type: str     # LedgerEventType value
    item_id: int | None
    payload: dict[str, object]
    created_at: datetime = field(default_factory=utc_now)
