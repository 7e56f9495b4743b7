"""MarketplaceLedger — item lifecycle state machine, fee accounting, queries.

Lifecycle of one MarketItem:

    list_new_item      -> listed   (holder = marketplace, sold = False)
    purchase_item      -> sold     (holder = UNASSIGNED_PARTY, sold = True)
    relist_item        -> listed   (holder = marketplace, sold = False)

Every mutating operation is all-or-nothing: preconditions are checked first,
and if anything fails part-way the records, counters, balance and pending
movements/events are restored to exactly what they were before the call.
The caller (MarketplaceEngine) serializes operations; this class does no
locking of its own.

Quirks kept on purpose:
  - purchase_item leaves ``holder`` unassigned instead of the buyer, so
    list_owned_items(buyer) never returns a bought item and relisting a
    bought item is refused (OwnershipError for the buyer, CustodyTransferError
    for the unassigned identity).
  - relist_item accepts any price, including 0.
  - purchase_item has no "is listed" check of its own; buying a sold item
    fails only because the registry refuses to move custody out of the
    marketplace.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import asdict, replace

from src.mk_common.enums import LedgerEntryType, LedgerEventType
from src.mk_common.errors import (
    InsufficientFundsError,
    InternalError,
    InvalidPriceError,
    ItemNotFoundError,
    OperatorPermissionError,
    OwnershipError,
    PaymentMismatchError,
    SoldCountUnderflowError,
)
from src.mk_ledger.domain.funds import FundsBook
from src.mk_ledger.domain.models import (
    UNASSIGNED_PARTY,
    FundMovement,
    LedgerEvent,
    LedgerState,
    MarketItem,
)
from src.mk_registry.domain.registry import ItemRegistryProtocol

logger = logging.getLogger(__name__)


class MarketplaceLedger:
    def __init__(
        self,
        registry: ItemRegistryProtocol,
        marketplace_id: str,
        operator_id: str,
        listing_fee: int,
        items: Iterable[MarketItem] = (),
        next_item_id: int = 1,
        sold_count: int = 0,
        balance: int = 0,
    ) -> None:
        self._registry = registry
        self._marketplace_id = marketplace_id
        self._operator_id = operator_id
        self._listing_fee = listing_fee
        self._items: dict[int, MarketItem] = {item.item_id: item for item in items}
        self._next_item_id = next_item_id
        self._sold_count = sold_count
        self._funds = FundsBook(balance)
        self._pending_events: list[LedgerEvent] = []

    # -- State ---------------------------------------------------------------

    @property
    def marketplace_id(self) -> str:
        return self._marketplace_id

    @property
    def operator_id(self) -> str:
        return self._operator_id

    @property
    def next_item_id(self) -> int:
        return self._next_item_id

    @property
    def sold_count(self) -> int:
        return self._sold_count

    @property
    def balance(self) -> int:
        return self._funds.balance

    def state(self) -> LedgerState:
        return LedgerState(
            next_item_id=self._next_item_id,
            sold_count=self._sold_count,
            listing_fee=self._listing_fee,
            balance=self._funds.balance,
        )

    def get_item(self, item_id: int) -> MarketItem:
        return replace(self._require_item(item_id))

    def all_items(self) -> list[MarketItem]:
        return self._select(lambda item: True)

    def drain_events(self) -> list[LedgerEvent]:
        events, self._pending_events = self._pending_events, []
        return events

    def drain_fund_movements(self) -> list[FundMovement]:
        return self._funds.drain()

    # -- Listing fee ---------------------------------------------------------

    def get_listing_fee(self) -> int:
        return self._listing_fee

    def set_listing_fee(self, caller: str, new_fee: int) -> None:
        """Replace the listing fee. Operator only; the value is not bounded."""
        if caller != self._operator_id:
            raise OperatorPermissionError(caller)
        old_fee = self._listing_fee
        self._listing_fee = new_fee
        self._emit(
            LedgerEventType.LISTING_FEE_CHANGED.value,
            None,
            {"old_fee": old_fee, "new_fee": new_fee},
        )
        logger.info("Listing fee changed: %d -> %d", old_fee, new_fee)

    # -- Lifecycle -----------------------------------------------------------

    def list_new_item(
        self, caller: str, metadata_reference: str, price: int, fee_paid: int
    ) -> int:
        """Mint a new item for ``caller`` and list it at ``price``.

        Raises:
            InvalidPriceError: price is not strictly positive.
            PaymentMismatchError: fee_paid differs from the listing fee.
        """
        if price <= 0:
            raise InvalidPriceError(price)
        self._require_fee(fee_paid)

        with self._atomic():
            item_id = self._registry.mint(caller)
            if item_id != self._next_item_id:
                raise InternalError(
                    f"Registry minted item {item_id}, ledger expected {self._next_item_id}"
                )
            self._next_item_id += 1
            self._registry.attach_metadata(item_id, metadata_reference)

            item = MarketItem(
                item_id=item_id,
                seller=caller,
                holder=self._marketplace_id,
                price=price,
                sold=False,
            )
            self._items[item_id] = item
            self._registry.transfer_custody(item_id, caller, self._marketplace_id)
            self._funds.receive(LedgerEntryType.LISTING_FEE_IN.value, caller, fee_paid, item_id)
            self._emit(LedgerEventType.MARKET_ITEM_CREATED.value, item_id, asdict(item))

        logger.info("Item %d listed by %s at %d", item_id, caller, price)
        return item_id

    def relist_item(self, caller: str, item_id: int, price: int, fee_paid: int) -> None:
        """Put an item back on sale. ``caller`` must match the stored holder.

        Raises:
            ItemNotFoundError: no record for item_id.
            OwnershipError: caller is not the record's holder.
            PaymentMismatchError: fee_paid differs from the listing fee.
            SoldCountUnderflowError: no sale is outstanding (sold_count is 0).
            CustodyTransferError: the registry does not show caller as holder.
        """
        item = self._require_item(item_id)
        if item.holder != caller:
            raise OwnershipError(item_id, caller)
        self._require_fee(fee_paid)
        if self._sold_count == 0:
            raise SoldCountUnderflowError(item_id)

        with self._atomic():
            self._registry.transfer_custody(item_id, caller, self._marketplace_id)
            item.sold = False
            item.price = price
            item.seller = caller
            item.holder = self._marketplace_id
            self._sold_count -= 1
            self._funds.receive(LedgerEntryType.LISTING_FEE_IN.value, caller, fee_paid, item_id)
            self._emit(LedgerEventType.MARKET_ITEM_RELISTED.value, item_id, asdict(item))

        logger.info("Item %d relisted by %s at %d", item_id, caller, price)

    def purchase_item(self, caller: str, item_id: int, payment: int) -> None:
        """Buy an item and settle: listing fee to the operator, payment to the seller.

        The operator's cut is the *current* listing fee, paid out of the
        accumulated balance rather than taken from this sale's payment.

        Raises:
            ItemNotFoundError: no record for item_id.
            PaymentMismatchError: payment differs from the item's price.
            InsufficientFundsError: balance cannot cover both payouts.
            CustodyTransferError: the marketplace does not hold the item.
        """
        item = self._require_item(item_id)
        if payment != item.price:
            raise PaymentMismatchError(required=item.price, paid=payment)
        operator_cut = self._listing_fee
        if self._funds.balance < operator_cut:
            raise InsufficientFundsError(
                required=operator_cut + payment,
                available=self._funds.balance + payment,
            )

        with self._atomic():
            self._registry.transfer_custody(item_id, self._marketplace_id, caller)
            self._funds.receive(LedgerEntryType.SALE_PAYMENT_IN.value, caller, payment, item_id)
            item.sold = True
            # Buyer holds custody in the registry; the ledger record ends unassigned.
            item.holder = UNASSIGNED_PARTY
            self._sold_count += 1
            self._funds.pay_out(
                LedgerEntryType.OPERATOR_PAYOUT.value, self._operator_id, operator_cut, item_id
            )
            self._funds.pay_out(LedgerEntryType.SELLER_PAYOUT.value, item.seller, payment, item_id)
            self._emit(
                LedgerEventType.MARKET_ITEM_SOLD.value,
                item_id,
                {
                    "item_id": item_id,
                    "seller": item.seller,
                    "buyer": caller,
                    "price": payment,
                    "operator_fee": operator_cut,
                },
            )

        logger.info("Item %d sold to %s for %d", item_id, caller, payment)

    # -- Queries -------------------------------------------------------------

    def list_unsold_items(self) -> list[MarketItem]:
        return self._select(lambda item: item.holder == self._marketplace_id)

    def list_owned_items(self, party: str) -> list[MarketItem]:
        return self._select(lambda item: item.holder == party)

    def list_seller_items(self, party: str) -> list[MarketItem]:
        return self._select(lambda item: item.seller == party)

    # -- Internals -----------------------------------------------------------

    def _select(self, predicate: Callable[[MarketItem], bool]) -> list[MarketItem]:
        """Linear scan in ascending item_id; returns copies, never live records."""
        return [
            replace(self._items[item_id])
            for item_id in range(1, self._next_item_id)
            if item_id in self._items and predicate(self._items[item_id])
        ]

    def _require_item(self, item_id: int) -> MarketItem:
        item = self._items.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def _require_fee(self, fee_paid: int) -> None:
        if fee_paid != self._listing_fee:
            raise PaymentMismatchError(required=self._listing_fee, paid=fee_paid)

    def _emit(self, event_type: str, item_id: int | None, payload: dict[str, object]) -> None:
        self._pending_events.append(
            LedgerEvent(event_type=event_type, item_id=item_id, payload=payload)
        )

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        """Restore records, counters, funds and pending events if the block raises."""
        items = {item_id: replace(item) for item_id, item in self._items.items()}
        next_item_id = self._next_item_id
        sold_count = self._sold_count
        listing_fee = self._listing_fee
        funds_mark = self._funds.mark()
        events_len = len(self._pending_events)
        try:
            yield
        except Exception:
            self._items = items
            self._next_item_id = next_item_id
            self._sold_count = sold_count
            self._listing_fee = listing_fee
            self._funds.reset_to(funds_mark)
            del self._pending_events[events_len:]
            raise
