"""Unit tests for MarketplaceLedger — listing, relisting, purchase, settlement."""

from dataclasses import asdict

import pytest

from src.mk_common.errors import (
    CustodyTransferError,
    InsufficientFundsError,
    InternalError,
    InvalidPriceError,
    ItemNotFoundError,
    OperatorPermissionError,
    OwnershipError,
    PaymentMismatchError,
    SoldCountUnderflowError,
)
from src.mk_ledger.domain.ledger import MarketplaceLedger
from src.mk_ledger.domain.models import UNASSIGNED_PARTY, MarketItem
from src.mk_registry.infrastructure.memory import InMemoryItemRegistry

MARKET = "MARKETPLACE"
OPERATOR = "OPERATOR"


def _make_ledger(fee: int = 10) -> tuple[MarketplaceLedger, InMemoryItemRegistry]:
    registry = InMemoryItemRegistry()
    ledger = MarketplaceLedger(
        registry=registry,
        marketplace_id=MARKET,
        operator_id=OPERATOR,
        listing_fee=fee,
    )
    return ledger, registry


def _snapshot(ledger: MarketplaceLedger) -> tuple[object, ...]:
    return (
        [asdict(i) for i in ledger.all_items()],
        ledger.next_item_id,
        ledger.sold_count,
        ledger.balance,
        ledger.get_listing_fee(),
    )


@pytest.fixture
def ledger() -> MarketplaceLedger:
    return _make_ledger()[0]


class TestListingFee:
    def test_default_fee(self, ledger: MarketplaceLedger) -> None:
        assert ledger.get_listing_fee() == 10

    def test_operator_sets_fee(self, ledger: MarketplaceLedger) -> None:
        ledger.set_listing_fee(OPERATOR, 25)
        assert ledger.get_listing_fee() == 25
        events = ledger.drain_events()
        assert len(events) == 1
        assert events[0].event_type == "LISTING_FEE_CHANGED"
        assert events[0].item_id is None
        assert events[0].payload == {"old_fee": 10, "new_fee": 25}

    def test_non_operator_rejected(self, ledger: MarketplaceLedger) -> None:
        with pytest.raises(OperatorPermissionError):
            ledger.set_listing_fee("alice", 0)
        assert ledger.get_listing_fee() == 10
        assert ledger.drain_events() == []

    def test_zero_fee_allowed(self, ledger: MarketplaceLedger) -> None:
        ledger.set_listing_fee(OPERATOR, 0)
        item_id = ledger.list_new_item("alice", "ipfs://a", 100, 0)
        assert item_id == 1
        assert ledger.balance == 0


class TestListNewItem:
    def test_creates_record_held_by_marketplace(self) -> None:
        ledger, registry = _make_ledger()
        item_id = ledger.list_new_item("alice", "ipfs://a", 100, 10)
        assert item_id == 1
        assert ledger.get_item(1) == MarketItem(1, "alice", MARKET, 100, False)
        assert registry.current_holder(1) == MARKET
        reg_item = registry.get_item(1)
        assert reg_item is not None
        assert reg_item.metadata_reference == "ipfs://a"
        assert ledger.next_item_id == 2

    def test_collects_fee(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        assert ledger.balance == 10
        movements = ledger.drain_fund_movements()
        assert len(movements) == 1
        assert movements[0].entry_type == "LISTING_FEE_IN"
        assert movements[0].party_id == "alice"
        assert movements[0].amount == 10
        assert movements[0].balance_after == 10

    def test_emits_created_event(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        events = ledger.drain_events()
        assert len(events) == 1
        assert events[0].event_type == "MARKET_ITEM_CREATED"
        assert events[0].payload == {
            "item_id": 1,
            "seller": "alice",
            "holder": MARKET,
            "price": 100,
            "sold": False,
        }

    def test_ids_strictly_increasing_without_gaps(self, ledger: MarketplaceLedger) -> None:
        ids = [ledger.list_new_item("alice", f"ipfs://{n}", 100 + n, 10) for n in range(5)]
        assert ids == [1, 2, 3, 4, 5]

    def test_failed_listing_does_not_consume_id(self) -> None:
        ledger, registry = _make_ledger()
        with pytest.raises(InvalidPriceError):
            ledger.list_new_item("alice", "ipfs://a", 0, 10)
        with pytest.raises(PaymentMismatchError):
            ledger.list_new_item("alice", "ipfs://a", 100, 9)
        assert ledger.list_new_item("alice", "ipfs://a", 100, 10) == 1
        assert registry.next_item_id == 2

    @pytest.mark.parametrize("price", [0, -1])
    def test_non_positive_price(self, ledger: MarketplaceLedger, price: int) -> None:
        before = _snapshot(ledger)
        with pytest.raises(InvalidPriceError):
            ledger.list_new_item("alice", "ipfs://a", price, 10)
        assert _snapshot(ledger) == before

    @pytest.mark.parametrize("fee_paid", [0, 9, 11])
    def test_fee_mismatch(self, ledger: MarketplaceLedger, fee_paid: int) -> None:
        before = _snapshot(ledger)
        with pytest.raises(PaymentMismatchError) as exc_info:
            ledger.list_new_item("alice", "ipfs://a", 100, fee_paid)
        assert exc_info.value.required == 10
        assert exc_info.value.paid == fee_paid
        assert _snapshot(ledger) == before
        assert ledger.drain_events() == []
        assert ledger.drain_fund_movements() == []

    def test_registry_id_drift_is_internal_error(self) -> None:
        registry = InMemoryItemRegistry(next_item_id=5)
        ledger = MarketplaceLedger(registry, MARKET, OPERATOR, listing_fee=10)
        with pytest.raises(InternalError):
            ledger.list_new_item("alice", "ipfs://a", 100, 10)
        assert ledger.next_item_id == 1
        assert ledger.all_items() == []
        assert ledger.balance == 0


class TestPurchaseItem:
    def test_settlement_scenario(self) -> None:
        ledger, registry = _make_ledger(fee=10)
        ledger.list_new_item("seller-a", "ipfs://a", 100, 10)
        ledger.drain_fund_movements()

        ledger.purchase_item("buyer-b", 1, 100)

        item = ledger.get_item(1)
        assert item.sold is True
        assert item.holder == UNASSIGNED_PARTY
        assert item.seller == "seller-a"
        assert ledger.sold_count == 1
        assert registry.current_holder(1) == "buyer-b"
        assert ledger.balance == 0

        movements = ledger.drain_fund_movements()
        assert [(m.entry_type, m.party_id, m.amount) for m in movements] == [
            ("SALE_PAYMENT_IN", "buyer-b", 100),
            ("OPERATOR_PAYOUT", OPERATOR, -10),
            ("SELLER_PAYOUT", "seller-a", -100),
        ]

    def test_emits_sold_event(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.drain_events()
        ledger.purchase_item("bob", 1, 100)
        events = ledger.drain_events()
        assert len(events) == 1
        assert events[0].event_type == "MARKET_ITEM_SOLD"
        assert events[0].payload == {
            "item_id": 1,
            "seller": "alice",
            "buyer": "bob",
            "price": 100,
            "operator_fee": 10,
        }

    def test_buyer_not_listed_as_owner(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.purchase_item("bob", 1, 100)
        assert ledger.list_owned_items("bob") == []
        assert [i.item_id for i in ledger.list_owned_items(UNASSIGNED_PARTY)] == [1]

    @pytest.mark.parametrize("payment", [0, 99, 101])
    def test_payment_mismatch(self, ledger: MarketplaceLedger, payment: int) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        before = _snapshot(ledger)
        with pytest.raises(PaymentMismatchError):
            ledger.purchase_item("bob", 1, payment)
        assert _snapshot(ledger) == before

    def test_unknown_item(self, ledger: MarketplaceLedger) -> None:
        with pytest.raises(ItemNotFoundError):
            ledger.purchase_item("bob", 1, 100)

    def test_purchase_of_sold_item_refused_by_registry(self) -> None:
        ledger, registry = _make_ledger()
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.list_new_item("alice", "ipfs://b", 200, 10)
        ledger.purchase_item("bob", 1, 100)
        ledger.drain_fund_movements()
        ledger.drain_events()
        before = _snapshot(ledger)

        with pytest.raises(CustodyTransferError):
            ledger.purchase_item("carol", 1, 100)

        assert _snapshot(ledger) == before
        assert registry.current_holder(1) == "bob"
        assert ledger.drain_fund_movements() == []
        assert ledger.drain_events() == []

    def test_operator_cut_is_current_fee(self) -> None:
        ledger, _ = _make_ledger(fee=10)
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.list_new_item("alice", "ipfs://b", 100, 10)
        ledger.set_listing_fee(OPERATOR, 15)
        ledger.drain_fund_movements()

        ledger.purchase_item("bob", 1, 100)

        payouts = [m for m in ledger.drain_fund_movements() if m.entry_type == "OPERATOR_PAYOUT"]
        assert payouts[0].amount == -15
        assert ledger.balance == 5

    def test_balance_too_low_for_operator_cut(self) -> None:
        ledger, registry = _make_ledger(fee=10)
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.set_listing_fee(OPERATOR, 50)
        before = _snapshot(ledger)

        with pytest.raises(InsufficientFundsError):
            ledger.purchase_item("bob", 1, 100)

        assert _snapshot(ledger) == before
        assert registry.current_holder(1) == MARKET


class TestRelistItem:
    def test_buyer_cannot_relist(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.purchase_item("bob", 1, 100)
        before = _snapshot(ledger)
        with pytest.raises(OwnershipError):
            ledger.relist_item("bob", 1, 150, 10)
        assert _snapshot(ledger) == before

    def test_unassigned_identity_refused_by_registry(self) -> None:
        ledger, registry = _make_ledger()
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.list_new_item("alice", "ipfs://b", 100, 10)
        ledger.purchase_item("bob", 1, 100)
        before = _snapshot(ledger)

        with pytest.raises(CustodyTransferError):
            ledger.relist_item(UNASSIGNED_PARTY, 1, 150, 10)

        assert _snapshot(ledger) == before
        assert registry.current_holder(1) == "bob"

    def test_seller_cannot_relist_listed_item(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        with pytest.raises(OwnershipError):
            ledger.relist_item("alice", 1, 150, 10)

    def test_stored_holder_relists(self) -> None:
        ledger, registry = _make_ledger()
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.list_new_item("alice", "ipfs://b", 100, 10)
        ledger.purchase_item("bob", 1, 100)
        ledger.drain_events()

        ledger.relist_item(MARKET, 2, 0, 10)

        item = ledger.get_item(2)
        assert item == MarketItem(2, MARKET, MARKET, 0, False)
        assert ledger.sold_count == 0
        assert registry.current_holder(2) == MARKET
        events = ledger.drain_events()
        assert [e.event_type for e in events] == ["MARKET_ITEM_RELISTED"]

    def test_relist_collects_fee(self) -> None:
        ledger, _ = _make_ledger()
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.list_new_item("alice", "ipfs://b", 100, 10)
        ledger.purchase_item("bob", 1, 100)
        balance = ledger.balance
        ledger.drain_fund_movements()

        ledger.relist_item(MARKET, 2, 80, 10)

        assert ledger.balance == balance + 10
        movements = ledger.drain_fund_movements()
        assert [(m.entry_type, m.party_id, m.amount) for m in movements] == [
            ("LISTING_FEE_IN", MARKET, 10),
        ]

    def test_relist_fee_mismatch(self) -> None:
        ledger, _ = _make_ledger()
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        ledger.purchase_item("bob", 1, 100)
        ledger.list_new_item("alice", "ipfs://b", 100, 10)
        before = _snapshot(ledger)
        with pytest.raises(PaymentMismatchError):
            ledger.relist_item(MARKET, 2, 80, 11)
        assert _snapshot(ledger) == before

    def test_relist_unknown_item(self, ledger: MarketplaceLedger) -> None:
        with pytest.raises(ItemNotFoundError):
            ledger.relist_item("alice", 3, 100, 10)

    def test_relist_with_no_sales_outstanding(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        before = _snapshot(ledger)
        with pytest.raises(SoldCountUnderflowError):
            ledger.relist_item(MARKET, 1, 100, 10)
        assert _snapshot(ledger) == before


class TestRecordsAreCopies:
    def test_get_item_returns_copy(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        item = ledger.get_item(1)
        item.price = 1
        assert ledger.get_item(1).price == 100

    def test_state_snapshot(self, ledger: MarketplaceLedger) -> None:
        ledger.list_new_item("alice", "ipfs://a", 100, 10)
        state = ledger.state()
        assert state.next_item_id == 2
        assert state.sold_count == 0
        assert state.listing_fee == 10
        assert state.balance == 10
