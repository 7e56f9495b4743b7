"""Pydantic schemas for the marketplace API.

Request bodies carry amounts as given. Price, fee and payment rules
(including negatives) are enforced by the ledger so the caller always gets
the ledger's own error code in the ApiResponse envelope. The one schema bound
is a non-negative relist price, since a stored price is never negative.
"""

from pydantic import BaseModel, Field

from src.mk_common.cents import cents_to_display
from src.mk_ledger.domain.models import MarketItem
from src.mk_registry.domain.models import RegistryItem

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ListItemRequest(BaseModel):
    metadata_reference: str = Field(..., min_length=1, max_length=2048)
    price_cents: int = Field(..., description="Asking price in cents, must be > 0")
    fee_paid_cents: int = Field(..., description="Must equal the current listing fee")


class RelistItemRequest(BaseModel):
    price_cents: int = Field(..., ge=0, description="New asking price in cents")
    fee_paid_cents: int = Field(..., description="Must equal the current listing fee")


class PurchaseItemRequest(BaseModel):
    payment_cents: int = Field(..., description="Must equal the item's price")


class SetListingFeeRequest(BaseModel):
    listing_fee_cents: int = Field(..., description="Replaces the fee as-is, operator only")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class MarketItemResponse(BaseModel):
    item_id: int
    seller: str
    holder: str
    price_cents: int
    price_display: str
    sold: bool

    @classmethod
    def from_domain(cls, item: MarketItem) -> "MarketItemResponse":
        return cls(
            item_id=item.item_id,
            seller=item.seller,
            holder=item.holder,
            price_cents=item.price,
            price_display=cents_to_display(item.price),
            sold=item.sold,
        )


class MarketItemDetail(MarketItemResponse):
    metadata_reference: str | None
    registry_holder: str | None

    @classmethod
    def from_parts(
        cls, item: MarketItem, registry_item: RegistryItem | None
    ) -> "MarketItemDetail":
        base = MarketItemResponse.from_domain(item)
        return cls(
            **base.model_dump(),
            metadata_reference=registry_item.metadata_reference if registry_item else None,
            registry_holder=registry_item.holder if registry_item else None,
        )


class MarketItemListResponse(BaseModel):
    items: list[MarketItemResponse]
    total: int

    @classmethod
    def from_domain(cls, items: list[MarketItem]) -> "MarketItemListResponse":
        return cls(
            items=[MarketItemResponse.from_domain(i) for i in items],
            total=len(items),
        )


class ListingFeeResponse(BaseModel):
    listing_fee_cents: int
    listing_fee_display: str

    @classmethod
    def from_cents(cls, fee: int) -> "ListingFeeResponse":
        return cls(listing_fee_cents=fee, listing_fee_display=cents_to_display(fee))


class ListItemResponse(BaseModel):
    item_id: int
    item: MarketItemResponse
