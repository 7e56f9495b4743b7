"""MarketplaceApplicationService — thin composition layer.

Delegates to the MarketplaceEngine (which owns locking, commit and rollback)
and converts domain objects to response schemas.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_ledger.application.engine import MarketplaceEngine, get_marketplace_engine
from src.mk_ledger.application.schemas import (
    ListingFeeResponse,
    ListItemRequest,
    ListItemResponse,
    MarketItemDetail,
    MarketItemListResponse,
    MarketItemResponse,
    PurchaseItemRequest,
    RelistItemRequest,
)


class MarketplaceApplicationService:
    def __init__(self, engine: MarketplaceEngine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> MarketplaceEngine:
        # Resolved lazily so tests can swap the process-wide engine
        return self._engine or get_marketplace_engine()

    async def get_listing_fee(self, db: AsyncSession) -> ListingFeeResponse:
        fee = await self.engine.get_listing_fee(db)
        return ListingFeeResponse.from_cents(fee)

    async def set_listing_fee(
        self, db: AsyncSession, caller: str, new_fee: int
    ) -> ListingFeeResponse:
        fee = await self.engine.set_listing_fee(caller, new_fee, db)
        return ListingFeeResponse.from_cents(fee)

    async def list_new_item(
        self, db: AsyncSession, caller: str, req: ListItemRequest
    ) -> ListItemResponse:
        item = await self.engine.list_new_item(
            caller, req.metadata_reference, req.price_cents, req.fee_paid_cents, db
        )
        return ListItemResponse(item_id=item.item_id, item=MarketItemResponse.from_domain(item))

    async def relist_item(
        self, db: AsyncSession, caller: str, item_id: int, req: RelistItemRequest
    ) -> MarketItemResponse:
        item = await self.engine.relist_item(
            caller, item_id, req.price_cents, req.fee_paid_cents, db
        )
        return MarketItemResponse.from_domain(item)

    async def purchase_item(
        self, db: AsyncSession, caller: str, item_id: int, req: PurchaseItemRequest
    ) -> MarketItemResponse:
        item = await self.engine.purchase_item(caller, item_id, req.payment_cents, db)
        return MarketItemResponse.from_domain(item)

    async def get_item(self, db: AsyncSession, item_id: int) -> MarketItemDetail:
        item, registry_item = await self.engine.get_item(item_id, db)
        return MarketItemDetail.from_parts(item, registry_item)

    async def list_unsold_items(self, db: AsyncSession) -> MarketItemListResponse:
        return MarketItemListResponse.from_domain(await self.engine.list_unsold_items(db))

    async def list_owned_items(self, db: AsyncSession, party: str) -> MarketItemListResponse:
        return MarketItemListResponse.from_domain(await self.engine.list_owned_items(party, db))

    async def list_seller_items(self, db: AsyncSession, party: str) -> MarketItemListResponse:
        return MarketItemListResponse.from_domain(await self.engine.list_seller_items(party, db))
