"""MarketplaceEngine — serialized, persistent front for MarketplaceLedger.

The ledger and its registry live in memory and are rebuilt lazily from the
database. Every operation runs under one asyncio.Lock, so no two calls ever
interleave. A mutating call:

  1. applies the operation to the in-memory ledger (all-or-nothing),
  2. writes the touched item, its registry row, the ledger_state row, the
     drained fund movements and the drained events,
  3. commits.

If step 2 or 3 fails the session is rolled back and the in-memory state is
evicted, so the next call rebuilds it from what was actually committed.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mk_common.errors import AppError, InternalError
from src.mk_ledger.domain.invariants import verify_ledger_invariants
from src.mk_ledger.domain.ledger import MarketplaceLedger
from src.mk_ledger.domain.models import LedgerState, MarketItem
from src.mk_ledger.domain.repository import LedgerRepositoryProtocol
from src.mk_ledger.infrastructure.persistence import LedgerRepository
from src.mk_registry.domain.models import RegistryItem
from src.mk_registry.domain.registry import RegistryRepositoryProtocol
from src.mk_registry.infrastructure.memory import InMemoryItemRegistry
from src.mk_registry.infrastructure.persistence import RegistryRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MarketplaceEngine:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        registry_repo: RegistryRepositoryProtocol | None = None,
        marketplace_id: str | None = None,
        operator_id: str | None = None,
        default_listing_fee: int | None = None,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._registry_repo: RegistryRepositoryProtocol = registry_repo or RegistryRepository()
        self._marketplace_id = marketplace_id or settings.MARKETPLACE_PARTY_ID
        self._operator_id = operator_id or settings.OPERATOR_PARTY_ID
        self._default_listing_fee = (
            settings.DEFAULT_LISTING_FEE_CENTS
            if default_listing_fee is None
            else default_listing_fee
        )
        self._ledger: MarketplaceLedger | None = None
        self._registry: InMemoryItemRegistry | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._ledger is not None

    async def rebuild(self, db: AsyncSession) -> None:
        """Load ledger and registry state from DB (startup or after eviction)."""
        state = await self._repo.get_state(db)
        if state is None:
            state = LedgerState(
                next_item_id=1,
                sold_count=0,
                listing_fee=self._default_listing_fee,
                balance=0,
            )
        items = await self._repo.list_items(db)
        registry_items = await self._registry_repo.list_items(db)

        self._registry = InMemoryItemRegistry(registry_items, next_item_id=state.next_item_id)
        self._ledger = MarketplaceLedger(
            registry=self._registry,
            marketplace_id=self._marketplace_id,
            operator_id=self._operator_id,
            listing_fee=state.listing_fee,
            items=items,
            next_item_id=state.next_item_id,
            sold_count=state.sold_count,
            balance=state.balance,
        )
        logger.info(
            "Ledger rebuilt: items=%d next_item_id=%d sold=%d fee=%d balance=%d",
            len(items),
            state.next_item_id,
            state.sold_count,
            state.listing_fee,
            state.balance,
        )

    # -- Mutations -----------------------------------------------------------

    async def set_listing_fee(self, caller: str, new_fee: int, db: AsyncSession) -> int:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            self._apply(lambda: ledger.set_listing_fee(caller, new_fee))
            await self._persist(db, [])
            return ledger.get_listing_fee()

    async def list_new_item(
        self,
        caller: str,
        metadata_reference: str,
        price: int,
        fee_paid: int,
        db: AsyncSession,
    ) -> MarketItem:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            item_id = self._apply(
                lambda: ledger.list_new_item(caller, metadata_reference, price, fee_paid)
            )
            await self._persist(db, [item_id])
            return ledger.get_item(item_id)

    async def relist_item(
        self, caller: str, item_id: int, price: int, fee_paid: int, db: AsyncSession
    ) -> MarketItem:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            self._apply(lambda: ledger.relist_item(caller, item_id, price, fee_paid))
            await self._persist(db, [item_id])
            return ledger.get_item(item_id)

    async def purchase_item(
        self, caller: str, item_id: int, payment: int, db: AsyncSession
    ) -> MarketItem:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            self._apply(lambda: ledger.purchase_item(caller, item_id, payment))
            await self._persist(db, [item_id])
            return ledger.get_item(item_id)

    # -- Queries -------------------------------------------------------------

    async def get_listing_fee(self, db: AsyncSession) -> int:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            return ledger.get_listing_fee()

    async def list_unsold_items(self, db: AsyncSession) -> list[MarketItem]:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            return ledger.list_unsold_items()

    async def list_owned_items(self, party: str, db: AsyncSession) -> list[MarketItem]:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            return ledger.list_owned_items(party)

    async def list_seller_items(self, party: str, db: AsyncSession) -> list[MarketItem]:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            return ledger.list_seller_items(party)

    async def get_item(
        self, item_id: int, db: AsyncSession
    ) -> tuple[MarketItem, RegistryItem | None]:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            item = ledger.get_item(item_id)
            assert self._registry is not None
            return item, self._registry.get_item(item_id)

    async def get_stats(self, db: AsyncSession) -> dict[str, Any]:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            state = ledger.state()
            return {
                "items_created": state.next_item_id - 1,
                "next_item_id": state.next_item_id,
                "sold_count": state.sold_count,
                "unsold_count": len(ledger.list_unsold_items()),
                "listing_fee": state.listing_fee,
                "balance": state.balance,
            }

    async def verify_invariants(self, db: AsyncSession) -> list[str]:
        async with self._lock:
            ledger = await self._ensure_loaded(db)
            return verify_ledger_invariants(ledger)

    # -- Internals -----------------------------------------------------------

    async def _ensure_loaded(self, db: AsyncSession) -> MarketplaceLedger:
        if self._ledger is None:
            await self.rebuild(db)
        assert self._ledger is not None
        return self._ledger

    def _evict(self) -> None:
        self._ledger = None
        self._registry = None

    def _apply(self, operation: Callable[[], T]) -> T:
        """Run a ledger operation; caller errors leave the ledger untouched."""
        try:
            return operation()
        except InternalError:
            # The registry is not covered by the ledger's rollback
            self._evict()
            raise
        except AppError:
            raise
        except Exception:
            self._evict()
            raise

    async def _persist(self, db: AsyncSession, item_ids: list[int]) -> None:
        ledger = self._ledger
        registry = self._registry
        assert ledger is not None and registry is not None
        movements = ledger.drain_fund_movements()
        events = ledger.drain_events()
        try:
            for item_id in item_ids:
                # registry row first: market_items references it
                registry_item = registry.get_item(item_id)
                if registry_item is not None:
                    await self._registry_repo.save_item(db, registry_item)
                await self._repo.save_item(db, ledger.get_item(item_id))
            await self._repo.save_state(db, ledger.state())
            await self._repo.append_fund_movements(db, movements)
            await self._repo.append_events(db, events)
            await db.commit()
        except Exception:
            await db.rollback()
            self._evict()
            logger.warning("Persist failed for items=%s; ledger evicted", item_ids)
            raise
        logger.info(
            "Committed items=%s movements=%d events=%d", item_ids, len(movements), len(events)
        )


_engine: MarketplaceEngine | None = None


def get_marketplace_engine() -> MarketplaceEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = MarketplaceEngine()
    return _engine
