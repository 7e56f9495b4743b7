"""Admin application service — ledger stats and invariant audit."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.cents import cents_to_display
from src.mk_ledger.application.engine import MarketplaceEngine, get_marketplace_engine


class AdminService:
    def __init__(self, engine: MarketplaceEngine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> MarketplaceEngine:
        return self._engine or get_marketplace_engine()

    async def get_ledger_stats(self, db: AsyncSession) -> dict[str, Any]:
        stats = await self.engine.get_stats(db)
        stats["listing_fee_display"] = cents_to_display(stats["listing_fee"])
        stats["balance_display"] = cents_to_display(stats["balance"])
        return stats

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, object]:
        """Run INV-1..INV-4 against the live ledger."""
        violations = await self.engine.verify_invariants(db)
        return {"ok": len(violations) == 0, "violations": violations}
