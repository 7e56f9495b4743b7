"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_ledger.domain.models import FundMovement, LedgerEvent, LedgerState, MarketItem


class LedgerRepositoryProtocol(Protocol):
    async def get_state(self, db: AsyncSession) -> LedgerState | None: ...

    async def save_state(self, db: AsyncSession, state: LedgerState) -> None: ...

    async def list_items(self, db: AsyncSession) -> list[MarketItem]: ...

    async def save_item(self, db: AsyncSession, item: MarketItem) -> None: ...

    async def append_fund_movements(
        self, db: AsyncSession, movements: list[FundMovement]
    ) -> None: ...

    async def append_events(self, db: AsyncSession, events: list[LedgerEvent]) -> None: ...
