"""Item registry capability interface.

The marketplace ledger never owns identifier allocation or custody; it asks
a registry through this Protocol. Any implementation must:
  - mint strictly increasing identifiers starting at 1,
  - refuse a custody transfer whose ``from_party`` is not the current holder
    (raising CustodyTransferError) without changing anything.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_registry.domain.models import RegistryItem


class ItemRegistryProtocol(Protocol):
    def mint(self, new_owner: str) -> int: ...

    def attach_metadata(self, item_id: int, reference: str) -> None: ...

    def transfer_custody(self, item_id: int, from_party: str, to_party: str) -> None: ...

    def current_holder(self, item_id: int) -> str: ...

    def get_item(self, item_id: int) -> RegistryItem | None: ...


class RegistryRepositoryProtocol(Protocol):
    async def list_items(self, db: AsyncSession) -> list[RegistryItem]: ...

    async def save_item(self, db: AsyncSession, item: RegistryItem) -> None: ...
