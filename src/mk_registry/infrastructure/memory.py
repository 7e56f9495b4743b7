"""InMemoryItemRegistry — process-local implementation of ItemRegistryProtocol.

Rebuilt from the registry_items table by the marketplace engine; every
change it makes is written back by the engine in the same transaction as
the ledger change that caused it.
"""

import logging
from collections.abc import Iterable

from src.mk_common.errors import CustodyTransferError, ItemNotFoundError
from src.mk_common.id_generator import SequenceGenerator
from src.mk_registry.domain.models import RegistryItem

logger = logging.getLogger(__name__)


class InMemoryItemRegistry:
    def __init__(
        self,
        items: Iterable[RegistryItem] = (),
        next_item_id: int | None = None,
    ) -> None:
        self._items: dict[int, RegistryItem] = {item.item_id: item for item in items}
        if next_item_id is None:
            next_item_id = max(self._items, default=0) + 1
        self._ids = SequenceGenerator(next_item_id)

    def mint(self, new_owner: str) -> int:
        item_id = self._ids.next_id()
        self._items[item_id] = RegistryItem(item_id=item_id, holder=new_owner)
        logger.debug("Minted item %d for %s", item_id, new_owner)
        return item_id

    def attach_metadata(self, item_id: int, reference: str) -> None:
        self._require(item_id).metadata_reference = reference

    def transfer_custody(self, item_id: int, from_party: str, to_party: str) -> None:
        item = self._require(item_id)
        if item.holder != from_party:
            raise CustodyTransferError(item_id, from_party)
        item.holder = to_party

    def current_holder(self, item_id: int) -> str:
        return self._require(item_id).holder

    def get_item(self, item_id: int) -> RegistryItem | None:
        return self._items.get(item_id)

    @property
    def next_item_id(self) -> int:
        return self._ids.peek()

    def _require(self, item_id: int) -> RegistryItem:
        item = self._items.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item
