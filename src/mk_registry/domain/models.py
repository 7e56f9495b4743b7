"""Domain models for mk_registry — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass


@dataclass
class RegistryItem:
    item_id: int
    holder: str
    metadata_reference: str | None = None
