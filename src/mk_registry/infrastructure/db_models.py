"""SQLAlchemy ORM model for the registry_items table.

Table is created by Alembic migration: alembic/versions/002_create_registry_items.py
Queries go through raw text() SQL; this file is a pure Python mapping.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from src.mk_common.database import Base


class RegistryItemORM(Base):
    __tablename__ = "registry_items"

    item_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    holder: Mapped[str] = mapped_column(String(64), nullable=False)
    metadata_reference: Mapped[str | None] = mapped_column(String(2048), nullable=True)
