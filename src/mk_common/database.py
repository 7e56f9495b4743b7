"""PostgreSQL access for the registry and ledger repositories.

One async engine per process. Request handlers get a session through
``get_db_session``; MarketplaceEngine decides when that session commits or
rolls back, so the dependency itself never commits.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Metadata for the registry_items, market_items and ledger_* mappings."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=10,
    max_overflow=5,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Per-request session; closed (and any open transaction dropped) on exit."""
    async with async_session_factory() as session:
        yield session
