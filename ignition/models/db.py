from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ignition.core.config import get_settings
from ignition.models.base import Base


def build_engine(db_url: str, *, echo: bool = False) -> AsyncEngine:
    return create_async_engine(db_url, echo=echo, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@lru_cache
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return build_engine(settings.db_url, echo=settings.debug)


async def create_tables(engine: AsyncEngine) -> None:
    """Create every mapped table that does not exist yet."""
    from ignition.models.kv_entry import KvEntry  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
