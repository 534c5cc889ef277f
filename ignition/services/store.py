"""Key-value stores backing the shared ``Workspaces`` / ``AllBoards`` / ``AllCards`` collections.

Every backend exposes the same three coroutines (``get``, ``set``, ``delete``) over
string keys and JSON-text values. The store is process-wide and never locked;
two writers racing on the same keys (two browser tabs, say) may lose updates.
"""

from typing import Protocol

import redis.asyncio as aioredis
from loguru import logger
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ignition.core.config import get_settings
from ignition.core.exceptions.domain import StoreError
from ignition.models.db import build_session_factory, create_tables, get_engine
from ignition.repos.kv_entry import KvEntryRepo


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store. Lives as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class SqlStore:
    """SQLite (or any SQLAlchemy async URL) store: one ``kv_entry`` row per key."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        self._ready = False

    async def _ensure_tables(self) -> None:
        if not self._ready:
            await create_tables(self._engine)
            self._ready = True

    async def get(self, key: str) -> str | None:
        try:
            await self._ensure_tables()
            async with self._session_factory() as session:
                entry = await KvEntryRepo(session).get_by_key(key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error(f"SQL store read failed (key={key}): {e}")
            raise StoreError(f"Could not read '{key}'") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self._ensure_tables()
            async with self._session_factory() as session:
                try:
                    await KvEntryRepo(session).upsert(key, value)
                except SQLAlchemyError:
                    await session.rollback()
                    raise
        except SQLAlchemyError as e:
            logger.error(f"SQL store write failed (key={key}): {e}")
            raise StoreError(f"Could not write '{key}'") from e

    async def delete(self, key: str) -> None:
        try:
            await self._ensure_tables()
            async with self._session_factory() as session:
                try:
                    await KvEntryRepo(session).delete_by_key(key)
                except SQLAlchemyError:
                    await session.rollback()
                    raise
        except SQLAlchemyError as e:
            logger.error(f"SQL store delete failed (key={key}): {e}")
            raise StoreError(f"Could not delete '{key}'") from e


class RedisStore:
    """Redis store. Manual keys, no TTL.

    Unlike a cache, this is the primary copy of the data: a failed call raises
    :class:`StoreError` instead of reading as a miss.
    """

    def __init__(self, redis_url: str, prefix: str = "ignition"):
        self._redis_url = redis_url
        self._prefix = prefix

    def _get_client(self) -> aioredis.Redis:
        """Create a fresh Redis client each time to avoid event loop issues."""
        return aioredis.from_url(self._redis_url, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> str | None:
        try:
            client = self._get_client()
            try:
                return await client.get(self._key(key))
            finally:
                await client.aclose()
        except (RedisError, OSError) as e:
            logger.error(f"Redis get failed (key={key}): {e}")
            raise StoreError(f"Could not read '{key}'") from e

    async def set(self, key: str, value: str) -> None:
        try:
            client = self._get_client()
            try:
                await client.set(self._key(key), value)
            finally:
                await client.aclose()
        except (RedisError, OSError) as e:
            logger.error(f"Redis set failed (key={key}): {e}")
            raise StoreError(f"Could not write '{key}'") from e

    async def delete(self, key: str) -> None:
        try:
            client = self._get_client()
            try:
                await client.delete(self._key(key))
            finally:
                await client.aclose()
        except (RedisError, OSError) as e:
            logger.error(f"Redis delete failed (key={key}): {e}")
            raise StoreError(f"Could not delete '{key}'") from e


# Singleton
_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    """Return the process-wide store for the configured backend."""
    global _store
    if _store is None:
        settings = get_settings()
        if settings.store_backend == "redis":
            _store = RedisStore(settings.redis_url, prefix=settings.redis_prefix)
        elif settings.store_backend == "memory":
            _store = MemoryStore()
        else:
            settings.db_directory.mkdir(parents=True, exist_ok=True)
            _store = SqlStore(get_engine())
        logger.info(f"Using {settings.store_backend} key-value store")
    return _store
