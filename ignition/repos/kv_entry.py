from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ignition.models.kv_entry import KvEntry
from ignition.repos.base import BaseRepository
from ignition.schemas.kv_entry import KvEntryCreate, KvEntryUpdate


class KvEntryRepo(BaseRepository[KvEntry, KvEntryCreate, KvEntryUpdate]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, KvEntry)

    async def get_by_key(self, key: str) -> KvEntry | None:
        stmt = select(KvEntry).where(KvEntry.key == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, key: str, value: str, *, auto_commit: bool = True) -> KvEntry:
        """Create the entry or overwrite its value."""
        existing = await self.get_by_key(key)
        if existing:
            return await self.update_instance(
                existing, KvEntryUpdate(value=value), auto_commit=auto_commit
            )
        return await self.create_one(KvEntryCreate(key=key, value=value), auto_commit=auto_commit)

    async def delete_by_key(self, key: str, *, auto_commit: bool = True) -> bool:
        existing = await self.get_by_key(key)
        if not existing:
            return False
        return await self.delete_by_ids([existing.id], auto_commit=auto_commit) > 0
