from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ignition.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Generic repository with async CRUD operations."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def create_one(
        self,
        schema: CreateSchemaType,
        *,
        auto_commit: bool = True,
    ) -> ModelType:
        """Create a single record."""
        instance = self.model(**schema.model_dump())
        self.session.add(instance)
        if auto_commit:
            await self.session.commit()
            await self.session.refresh(instance)
        else:
            await self.session.flush()
        return instance

    async def update_instance(
        self,
        instance: ModelType,
        schema: UpdateSchemaType,
        *,
        auto_commit: bool = True,
    ) -> ModelType:
        """Apply the set fields of ``schema`` to an already loaded row."""
        for key, value in schema.model_dump(exclude_none=True).items():
            setattr(instance, key, value)
        if auto_commit:
            await self.session.commit()
            await self.session.refresh(instance)
        else:
            await self.session.flush()
        return instance

    async def delete_by_ids(self, obj_ids: list[int], *, auto_commit: bool = True) -> int:
        """Delete multiple records by IDs. Returns count of deleted."""
        stmt = delete(self.model).where(self.model.id.in_(obj_ids))
        result = await self.session.execute(stmt)
        if auto_commit:
            await self.session.commit()
        return result.rowcount  # type: ignore

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        result = await self.session.execute(stmt)
        return result.scalar_one()
