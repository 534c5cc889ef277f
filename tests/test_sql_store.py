"""
Tests for the SQLite-backed key-value store.
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from ignition.core.constants import FieldSizes
from ignition.core.exceptions.domain import StoreError
from ignition.models.db import build_engine, build_session_factory
from ignition.models.kv_entry import KvEntry
from ignition.repos.kv_entry import KvEntryRepo
from ignition.services.persistence import PersistenceSync
from ignition.services.store import SqlStore
from ignition.services.workspace_session import WorkspaceSession


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ignition.db'}")
    yield engine
    await engine.dispose()


async def test_get_set_delete(engine):
    store = SqlStore(engine)
    assert await store.get("AllBoards") is None

    await store.set("AllBoards", "[]")
    await store.set("AllBoards", "[1]")
    assert await store.get("AllBoards") == "[1]"

    await store.delete("AllBoards")
    assert await store.get("AllBoards") is None
    await store.delete("AllBoards")


def test_key_column_uses_the_short_field_size():
    assert KvEntry.__table__.c.key.type.length == FieldSizes.SHORT

async def test_upsert_keeps_one_row_per_key(engine):
    store = SqlStore(engine)
    await store.set("A", "1")
    await store.set("A", "2")
    await store.set("B", "3")

    async with build_session_factory(engine)() as session:
        assert await KvEntryRepo(session).count() == 2


async def test_session_round_trip_through_sqlite(engine):
    writer = WorkspaceSession(PersistenceSync(SqlStore(engine)))
    await writer.open(1)
    board = await writer.create_board("Todo")
    parent = await writer.create_card(board.id, "Parent")
    await writer.create_card(board.id, "Child", parent_id=parent.id)

    reader = WorkspaceSession(PersistenceSync(SqlStore(engine)))
    await reader.open(1)
    assert [b.model_dump() for b in reader.boards] == [b.model_dump() for b in writer.boards]
    assert [c.model_dump() for c in reader.cards] == [c.model_dump() for c in writer.cards]


async def test_failed_read_raises_instead_of_reading_empty(engine, monkeypatch):
    store = SqlStore(engine)
    await store.set("AllBoards", "[1]")

    async def broken(self, key):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(KvEntryRepo, "get_by_key", broken)
    with pytest.raises(StoreError):
        await store.get("AllBoards")
    with pytest.raises(StoreError):
        await store.set("AllBoards", "[]")
    with pytest.raises(StoreError):
        await store.delete("AllBoards")

    monkeypatch.undo()
    assert await store.get("AllBoards") == "[1]"
