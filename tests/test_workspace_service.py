"""
Tests for WorkspaceService: workspace CRUD, cascade delete and the persisted selection.
"""
import json

import pytest

from ignition.core.constants import SessionPhase, StoreKey
from ignition.core.exceptions.domain import ResourceNotFoundError
from ignition.services.persistence import PersistenceSync
from ignition.services.workspace_session import WorkspaceSession


async def test_create_and_list_workspaces(service):
    first = await service.create_workspace("Personal")
    second = await service.create_workspace("  Work  ")
    assert (first.id, first.order) == (1, 1)
    assert (second.id, second.name, second.order) == (2, "Work", 2)
    assert [w.name for w in await service.list_workspaces()] == ["Personal", "Work"]


async def test_blank_workspace_name_is_refused(store, service):
    assert await service.create_workspace("   ") is None
    assert StoreKey.WORKSPACES not in store.data


async def test_new_ids_follow_the_highest_existing_id(service):
    await service.create_workspace("A")
    b = await service.create_workspace("B")
    await service.delete_workspace(b.id)
    c = await service.create_workspace("C")
    assert c.id == 2
    d = await service.create_workspace("D")
    assert d.id == 3


async def test_rename_workspace(service):
    ws = await service.create_workspace("Old")
    assert await service.rename_workspace(ws.id, "New")
    assert not await service.rename_workspace(ws.id, " ")
    assert (await service.get_workspace(ws.id)).name == "New"
    with pytest.raises(ResourceNotFoundError):
        await service.rename_workspace(99, "x")


async def test_malformed_workspaces_are_skipped(store, service):
    store.data[StoreKey.WORKSPACES] = json.dumps([{"id": 1, "name": "ok", "order": 1}, {"name": "no id"}])
    assert [w.name for w in await service.list_workspaces()] == ["ok"]


async def test_delete_workspace_removes_only_its_records(store, service):
    a = await service.create_workspace("A")
    b = await service.create_workspace("B")

    session_a = WorkspaceSession(PersistenceSync(store))
    await session_a.open(a.id)
    board_a = await session_a.create_board("A board")
    await session_a.create_card(board_a.id, "A card")

    session_b = WorkspaceSession(PersistenceSync(store))
    await session_b.open(b.id)
    board_b = await session_b.create_board("B board")
    card_b = await session_b.create_card(board_b.id, "B card")

    assert await service.workspace_deletion_impact(a.id) == (1, 1)
    assert await service.delete_workspace(a.id, session=session_a)

    assert session_a.workspace_id is None
    assert session_a.phase is SessionPhase.IDLE
    assert session_a.cards == []

    boards = json.loads(store.data[StoreKey.ALL_BOARDS])
    cards = json.loads(store.data[StoreKey.ALL_CARDS])
    assert [r["id"] for r in boards] == [board_b.id]
    assert [r["id"] for r in cards] == [card_b.id]
    assert [w.id for w in await service.list_workspaces()] == [b.id]


async def test_delete_unknown_workspace(service):
    with pytest.raises(ResourceNotFoundError):
        await service.delete_workspace(7)


async def test_selected_workspace_round_trip(service):
    assert await service.get_selected_workspace() is None
    ws = await service.create_workspace("Home")
    await service.set_selected_workspace(ws.id)
    assert await service.get_selected_workspace() == ws.id
    await service.set_selected_workspace(None)
    assert await service.get_selected_workspace() is None


async def test_selection_is_dropped_with_its_workspace(store, service):
    ws = await service.create_workspace("Temp")
    await service.set_selected_workspace(ws.id)
    await service.delete_workspace(ws.id)
    assert await service.get_selected_workspace() is None
    assert StoreKey.SELECTED_WORKSPACE not in store.data


@pytest.mark.parametrize("raw", ["garbage", "\"1\"", "true", "null"])
async def test_malformed_selection_reads_as_none(store, service, raw):
    await service.create_workspace("One")
    store.data[StoreKey.SELECTED_WORKSPACE] = raw
    assert await service.get_selected_workspace() is None
