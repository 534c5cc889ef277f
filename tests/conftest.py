"""Shared fixtures: an in-memory store stands in for the shared key-value store."""

import pytest

from ignition.schemas.board import Board
from ignition.schemas.card import Card
from ignition.schemas.workspace import WorkspaceSlice
from ignition.services.persistence import PersistenceSync
from ignition.services.store import MemoryStore
from ignition.services.workspace_service import WorkspaceService
from ignition.services.workspace_session import WorkspaceSession


def make_board(board_id: str, order: int = 0, workspace_id: str = "1", title: str | None = None) -> Board:
    return Board(id=board_id, workspace_id=workspace_id, title=title or board_id, order=order)


def make_card(
    card_id: str,
    board_id: str = "b1",
    parent_id: str | None = None,
    workspace_id: str = "1",
) -> Card:
    return Card(
        id=card_id,
        board_id=board_id,
        workspace_id=workspace_id,
        title=card_id,
        parent_id=parent_id,
    )


def snapshot(cards: list[Card]) -> list[dict]:
    return [c.model_dump() for c in cards]


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sync(store) -> PersistenceSync:
    return PersistenceSync(store)


@pytest.fixture
def service(store) -> WorkspaceService:
    return WorkspaceService(store)


@pytest.fixture
async def session(sync) -> WorkspaceSession:
    session = WorkspaceSession(sync)
    await session.open(1)
    return session


@pytest.fixture
def forest() -> WorkspaceSlice:
    """Two boards; on b1 a tree a -> (b -> c, d), plus a lone card e."""
    return WorkspaceSlice(
        workspace_id="1",
        boards=[make_board("b1", 1), make_board("b2", 2)],
        cards=[
            make_card("a"),
            make_card("b", parent_id="a"),
            make_card("c", parent_id="b"),
            make_card("d", parent_id="a"),
            make_card("e"),
        ],
    )
