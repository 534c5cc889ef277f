"""Loads and saves one workspace's boards and cards against the shared store.

``AllBoards`` and ``AllCards`` each hold the records of every workspace in one flat
JSON array. Saving is a read-modify-write: read the array, drop the records of the
workspace being saved, append the in-memory slice, write it back. Records of other
workspaces are copied through untouched, including ones this version cannot parse.
"""

import asyncio
import json
from collections.abc import Callable, Iterable
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ignition.core.constants import SessionPhase, StoreKey
from ignition.core.exceptions.domain import ValidationError
from ignition.schemas.board import Board
from ignition.schemas.card import Card
from ignition.schemas.workspace import WorkspaceSlice
from ignition.services.store import KeyValueStore


async def read_collection(store: KeyValueStore, key: str) -> list[Any]:
    """Read a JSON array from the store. An absent key or malformed data reads as empty.

    A failing store raises :class:`StoreError`; it never reads as an empty collection.
    """
    raw = await store.get(key)
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Store entry '{key}' is not valid JSON, treating as empty: {e}")
        return []
    if not isinstance(data, list):
        logger.warning(f"Store entry '{key}' is not a list, treating as empty")
        return []
    return data


async def write_collection(store: KeyValueStore, key: str, records: list[Any]) -> None:
    await store.set(key, json.dumps(records))


def belongs_to(record: Any, workspace_id: str) -> bool:
    return isinstance(record, dict) and str(record.get("workspaceId")) == workspace_id


def _parse_records(records: Iterable[Any], model: type[Board] | type[Card], key: str) -> list:
    parsed = []
    for record in records:
        try:
            parsed.append(model.model_validate(record))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed record in '{key}' (id={record.get('id')!r}): {e}")
    return parsed


class PersistenceSync:
    """Repository for the workspace-scoped slice of the shared store.

    ``phase`` is ``LOADING`` from the start of :meth:`load` until the loaded data
    has been handed over and one scheduling tick has passed, and ``READY`` after
    that. :meth:`save` only writes in ``READY`` and only for the loaded workspace,
    so a reaction fired by the load itself can never write a stale slice back.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self.phase = SessionPhase.IDLE
        self.workspace_id: str | None = None

    async def load(
        self,
        workspace_id: int | str,
        on_loaded: Callable[[WorkspaceSlice], None] | None = None,
    ) -> WorkspaceSlice:
        """Read the slice for ``workspace_id``; boards come back sorted by order.

        ``on_loaded`` is called with the slice while the guard is still up.
        """
        ws = str(workspace_id)
        self.phase = SessionPhase.LOADING
        self.workspace_id = ws

        try:
            raw_boards = [r for r in await read_collection(self._store, StoreKey.ALL_BOARDS) if belongs_to(r, ws)]
            raw_cards = [r for r in await read_collection(self._store, StoreKey.ALL_CARDS) if belongs_to(r, ws)]

            boards = _parse_records(raw_boards, Board, StoreKey.ALL_BOARDS)
            boards.sort(key=lambda b: b.order)
            cards = _parse_records(raw_cards, Card, StoreKey.ALL_CARDS)

            loaded = WorkspaceSlice(workspace_id=ws, boards=boards, cards=cards)
            if on_loaded is not None:
                on_loaded(loaded)

            # Release the guard only after anything reacting to on_loaded has run
            await asyncio.sleep(0)
        except BaseException:
            self.phase = SessionPhase.IDLE
            self.workspace_id = None
            raise

        self.phase = SessionPhase.READY
        logger.info(f"Loaded workspace {ws}: {len(boards)} board(s), {len(cards)} card(s)")
        return loaded

    async def save(self, workspace_id: int | str, boards: list[Board], cards: list[Card]) -> bool:
        """Merge the slice into the shared collections. Returns False when skipped."""
        ws = str(workspace_id)
        if self.phase is not SessionPhase.READY:
            logger.debug(f"Save for workspace {ws} skipped (phase={self.phase})")
            return False
        if ws != self.workspace_id:
            logger.warning(f"Save for workspace {ws} skipped: workspace {self.workspace_id} is loaded")
            return False

        foreign = [r.id for r in (*boards, *cards) if r.workspace_id != ws]
        if foreign:
            raise ValidationError(f"Records {foreign} do not belong to workspace {ws}")

        all_boards = await read_collection(self._store, StoreKey.ALL_BOARDS)
        all_cards = await read_collection(self._store, StoreKey.ALL_CARDS)

        merged_boards = [r for r in all_boards if not belongs_to(r, ws)]
        merged_boards.extend(b.to_record() for b in boards)
        merged_cards = [r for r in all_cards if not belongs_to(r, ws)]
        merged_cards.extend(c.to_record() for c in cards)

        await write_collection(self._store, StoreKey.ALL_BOARDS, merged_boards)
        await write_collection(self._store, StoreKey.ALL_CARDS, merged_cards)
        logger.debug(f"Saved workspace {ws}: {len(boards)} board(s), {len(cards)} card(s)")
        return True

    async def delete_workspace_cascade(self, workspace_id: int | str) -> tuple[int, int]:
        """Remove every board and card of a workspace directly from the store.

        Returns ``(boards_removed, cards_removed)``.
        """
        ws = str(workspace_id)
        all_boards = await read_collection(self._store, StoreKey.ALL_BOARDS)
        all_cards = await read_collection(self._store, StoreKey.ALL_CARDS)

        kept_boards = [r for r in all_boards if not belongs_to(r, ws)]
        kept_cards = [r for r in all_cards if not belongs_to(r, ws)]

        await write_collection(self._store, StoreKey.ALL_BOARDS, kept_boards)
        await write_collection(self._store, StoreKey.ALL_CARDS, kept_cards)

        if self.workspace_id == ws:
            self.phase = SessionPhase.IDLE
            self.workspace_id = None

        removed = (len(all_boards) - len(kept_boards), len(all_cards) - len(kept_cards))
        logger.info(f"Deleted workspace {ws} contents: {removed[0]} board(s), {removed[1]} card(s)")
        return removed
