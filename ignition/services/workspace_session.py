from datetime import datetime
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ignition.core.constants import DEFAULT_BOARD_COLOR, CardStatus, SessionPhase
from ignition.core.exceptions.domain import ResourceNotFoundError, ValidationError
from ignition.schemas.board import Board, BoardUpdate
from ignition.schemas.card import Card, CardUpdate
from ignition.schemas.workspace import WorkspaceSlice
from ignition.services.board_sequencer import BoardSequencer
from ignition.services.card_tree import CardTree
from ignition.services.drag_drop import DragDropCoordinator
from ignition.services.persistence import PersistenceSync


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex}"


class WorkspaceSession:
    """The boards and cards of the workspace on screen, and every way to change them.

    Each mutating operation applies to the in-memory working set first and then
    saves the slice through :class:`PersistenceSync`. Operations that change
    nothing (blank titles, rejected drops) do not save.
    """

    def __init__(self, sync: PersistenceSync):
        self.sync = sync
        self.working_set = WorkspaceSlice(workspace_id="")
        self.drag = DragDropCoordinator(self.working_set)
        self._dirty = False

    # ─── State ───────────────────────────────────────────────────────

    @property
    def workspace_id(self) -> str | None:
        return self.working_set.workspace_id or None

    @property
    def phase(self) -> SessionPhase:
        return self.sync.phase

    @property
    def boards(self) -> list[Board]:
        return self.working_set.boards

    @property
    def cards(self) -> list[Card]:
        return self.working_set.cards

    def card_tree(self) -> CardTree:
        return CardTree(self.working_set.cards)

    def cards_on_board(self, board_id: str) -> list[Card]:
        return [c for c in self.working_set.cards if c.board_id == board_id]

    def _require_board(self, board_id: str) -> Board:
        board = self.working_set.get_board(board_id)
        if board is None:
            raise ResourceNotFoundError("Board", board_id)
        return board

    def _require_card(self, card_id: str) -> Card:
        card = self.working_set.get_card(card_id)
        if card is None:
            raise ResourceNotFoundError("Card", card_id)
        return card

    # ─── Loading / saving ────────────────────────────────────────────

    def _replace_working_set(self, loaded: WorkspaceSlice) -> None:
        self.working_set.workspace_id = loaded.workspace_id
        self.working_set.boards = loaded.boards
        self.working_set.cards = loaded.cards
        BoardSequencer(self.working_set.boards).densify()
        self.drag.end_drag()
        self._dirty = False

    async def open(self, workspace_id: int | str) -> None:
        """Switch to ``workspace_id``, saving the outgoing workspace's pending edits first."""
        if self._dirty and self.workspace_id is not None:
            await self.flush()
        await self.sync.load(workspace_id, on_loaded=self._replace_working_set)

    def close(self) -> None:
        """Forget the working set without saving (its workspace is gone)."""
        self._replace_working_set(WorkspaceSlice(workspace_id=""))

    async def flush(self) -> bool:
        if not self._dirty or self.workspace_id is None:
            return False
        saved = await self.sync.save(self.workspace_id, self.working_set.boards, self.working_set.cards)
        if saved:
            self._dirty = False
        return saved

    async def _commit(self, changed: bool) -> bool:
        if changed:
            self._dirty = True
            await self.flush()
        return changed

    # ─── Boards ──────────────────────────────────────────────────────

    async def create_board(
        self, title: str, *, description: str = "", color: str = DEFAULT_BOARD_COLOR
    ) -> Board | None:
        if self.workspace_id is None:
            raise ValidationError("No workspace is open")
        if not title.strip():
            return None

        board = Board(
            id=_new_id("board"),
            workspace_id=self.workspace_id,
            title=title.strip(),
            description=description,
            color=color,
        )
        BoardSequencer(self.working_set.boards).append(board)
        logger.info(f"Board created: {board.title} ({board.id}) in workspace {self.workspace_id}")
        await self._commit(True)
        return board

    async def update_board(self, board_id: str, **fields) -> bool:
        """Change a board's title, description or color. A blank title is refused."""
        board = self._require_board(board_id)
        try:
            update = BoardUpdate(**fields)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid board update: {e}") from e

        data = update.model_dump(exclude_none=True)
        if "title" in data:
            if not data["title"].strip():
                return False
            data["title"] = data["title"].strip()

        changes = {k: v for k, v in data.items() if getattr(board, k) != v}
        for key, value in changes.items():
            setattr(board, key, value)
        return await self._commit(bool(changes))

    async def rename_board(self, board_id: str, title: str) -> bool:
        return await self.update_board(board_id, title=title)

    def board_deletion_impact(self, board_id: str) -> int:
        """How many cards deleting ``board_id`` would remove."""
        self._require_board(board_id)
        return len(self._board_cascade(board_id))

    def _board_cascade(self, board_id: str) -> set[str]:
        tree = CardTree(self.working_set.cards)
        doomed: set[str] = set()
        for card in self.working_set.cards:
            if card.board_id == board_id and card.id not in doomed:
                doomed |= tree.cascade_delete_set(card.id)
        return doomed

    async def delete_board(self, board_id: str) -> set[str]:
        """Delete a board and every card on it, with their descendants. Returns removed card ids."""
        self._require_board(board_id)
        doomed = self._board_cascade(board_id)

        self.working_set.cards = [c for c in self.working_set.cards if c.id not in doomed]
        BoardSequencer(self.working_set.boards).remove(board_id)
        logger.info(f"Board {board_id} deleted with {len(doomed)} card(s)")
        await self._commit(True)
        return doomed

    async def reorder_board(self, board_id: str, target_board_id: str) -> bool:
        return await self._commit(self.drag.reorder_board(board_id, target_board_id))

    # ─── Cards ───────────────────────────────────────────────────────

    async def create_card(
        self,
        board_id: str,
        title: str,
        *,
        details: str = "",
        parent_id: str | None = None,
        due_date: datetime | None = None,
        status: CardStatus = CardStatus.NONE,
    ) -> Card | None:
        self._require_board(board_id)
        if parent_id is not None:
            self._require_card(parent_id)
        if not title.strip():
            return None

        card = Card(
            id=_new_id("card"),
            board_id=board_id,
            workspace_id=self.working_set.workspace_id,
            title=title.strip(),
            details=details,
            parent_id=parent_id,
            due_date=due_date,
            status=status,
        )
        self.working_set.cards.append(card)
        logger.info(f"Card created: {card.title} ({card.id}) on board {board_id}")
        await self._commit(True)
        return card

    async def update_card(self, card_id: str, **fields) -> bool:
        """Edit a card's own fields.

        Board, parent and workspace membership are not editable here; use
        :meth:`move_card_to_board` and :meth:`reparent_card`.
        """
        card = self._require_card(card_id)
        try:
            update = CardUpdate(**fields)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid card update: {e}") from e

        data = update.model_dump(exclude_unset=True)
        data = {k: v for k, v in data.items() if v is not None or k == "due_date"}
        if "title" in data:
            if not data["title"].strip():
                return False
            data["title"] = data["title"].strip()

        changes = {k: v for k, v in data.items() if getattr(card, k) != v}
        for key, value in changes.items():
            setattr(card, key, value)
        return await self._commit(bool(changes))

    def card_deletion_impact(self, card_id: str) -> int:
        """How many descendants deleting ``card_id`` would remove along with it."""
        self._require_card(card_id)
        return len(CardTree(self.working_set.cards).descendants_of(card_id))

    async def delete_card(self, card_id: str) -> set[str]:
        """Delete a card and all its descendants. Returns the removed ids."""
        self._require_card(card_id)
        doomed = CardTree(self.working_set.cards).cascade_delete_set(card_id)
        self.working_set.cards = [c for c in self.working_set.cards if c.id not in doomed]
        logger.info(f"Card {card_id} deleted with {len(doomed) - 1} descendant(s)")
        await self._commit(True)
        return doomed

    async def reparent_card(self, card_id: str, target_card_id: str) -> bool:
        return await self._commit(self.drag.reparent_card(card_id, target_card_id))

    async def move_card_to_board(self, card_id: str, target_board_id: str) -> bool:
        return await self._commit(self.drag.move_card_to_board(card_id, target_board_id))

    # ─── Drag gestures ───────────────────────────────────────────────

    def start_card_drag(self, card_id: str) -> None:
        self.drag.start_card_drag(card_id)

    def start_board_drag(self, board_id: str) -> None:
        self.drag.start_board_drag(board_id)

    def end_drag(self) -> None:
        self.drag.end_drag()

    async def drop_on_card(self, target_card_id: str) -> bool:
        return await self._commit(self.drag.drop_on_card(target_card_id))

    async def drop_on_board(self, target_board_id: str) -> bool:
        return await self._commit(self.drag.drop_on_board(target_board_id))
