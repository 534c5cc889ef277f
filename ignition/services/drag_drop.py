"""Turns drag-and-drop gestures into board reorders, card reparents and card moves.

The presentation layer reports exactly what was picked up and exactly what it was
dropped on (a card or a board's background); nothing here looks at coordinates.
Every operation either applies completely or leaves the working set untouched.
"""

from dataclasses import dataclass

from loguru import logger

from ignition.schemas.workspace import WorkspaceSlice
from ignition.services.board_sequencer import BoardSequencer
from ignition.services.card_tree import CardTree


@dataclass
class DragSession:
    """What is currently being dragged. Interaction state only, never persisted."""

    dragged_card_id: str | None = None
    dragged_board_id: str | None = None

    @property
    def active(self) -> bool:
        return self.dragged_card_id is not None or self.dragged_board_id is not None

    def clear(self) -> None:
        self.dragged_card_id = None
        self.dragged_board_id = None


class DragDropCoordinator:
    def __init__(self, working_set: WorkspaceSlice):
        self.working_set = working_set
        self.session = DragSession()

    # ─── Gesture protocol ────────────────────────────────────────────

    def start_card_drag(self, card_id: str) -> None:
        self.session.dragged_board_id = None
        self.session.dragged_card_id = card_id

    def start_board_drag(self, board_id: str) -> None:
        self.session.dragged_card_id = None
        self.session.dragged_board_id = board_id

    def end_drag(self) -> None:
        """Drag ended without a drop (cancelled, or released outside a target)."""
        self.session.clear()

    def drop_on_card(self, target_card_id: str) -> bool:
        card_id = self.session.dragged_card_id
        self.session.clear()
        if card_id is None:
            # Boards only land on boards
            return False
        return self.reparent_card(card_id, target_card_id)

    def drop_on_board(self, target_board_id: str) -> bool:
        card_id = self.session.dragged_card_id
        board_id = self.session.dragged_board_id
        self.session.clear()
        if board_id is not None:
            return self.reorder_board(board_id, target_board_id)
        if card_id is not None:
            return self.move_card_to_board(card_id, target_board_id)
        return False

    # ─── Operations ──────────────────────────────────────────────────

    def reorder_board(self, board_id: str, target_board_id: str) -> bool:
        changed = BoardSequencer(self.working_set.boards).reorder(board_id, target_board_id)
        if changed:
            logger.debug(f"Board '{board_id}' moved to the slot of '{target_board_id}'")
        return changed

    def reparent_card(self, card_id: str, target_card_id: str) -> bool:
        """Nest ``card_id`` under ``target_card_id``. The card keeps its board."""
        card = self.working_set.get_card(card_id)
        if card is None or self.working_set.get_card(target_card_id) is None:
            logger.warning(f"Reparent ignored: unknown card ('{card_id}' -> '{target_card_id}')")
            return False

        if CardTree(self.working_set.cards).would_create_cycle(card_id, target_card_id):
            logger.debug(f"Reparent rejected: '{target_card_id}' is '{card_id}' or one of its descendants")
            return False

        if card.parent_id == target_card_id:
            return False

        card.parent_id = target_card_id
        logger.debug(f"Card '{card_id}' nested under '{target_card_id}'")
        return True

    def move_card_to_board(self, card_id: str, target_board_id: str) -> bool:
        """Detach ``card_id`` from its parent and move it, with its whole subtree, to a board."""
        card = self.working_set.get_card(card_id)
        if card is None or self.working_set.get_board(target_board_id) is None:
            logger.warning(f"Move ignored: unknown card or board ('{card_id}' -> '{target_board_id}')")
            return False

        subtree = set(CardTree(self.working_set.cards).descendants_of(card_id))
        if card.parent_id is None and card.board_id == target_board_id and all(
            c.board_id == target_board_id for c in self.working_set.cards if c.id in subtree
        ):
            return False

        card.parent_id = None
        card.board_id = target_board_id
        for other in self.working_set.cards:
            if other.id in subtree:
                other.board_id = target_board_id

        logger.debug(f"Card '{card_id}' and {len(subtree)} descendant(s) moved to board '{target_board_id}'")
        return True
