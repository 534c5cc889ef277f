from pydantic import Field

from ignition.schemas.base import BaseSchema, StoredRecord
from ignition.schemas.board import Board
from ignition.schemas.card import Card


class Workspace(StoredRecord):
    id: int
    name: str
    order: int = 0


class WorkspaceSlice(BaseSchema):
    """The boards and cards of one workspace, as held in memory."""

    workspace_id: str
    boards: list[Board] = Field(default_factory=list)
    cards: list[Card] = Field(default_factory=list)

    def get_board(self, board_id: str) -> Board | None:
        return next((b for b in self.boards if b.id == board_id), None)

    def get_card(self, card_id: str) -> Card | None:
        return next((c for c in self.cards if c.id == card_id), None)
