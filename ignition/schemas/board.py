from pydantic import field_validator

from ignition.core.constants import DEFAULT_BOARD_COLOR
from ignition.schemas.base import BaseSchema, StoredRecord


class Board(StoredRecord):
    id: str
    workspace_id: str
    title: str
    description: str = ""
    order: int = 0
    color: str = DEFAULT_BOARD_COLOR

    @field_validator("workspace_id", mode="before")
    @classmethod
    def stringify_workspace_id(cls, v: object) -> object:
        # Workspace ids are numeric, but boards are filtered by their string form
        return str(v) if isinstance(v, int) else v


class BoardUpdate(BaseSchema):
    """Fields a caller may change on an existing board."""

    title: str | None = None
    description: str | None = None
    color: str | None = None
