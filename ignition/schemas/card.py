from datetime import datetime, timezone

from pydantic import Field, field_validator

from ignition.core.constants import MAX_CUSTOM_STATUSES, CardStatus
from ignition.schemas.base import BaseSchema, StoredRecord


def _coerce_status(v: object) -> object:
    # Older records used an empty string for "no status"
    if v is None or v == "":
        return CardStatus.NONE
    return v


class Card(StoredRecord):
    id: str
    board_id: str
    workspace_id: str
    title: str
    details: str = ""
    parent_id: str | None = None
    date_created: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    due_date: datetime | None = None
    status: CardStatus = CardStatus.NONE
    custom_statuses: list[str] = Field(default_factory=list, max_length=MAX_CUSTOM_STATUSES)
    is_minimized: bool = False

    @field_validator("workspace_id", mode="before")
    @classmethod
    def stringify_workspace_id(cls, v: object) -> object:
        return str(v) if isinstance(v, int) else v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: object) -> object:
        return _coerce_status(v)


class CardUpdate(BaseSchema):
    """Fields editable through ``update_card``.

    ``workspace_id`` is fixed at creation, ``board_id`` moves only by drag and drop
    and ``parent_id`` changes only by reparenting, so none of them appear here.
    """

    title: str | None = None
    details: str | None = None
    due_date: datetime | None = None
    status: CardStatus | None = None
    custom_statuses: list[str] | None = Field(default=None, max_length=MAX_CUSTOM_STATUSES)
    is_minimized: bool | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: object) -> object:
        return _coerce_status(v)
