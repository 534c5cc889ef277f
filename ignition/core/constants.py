from enum import StrEnum


class FieldSizes:
    SHORT = 50


MAX_CUSTOM_STATUSES = 5
DEFAULT_BOARD_COLOR = "#f5f5f5"


class StoreKey(StrEnum):
    WORKSPACES = "Workspaces"
    ALL_BOARDS = "AllBoards"
    ALL_CARDS = "AllCards"
    SELECTED_WORKSPACE = "SelectedWorkspace"


class CardStatus(StrEnum):
    TODO = "todo"
    DOING = "doing"
    DONE = "done"
    BLOCKED = "blocked"
    NONE = "none"


class SessionPhase(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
