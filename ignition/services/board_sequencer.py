from loguru import logger

from ignition.schemas.board import Board


class BoardSequencer:
    """Keeps ``Board.order`` a dense 1..N ranking over one workspace's boards.

    Operates in place on the list it is given; the list order is the display order.
    """

    def __init__(self, boards: list[Board]):
        self.boards = boards

    def _index_of(self, board_id: str) -> int | None:
        return next((i for i, b in enumerate(self.boards) if b.id == board_id), None)

    def densify(self) -> None:
        for index, board in enumerate(self.boards):
            if board.order != index + 1:
                board.order = index + 1

    def append(self, board: Board) -> Board:
        board.order = len(self.boards) + 1
        self.boards.append(board)
        return board

    def reorder(self, board_id: str, target_board_id: str) -> bool:
        """Move ``board_id`` into ``target_board_id``'s slot (splice, not swap)."""
        if board_id == target_board_id:
            return False

        source = self._index_of(board_id)
        target = self._index_of(target_board_id)
        if source is None or target is None:
            logger.warning(f"Cannot reorder board '{board_id}' onto '{target_board_id}': unknown board")
            return False

        moved = self.boards.pop(source)
        self.boards.insert(target, moved)
        self.densify()
        return True

    def remove(self, board_id: str) -> Board | None:
        index = self._index_of(board_id)
        if index is None:
            return None
        removed = self.boards.pop(index)
        self.densify()
        return removed
