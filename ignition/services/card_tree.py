"""Read-only queries over the parent/child forest formed by cards."""

from collections.abc import Iterable

from loguru import logger

from ignition.schemas.card import Card


class CardTree:
    """Snapshot of the ``parent_id`` graph of a card collection.

    Builds a child index once; holds no reference to the cards afterwards, so later
    mutations of the working set do not leak into an existing snapshot.
    """

    def __init__(self, cards: Iterable[Card]):
        self._children: dict[str, list[str]] = {}
        self._parent: dict[str, str | None] = {}
        self._board: dict[str, str] = {}
        self._order: list[str] = []

        for card in cards:
            self._order.append(card.id)
            self._parent[card.id] = card.parent_id
            self._board[card.id] = card.board_id
            if card.parent_id is not None:
                self._children.setdefault(card.parent_id, []).append(card.id)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._parent

    def children_of(self, card_id: str) -> list[str]:
        return list(self._children.get(card_id, []))

    def descendants_of(self, card_id: str) -> list[str]:
        """All cards that have ``card_id`` as an ancestor, depth-first.

        A corrupted graph that loops back onto an already visited card is logged
        and cut at that edge rather than walked forever.
        """
        visited = {card_id}
        result: list[str] = []
        stack = list(reversed(self._children.get(card_id, [])))

        while stack:
            current = stack.pop()
            if current in visited:
                logger.error(f"Card graph contains a cycle through '{current}' (walking from '{card_id}')")
                continue
            visited.add(current)
            result.append(current)
            stack.extend(reversed(self._children.get(current, [])))

        return result

    def would_create_cycle(self, child_id: str, new_parent_id: str) -> bool:
        if new_parent_id == child_id:
            return True
        return new_parent_id in self.descendants_of(child_id)

    def cascade_delete_set(self, card_id: str) -> set[str]:
        return {card_id, *self.descendants_of(card_id)}

    def roots_on_board(self, board_id: str) -> list[str]:
        """Cards on ``board_id`` whose parent is missing or lives on another board.

        These are the cards a board renders at top level; everything else is drawn
        under its parent.
        """
        roots = []
        for card_id in self._order:
            if self._board[card_id] != board_id:
                continue
            parent = self._parent[card_id]
            if parent is None or parent not in self._parent or self._board[parent] != board_id:
                roots.append(card_id)
        return roots
