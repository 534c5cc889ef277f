"""
Tests for CardTree: descendant walks, cycle checks and cascade sets.
"""
from ignition.services.card_tree import CardTree

from conftest import make_card


def test_descendants_of_walks_whole_subtree(forest):
    tree = CardTree(forest.cards)
    assert set(tree.descendants_of("a")) == {"b", "c", "d"}
    assert tree.descendants_of("b") == ["c"]
    assert tree.descendants_of("e") == []


def test_descendants_of_is_depth_first(forest):
    assert CardTree(forest.cards).descendants_of("a") == ["b", "c", "d"]


def test_descendants_of_unknown_card_is_empty(forest):
    assert CardTree(forest.cards).descendants_of("missing") == []


def test_descendants_of_terminates_on_corrupted_cycle():
    """A graph that already contains a loop must not hang the walk"""
    cards = [
        make_card("x", parent_id="y"),
        make_card("y", parent_id="z"),
        make_card("z", parent_id="x"),
    ]
    tree = CardTree(cards)
    assert tree.descendants_of("x") == ["z", "y"]
    assert tree.would_create_cycle("x", "y")


def test_would_create_cycle(forest):
    tree = CardTree(forest.cards)
    assert tree.would_create_cycle("a", "a")
    assert tree.would_create_cycle("a", "c")
    assert tree.would_create_cycle("b", "c")
    assert not tree.would_create_cycle("c", "a")
    assert not tree.would_create_cycle("b", "d")
    assert not tree.would_create_cycle("a", "e")


def test_cascade_delete_set(forest):
    tree = CardTree(forest.cards)
    assert tree.cascade_delete_set("a") == {"a", "b", "c", "d"}
    assert tree.cascade_delete_set("b") == {"b", "c"}
    assert tree.cascade_delete_set("e") == {"e"}


def test_children_of(forest):
    tree = CardTree(forest.cards)
    assert tree.children_of("a") == ["b", "d"]
    assert tree.children_of("c") == []


def test_snapshot_ignores_later_mutation(forest):
    tree = CardTree(forest.cards)
    forest.get_card("e").parent_id = "c"
    assert tree.descendants_of("c") == []
    assert CardTree(forest.cards).descendants_of("c") == ["e"]


def test_roots_on_board_include_children_of_cards_elsewhere():
    cards = [
        make_card("root", board_id="b1"),
        make_card("child", board_id="b1", parent_id="root"),
        make_card("visitor", board_id="b2", parent_id="root"),
        make_card("orphan", board_id="b2", parent_id="gone"),
    ]
    tree = CardTree(cards)
    assert tree.roots_on_board("b1") == ["root"]
    assert tree.roots_on_board("b2") == ["visitor", "orphan"]
    assert "root" in tree
    assert "gone" not in tree
