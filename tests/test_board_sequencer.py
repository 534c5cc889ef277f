"""
Tests for BoardSequencer: dense 1..N ordering under append, splice reorder and removal.
"""
import random

from ignition.services.board_sequencer import BoardSequencer

from conftest import make_board


def _ids(seq: BoardSequencer) -> list[str]:
    return [b.id for b in seq.boards]


def _orders(seq: BoardSequencer) -> list[int]:
    return [b.order for b in seq.boards]


def _sequencer(*ids: str) -> BoardSequencer:
    seq = BoardSequencer([])
    for board_id in ids:
        seq.append(make_board(board_id))
    return seq


def test_append_assigns_next_rank():
    seq = _sequencer("A", "B", "C")
    assert _orders(seq) == [1, 2, 3]


def test_reorder_forward_is_a_splice_not_a_swap():
    seq = _sequencer("A", "B", "C", "D")
    assert seq.reorder("A", "C")
    assert _ids(seq) == ["B", "C", "A", "D"]
    assert _orders(seq) == [1, 2, 3, 4]


def test_reorder_backward():
    seq = _sequencer("A", "B", "C", "D")
    assert seq.reorder("D", "A")
    assert _ids(seq) == ["D", "A", "B", "C"]
    assert _orders(seq) == [1, 2, 3, 4]


def test_reorder_onto_itself_is_noop():
    seq = _sequencer("A", "B")
    assert not seq.reorder("A", "A")
    assert _ids(seq) == ["A", "B"]


def test_reorder_unknown_board_is_noop():
    seq = _sequencer("A", "B")
    assert not seq.reorder("A", "Z")
    assert not seq.reorder("Z", "A")
    assert _ids(seq) == ["A", "B"]


def test_remove_redensifies():
    seq = _sequencer("A", "B", "C")
    removed = seq.remove("B")
    assert removed.id == "B"
    assert _ids(seq) == ["A", "C"]
    assert _orders(seq) == [1, 2]
    assert seq.remove("missing") is None


def test_densify_repairs_gaps():
    boards = [make_board("A", 3), make_board("B", 7), make_board("C", 7)]
    seq = BoardSequencer(boards)
    seq.densify()
    assert _orders(seq) == [1, 2, 3]


def test_order_stays_dense_under_random_operations():
    rng = random.Random(42)
    seq = BoardSequencer([])
    counter = 0
    for _ in range(300):
        op = rng.choice(["append", "append", "reorder", "remove"])
        if op == "append" or not seq.boards:
            counter += 1
            seq.append(make_board(f"B{counter}"))
        elif op == "reorder":
            a, b = rng.choice(seq.boards).id, rng.choice(seq.boards).id
            seq.reorder(a, b)
        else:
            seq.remove(rng.choice(seq.boards).id)
        assert sorted(_orders(seq)) == list(range(1, len(seq.boards) + 1))
        assert _orders(seq) == list(range(1, len(seq.boards) + 1))
