import random

import pytest

from apps.board.sync.models import BoardSnapshot
from apps.board.sync.positions import clamp_index, move_in_sequence, relocate

from conftest import board_payload


def orders(board):
    return board.orders()


def assert_dense(board):
    for column in board.lists:
        assert [t.position for t in column.tasks] == list(range(len(column.tasks)))
        assert all(t.list_id == column.id for t in column.tasks)


class TestMoveInSequence:

    def test_reorder_to_front(self):
        source, destination = move_in_sequence(['T1', 'T2', 'T3'], 'T3', 0)
        assert source == ['T3', 'T1', 'T2']
        assert source is destination

    def test_reorder_down_uses_final_index(self):
        source, _ = move_in_sequence(['T1', 'T2', 'T3'], 'T1', 2)
        assert source == ['T2', 'T3', 'T1']

    def test_across_sequences(self):
        source, destination = move_in_sequence(['T1', 'T2', 'T3'], 'T2', 0, ['U1'])
        assert source == ['T1', 'T3']
        assert destination == ['T2', 'U1']

    def test_index_past_end_appends(self):
        _, destination = move_in_sequence(['T1'], 'T1', 99, ['U1', 'U2'])
        assert destination == ['U1', 'U2', 'T1']

    def test_unknown_item(self):
        with pytest.raises(ValueError):
            move_in_sequence(['T1'], 'T9', 0)

    def test_clamp_index(self):
        assert clamp_index(-3, 4) == 0
        assert clamp_index(7, 4) == 4
        assert clamp_index(2, 4) == 2


class TestRelocate:

    def test_cross_list_to_top(self):
        board = BoardSnapshot.from_dict(board_payload(lists={'A': ['T1', 'T2'], 'B': ['U1']}))

        assert relocate(board.lists, 'T1', 'B', 0) is True

        assert orders(board) == {'A': ['T2'], 'B': ['T1', 'U1']}
        assert_dense(board)

    def test_same_place_is_noop(self):
        board = BoardSnapshot.from_dict(board_payload())

        assert relocate(board.lists, 'T2', 'A', 1) is False
        assert orders(board)['A'] == ['T1', 'T2', 'T3']

    def test_applying_twice_equals_once(self):
        board = BoardSnapshot.from_dict(board_payload())

        relocate(board.lists, 'T3', 'A', 0)
        once = orders(board)
        assert relocate(board.lists, 'T3', 'A', 0) is False
        assert orders(board) == once == {'A': ['T3', 'T1', 'T2'], 'B': []}

    def test_position_past_end_of_same_list(self):
        board = BoardSnapshot.from_dict(board_payload())

        relocate(board.lists, 'T1', 'A', 10)

        assert orders(board)['A'] == ['T2', 'T3', 'T1']

    def test_unknown_task_or_list(self):
        board = BoardSnapshot.from_dict(board_payload())

        with pytest.raises(KeyError):
            relocate(board.lists, 'nope', 'A', 0)
        with pytest.raises(KeyError):
            relocate(board.lists, 'T1', 'nope', 0)

    def test_positions_stay_dense_for_any_sequence_of_moves(self):
        rng = random.Random(7)
        board = BoardSnapshot.from_dict(board_payload(lists={
            'A': ['T1', 'T2', 'T3', 'T4'],
            'B': ['U1', 'U2'],
            'C': [],
        }))
        task_ids = ['T1', 'T2', 'T3', 'T4', 'U1', 'U2']

        for _ in range(200):
            relocate(board.lists, rng.choice(task_ids), rng.choice('ABC'), rng.randint(0, 8))
            assert_dense(board)

        assert sorted(t for ids in orders(board).values() for t in ids) == sorted(task_ids)
