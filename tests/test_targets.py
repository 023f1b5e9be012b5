from apps.board.sync.models import DropTarget
from apps.board.sync.targets import resolve_drop_target

from conftest import snapshot


def test_list_id_targets_end_of_list():
    board = snapshot()

    assert resolve_drop_target(board, 'A') == DropTarget('A', 3)
    assert resolve_drop_target(board, 'B') == DropTarget('B', 0)


def test_task_id_targets_its_index():
    board = snapshot(lists={'A': ['T1', 'T2'], 'B': ['U1', 'U2']})

    assert resolve_drop_target(board, 'U2') == DropTarget('B', 1)
    assert resolve_drop_target(board, 'T1') == DropTarget('A', 0)


def test_unknown_or_missing_id():
    board = snapshot()

    assert resolve_drop_target(board, 'deleted-task') is None
    assert resolve_drop_target(board, None) is None
    assert resolve_drop_target(None, 'A') is None
