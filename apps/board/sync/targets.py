# apps/board/sync/targets.py

from typing import Optional

from .models import BoardSnapshot, DropTarget


def resolve_drop_target(board: Optional[BoardSnapshot], over_id: Optional[str]) -> Optional[DropTarget]:
    """
    Map the id a drag gesture hovers over to a list and insertion index.

    A list id means "append at the end" (empty list or the space below the
    last card). A task id means "take that task's current index". Anything
    else returns None: the id may be stale after a concurrent remote delete.
    """
    if board is None or over_id is None:
        return None
    over_id = str(over_id)

    column = board.get_list(over_id)
    if column is not None:
        return DropTarget(column.id, len(column.tasks))

    for column in board.lists:
        idx = column.index_of(over_id)
        if idx != -1:
            return DropTarget(column.id, idx)
    return None
