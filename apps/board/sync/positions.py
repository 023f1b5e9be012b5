# apps/board/sync/positions.py

"""
Position model shared by the client store and the server move service.

A task's position is its index inside its list. Moving a task removes it
from its source sequence and inserts it so that it ends up at
``destination_position`` in the resulting destination sequence; both
touched sequences are then renumbered 0..n-1.
"""

from typing import Hashable, Iterable, List, Optional, Sequence, Tuple

from .models import TaskColumn


def clamp_index(index: int, length: int) -> int:
    """Keep an insertion index inside [0, length]"""
    return max(0, min(int(index), length))


def move_in_sequence(
    source: Sequence[Hashable],
    item: Hashable,
    index: int,
    destination: Optional[Sequence[Hashable]] = None,
) -> Tuple[List[Hashable], List[Hashable]]:
    """
    Move ``item`` from ``source`` to ``index`` of ``destination``.

    With no destination (or the same sequence) this is a reorder: the item
    is taken out first, so later items shift left before the insertion.
    Returns the new (source, destination) lists; for a reorder both are the
    same list object.
    """
    if item not in source:
        raise ValueError(f'{item!r} is not in the source sequence')

    remaining = [x for x in source if x != item]
    if destination is None or destination is source:
        remaining.insert(clamp_index(index, len(remaining)), item)
        return remaining, remaining

    target = [x for x in destination if x != item]
    target.insert(clamp_index(index, len(target)), item)
    return remaining, target


def renumber(column: TaskColumn) -> None:
    for idx, task in enumerate(column.tasks):
        task.position = idx
        task.list_id = column.id


def relocate(columns: Iterable[TaskColumn], task_id: str,
             destination_list_id: str, destination_position: int) -> bool:
    """
    Apply a move to a set of columns in place.

    Returns False when the task already sits at that list and index, so
    applying the same move twice is harmless. Raises KeyError when either
    the task or the destination list is unknown.
    """
    columns = list(columns)
    source = next((c for c in columns if c.index_of(task_id) != -1), None)
    if source is None:
        raise KeyError(task_id)
    destination = next((c for c in columns if c.id == destination_list_id), None)
    if destination is None:
        raise KeyError(destination_list_id)

    current = source.index_of(task_id)
    room = len(destination.tasks) - (1 if destination is source else 0)
    target = clamp_index(destination_position, room)

    if destination is source and current == target:
        return False

    card = source.tasks.pop(current)
    destination.tasks.insert(target, card)

    renumber(source)
    if destination is not source:
        renumber(destination)
    return True
