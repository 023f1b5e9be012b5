# apps/board/sync/store.py

"""
Client-side board store.

The store is the only writer of the local board cache. Drag handlers, the
persistence client and the broadcast receiver all go through its command
methods (``apply_move``, ``apply_event``, ``replace``), which run under one
re-entrant lock so a reader never sees a half-applied change. Reads hand
out deep copies.
"""

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from .models import BoardSnapshot, DropTarget, TaskCard, TaskColumn
from .positions import clamp_index, relocate, renumber
from .targets import resolve_drop_target

logger = logging.getLogger(__name__)

Listener = Callable[['BoardStore'], None]


class BoardStore:
    """Single-writer container for one board's lists and tasks"""

    def __init__(self, board: Optional[BoardSnapshot] = None):
        self._board = board
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self.version = 0

    # === Reads ===

    @property
    def loaded(self) -> bool:
        return self._board is not None

    @property
    def board_id(self) -> Optional[str]:
        with self._lock:
            return self._board.id if self._board else None

    def snapshot(self) -> Optional[BoardSnapshot]:
        with self._lock:
            return copy.deepcopy(self._board)

    def orders(self) -> Dict[str, List[str]]:
        with self._lock:
            return self._board.orders() if self._board else {}

    def locate(self, task_id: str) -> Optional[DropTarget]:
        """Current list and index of a task, None if the store does not know it"""
        with self._lock:
            if self._board is None:
                return None
            column = self._board.find_list_containing(task_id)
            if column is None:
                return None
            return DropTarget(column.id, column.index_of(task_id))

    def resolve(self, over_id: Optional[str]) -> Optional[DropTarget]:
        with self._lock:
            return resolve_drop_target(self._board, over_id)

    def member_ids(self) -> List[int]:
        with self._lock:
            if self._board is None:
                return []
            ids = list(self._board.member_ids)
            if self._board.owner_id is not None:
                ids.append(self._board.owner_id)
            return ids

    # === Commands ===

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it"""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def replace(self, board: Optional[BoardSnapshot]) -> None:
        """Swap in an authoritative board, discarding any local divergence"""
        with self._lock:
            self._board = copy.deepcopy(board)
            self._changed()

    def clear(self) -> None:
        self.replace(None)

    def apply_move(self, task_id: str, list_id: str, position: int) -> bool:
        """
        Relocate a task. Returns False when it is already there.
        Raises KeyError for an unknown task or list.
        """
        with self._lock:
            self._require_board()
            moved = relocate(self._board.lists, task_id, list_id, position)
            if moved:
                logger.debug("Moved task %s to list %s @ %s", task_id, list_id, position)
                self._changed()
            return moved

    def apply_event(self, event_type: str, message: Dict[str, Any]) -> bool:
        """
        Apply a server broadcast. Returns True if the local state changed.
        Raises KeyError when the event references something the store lacks.
        """
        handler = getattr(self, f'_on_{event_type}', None)
        if handler is None:
            return False
        with self._lock:
            self._require_board()
            changed = handler(message)
            if changed:
                self._changed()
            return changed

    # === Event handlers (called under the lock) ===

    def _on_task_moved(self, message):
        return relocate(self._board.lists, str(message['task_id']),
                        str(message['list_id']), int(message['position']))

    def _on_task_created(self, message):
        data = message['task']
        task_id = str(data['id'])
        if self._board.find_list_containing(task_id) is not None:
            return self._on_task_updated(message)

        column = self._column(str(data['list_id']))
        card = TaskCard.from_dict(data)
        column.tasks.insert(clamp_index(card.position, len(column.tasks)), card)
        renumber(column)
        return True

    def _on_task_updated(self, message):
        data = message['task']
        task_id = str(data['id'])
        column = self._board.find_list_containing(task_id)
        if column is None:
            raise KeyError(task_id)

        card = column.tasks[column.index_of(task_id)]
        fresh = TaskCard.from_dict(data, list_id=data.get('list_id', column.id))
        changed = card.title != fresh.title or card.extra != fresh.extra
        card.title = fresh.title
        card.extra = fresh.extra

        if 'position' in data and 'list_id' in data:
            changed = relocate(self._board.lists, task_id, fresh.list_id, fresh.position) or changed
        return changed

    def _on_task_deleted(self, message):
        task_id = str(message['task_id'])
        column = self._board.find_list_containing(task_id)
        if column is None:
            return False
        column.tasks.pop(column.index_of(task_id))
        renumber(column)
        return True

    def _on_list_created(self, message):
        data = message['list']
        if self._board.get_list(str(data['id'])) is not None:
            return self._on_list_updated(message)
        self._board.lists.append(TaskColumn.from_dict(data))
        self._board.lists.sort(key=lambda col: col.position)
        return True

    def _on_list_updated(self, message):
        data = message['list']
        column = self._column(str(data['id']))
        title = data.get('title', column.title)
        position = int(data.get('position', column.position))
        if (title, position) == (column.title, column.position):
            return False
        column.title = title
        column.position = position
        self._board.lists.sort(key=lambda col: col.position)
        return True

    def _on_list_deleted(self, message):
        column = self._board.get_list(str(message['list_id']))
        if column is None:
            return False
        self._board.lists.remove(column)
        return True

    def _on_member_added(self, message):
        user_id = message['member']['user_id']
        if user_id in self._board.member_ids:
            return False
        self._board.member_ids.append(user_id)
        return True

    def _on_member_removed(self, message):
        user_id = message['user_id']
        if user_id not in self._board.member_ids:
            return False
        self._board.member_ids.remove(user_id)
        return True

    # === Helpers ===

    def _column(self, list_id: str) -> TaskColumn:
        column = self._board.get_list(list_id)
        if column is None:
            raise KeyError(list_id)
        return column

    def _require_board(self):
        if self._board is None:
            raise KeyError('board not loaded')

    def _changed(self):
        self.version += 1
        for listener in list(self._listeners):
            listener(self)
