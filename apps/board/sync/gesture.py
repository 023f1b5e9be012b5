# apps/board/sync/gesture.py

"""
Drag-and-drop gesture handling.

One gesture goes Idle -> Dragging -> Hovering -> Dropped -> Idle. While
hovering, moves across lists are applied to the store immediately so the
card follows the pointer; reorders inside a list wait for the drop. Only
the final position is persisted, once.
"""

import enum
import logging
from typing import Optional

from .models import DropTarget, MoveIntent
from .persistence import MovePersister
from .store import BoardStore

logger = logging.getLogger(__name__)


class DragState(enum.Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    HOVERING = 'hovering'
    DROPPED = 'dropped'


class DragController:
    """Turns drag-start / drag-over / drag-end events into store commands"""

    def __init__(self, store: BoardStore, persister: MovePersister):
        self.store = store
        self.persister = persister
        self.state = DragState.IDLE
        self.task_id: Optional[str] = None
        self.origin: Optional[DropTarget] = None
        self.moved_across = False

    @property
    def active(self) -> bool:
        return self.state in (DragState.DRAGGING, DragState.HOVERING)

    def start(self, task_id: str) -> bool:
        """Capture where the dragged task started. Unknown task -> stay idle"""
        origin = self.store.locate(str(task_id))
        if origin is None:
            logger.debug("Drag started on unknown task %s", task_id)
            self._reset()
            return False

        self.task_id = str(task_id)
        self.origin = origin
        self.moved_across = False
        self.state = DragState.DRAGGING
        return True

    def over(self, over_id: Optional[str]) -> bool:
        """
        Optimistic cross-list move while hovering. Returns True if the store
        changed; hovering the same target again changes nothing.
        """
        if not self.active or over_id is None:
            return False
        self.state = DragState.HOVERING

        current = self.store.locate(self.task_id)
        target = self.store.resolve(over_id)
        if current is None or target is None:
            return False
        if current.list_id == target.list_id:
            return False

        moved = self.store.apply_move(self.task_id, target.list_id, target.index)
        if moved:
            self.moved_across = True
        return moved

    async def end(self, over_id: Optional[str]) -> Optional[MoveIntent]:
        """
        Drop. Computes the final list and index, persists if they differ from
        the origin, and returns the intent that was sent (None otherwise).

        The controller is back to idle before the request goes out, so a new
        drag can start while the previous move is still in flight.
        """
        if not self.active:
            return None
        if over_id is None:
            await self.cancel()
            return None

        self.state = DragState.DROPPED
        moved_across = self.moved_across
        try:
            intent, stale = self._settle(over_id)
        finally:
            self._reset()

        if stale:
            # stale id after a concurrent remote change
            if moved_across:
                await self.persister.resync()
            return None
        if intent is None or intent.is_noop:
            return None

        await self.persister.persist(intent)
        return intent

    def _settle(self, over_id: str):
        """Apply a pending same-list reorder and build the intent. No awaits here"""
        task_id, origin = self.task_id, self.origin
        current = self.store.locate(task_id)
        target = self.store.resolve(over_id)
        if current is None or target is None:
            return None, True

        if current.list_id == target.list_id and current.index != target.index:
            self.store.apply_move(task_id, target.list_id, target.index)

        final = self.store.locate(task_id)
        if final is None:
            return None, False

        return MoveIntent(
            task_id=task_id,
            source_list_id=origin.list_id,
            source_position=origin.index,
            destination_list_id=final.list_id,
            destination_position=final.index,
        ), False

    async def cancel(self) -> None:
        """Released outside any target: no request, resync if the board was touched"""
        moved_across = self.moved_across
        self._reset()
        if moved_across:
            await self.persister.resync()

    def _reset(self):
        self.state = DragState.IDLE
        self.task_id = None
        self.origin = None
        self.moved_across = False
