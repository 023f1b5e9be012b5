# apps/board/sync/persistence.py

import logging

from .api import BoardAPIClient
from .errors import SyncError
from .models import MoveIntent
from .notifications import ToastQueue
from .store import BoardStore

logger = logging.getLogger(__name__)


class MovePersister:
    """
    Sends finished moves to the server and recovers from failures.

    Recovery is always a full re-fetch of the board: an optimistic drag may
    have touched several lists along the way, and undoing it step by step is
    not reliable. A failed move is never retried, since the intent may
    already be stale.
    """

    def __init__(self, store: BoardStore, api: BoardAPIClient, toasts: ToastQueue):
        self.store = store
        self.api = api
        self.toasts = toasts

    async def persist(self, intent: MoveIntent) -> bool:
        """Returns True only when a request was sent and accepted"""
        if intent.is_noop:
            logger.debug("Move of %s ended where it started, nothing to send", intent.task_id)
            return False

        board_id = self.store.board_id
        try:
            await self.api.move_task(
                board_id,
                intent.task_id,
                intent.destination_list_id,
                intent.destination_position,
            )
        except SyncError as exc:
            logger.warning("❌ Move of task %s failed: %s", intent.task_id, exc)
            self.toasts.error('Failed to move task')
            await self.resync()
            return False

        logger.info("✅ Task %s moved to list %s @ %s", intent.task_id,
                    intent.destination_list_id, intent.destination_position)
        return True

    async def resync(self) -> bool:
        """Replace local state with the server's board; never raises SyncError"""
        board_id = self.store.board_id
        if board_id is None:
            return False
        try:
            board = await self.api.fetch_board(board_id)
        except SyncError as exc:
            logger.error("❌ Could not resynchronise board %s: %s", board_id, exc)
            self.toasts.error('Lost sync with the board, reload to continue')
            return False

        self.store.replace(board)
        logger.info("🔄 Board %s resynchronised", board_id)
        return True
