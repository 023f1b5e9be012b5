# apps/board/sync/session.py

import asyncio
import logging
from typing import Callable, Dict, Optional

from .api import BoardAPIClient
from .config import SyncSettings
from .gesture import DragController
from .notifications import ToastQueue
from .persistence import MovePersister
from .receiver import BroadcastReceiver
from .search import DebouncedSearch, Results
from .store import BoardStore

logger = logging.getLogger(__name__)


class BoardSession:
    """
    Everything one open board needs on the client side, wired together:
    store, REST client, drag controller, broadcast receiver, toasts and
    member search.
    """

    def __init__(self, board_id: str, settings: Optional[SyncSettings] = None,
                 api: Optional[BoardAPIClient] = None, headers: Optional[Dict[str, str]] = None):
        self.board_id = str(board_id)
        self.settings = settings or SyncSettings.from_env()
        self.api = api or BoardAPIClient(self.settings, headers=headers)

        self.store = BoardStore()
        self.toasts = ToastQueue(self.settings.toast_duration)
        self.persister = MovePersister(self.store, self.api, self.toasts)
        self.drag = DragController(self.store, self.persister)
        self.receiver = BroadcastReceiver(
            self.store,
            self.persister,
            client_id=self.api.client_id,
            reconnect_delay=self.settings.reconnect_delay,
            headers=headers,
        )
        self._listener: Optional[asyncio.Task] = None

    async def open(self, listen: bool = True) -> None:
        """Load the board, then start following its channel"""
        board = await self.api.fetch_board(self.board_id)
        self.store.replace(board)
        logger.info("📋 Board %s loaded (%d lists)", board.id, len(board.lists))

        if listen:
            url = self.settings.board_socket_url(self.board_id, self.api.client_id)
            self._listener = asyncio.ensure_future(self.receiver.listen(url))

    async def close(self) -> None:
        await self.receiver.stop()
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        self.store.clear()
        await self.api.aclose()

    def member_search(self, on_results: Callable[[Results], None]) -> DebouncedSearch:
        return DebouncedSearch(
            self.api,
            on_results,
            exclude=self.store.member_ids,
            delay=self.settings.search_delay,
            limit=self.settings.search_limit,
        )
