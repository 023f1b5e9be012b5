# apps/board/sync/receiver.py

"""
Real-time receiver for a board's WebSocket channel.

Frames look like ``{"type": "task_moved", "message": {...}}``. Moves are
applied with the same relocation the drag handlers use, keyed by task id,
list id and position, so an event for a move this client already applied
optimistically is a no-op. There is no sequence number: the last event
applied wins, and anything that does not fit the local state triggers a
full resynchronisation.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Union

import websockets

from .models import BoardSnapshot
from .persistence import MovePersister
from .store import BoardStore

logger = logging.getLogger(__name__)

PRESENCE_EVENTS = ('connected', 'user_joined', 'user_left', 'pong')


class BroadcastReceiver:

    def __init__(self, store: BoardStore, persister: MovePersister, client_id: str,
                 reconnect_delay: float = 3.0, headers: Optional[Dict[str, str]] = None):
        self.store = store
        self.persister = persister
        self.client_id = client_id
        self.reconnect_delay = reconnect_delay
        self.headers = headers or {}
        self._socket = None
        self._stopped = asyncio.Event()

    async def handle(self, raw: Union[str, bytes, Dict[str, Any]]) -> bool:
        """Apply one frame. Returns True if local state was changed or reloaded"""
        try:
            frame = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        except ValueError:
            logger.error("❌ Invalid JSON received on board channel")
            return False
        if not isinstance(frame, dict):
            return False

        event_type = frame.get('type')
        message = frame.get('message') or {}

        if event_type == 'board_sync':
            board_data = frame.get('board_data')
            try:
                board = BoardSnapshot.from_dict(board_data) if isinstance(board_data, dict) else None
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("❌ Malformed board_sync frame: %s", exc)
                board = None
            if board is None:
                return await self.persister.resync()
            self.store.replace(board)
            return True
        if event_type == 'board_refresh':
            return await self.persister.resync()
        if event_type in PRESENCE_EVENTS:
            logger.debug("Board channel: %s %s", event_type, message)
            return False

        if message.get('origin') and message.get('origin') == self.client_id:
            logger.debug("Ignoring echo of own %s", event_type)
            return False

        try:
            return self.store.apply_event(event_type, message)
        except KeyError as exc:
            logger.warning("⚠️ %s references unknown %s, resynchronising", event_type, exc)
            return await self.persister.resync()
        except (TypeError, ValueError) as exc:
            logger.error("❌ Malformed %s event: %s", event_type, exc)
            return False

    async def listen(self, url: str) -> None:
        """Consume the channel until ``stop()``; resync after every reconnect"""
        self._stopped.clear()
        connected_before = False

        while not self._stopped.is_set():
            try:
                async with websockets.connect(url, additional_headers=self.headers) as socket:
                    self._socket = socket
                    logger.info("✅ Connected to board channel %s", url)
                    if connected_before:
                        await self.persister.resync()
                    connected_before = True

                    async for raw in socket:
                        await self.handle(raw)
            except (OSError, websockets.WebSocketException) as exc:
                logger.warning("🔌 Board channel dropped: %s", exc)
            finally:
                self._socket = None

            if self._stopped.is_set():
                break
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.reconnect_delay)
            except asyncio.TimeoutError:
                pass

    async def request_sync(self) -> bool:
        """Ask the server for a ``board_sync`` frame over the open socket"""
        if self._socket is None:
            return False
        await self._socket.send(json.dumps({'type': 'sync_board'}))
        return True

    async def stop(self) -> None:
        self._stopped.set()
        if self._socket is not None:
            await self._socket.close()
