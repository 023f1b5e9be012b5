# apps/board/consumers.py

import json
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

from apps.core.models import Board
from apps.core.permissions import BoardPermissions

from .serializers import board_to_dict
from .services import board_group_name

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for real-time board updates

    - Relays every board mutation to the connected clients
    - Skips events whose ``origin`` is this connection's ``client_id``
      (the client already applied its own change)
    - Presence (user joined / left)
    - ``sync_board`` requests for the full board state
    """

    async def connect(self):
        """
        Joins the board group
        Checks permissions before accepting the connection
        """
        self.board_id = self.scope['url_route']['kwargs']['board_id']
        self.board_group_name = board_group_name(self.board_id)
        self.user = self.scope['user']
        self.joined = False

        query = parse_qs(self.scope.get('query_string', b'').decode())
        self.client_id = (query.get('client_id') or [None])[0]

        if not self.user.is_authenticated:
            logger.warning("❌ WebSocket rejected - anonymous user")
            await self.close()
            return

        has_access = await self.check_board_access()
        if not has_access:
            logger.warning(f"❌ WebSocket rejected - {self.user.username} has no access to board {self.board_id}")
            await self.close()
            return

        await self.channel_layer.group_add(
            self.board_group_name,
            self.channel_name
        )
        self.joined = True

        await self.accept()

        await self.send(text_data=json.dumps({
            'type': 'connected',
            'client_id': self.client_id,
            'heartbeat_interval': getattr(settings, 'TASKBOARD_WS_HEARTBEAT_INTERVAL', 30),
            'timestamp': self.get_timestamp()
        }))

        # let the others know someone arrived
        await self.channel_layer.group_send(
            self.board_group_name,
            {
                'type': 'user_joined',
                'message': {
                    'username': self.user.username,
                    'name': self.user.display_name(),
                    'user_id': self.user.id,
                    'timestamp': self.get_timestamp()
                }
            }
        )

        logger.info(f"✅ WebSocket connected - {self.user.username} on board {self.board_id}")

    async def disconnect(self, close_code):
        """
        Leaves the board group
        """
        if getattr(self, 'joined', False):
            await self.channel_layer.group_send(
                self.board_group_name,
                {
                    'type': 'user_left',
                    'message': {
                        'username': self.user.username,
                        'name': self.user.display_name(),
                        'user_id': self.user.id,
                        'timestamp': self.get_timestamp()
                    }
                }
            )

            await self.channel_layer.group_discard(
                self.board_group_name,
                self.channel_name
            )

        logger.info(f"🔌 WebSocket disconnected - {self.user} from board {self.board_id}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Messages from the client: ``ping`` and ``sync_board``
        """
        try:
            data = json.loads(text_data or bytes_data or '')
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.error(f"❌ Invalid JSON received on WebSocket from {self.user.username}")
            return

        message_type = data.get('type') if isinstance(data, dict) else None

        # Heartbeat
        if message_type == 'ping':
            await self.send(text_data=json.dumps({
                'type': 'pong',
                'timestamp': self.get_timestamp()
            }))

        # Full state, used by clients that lost track
        elif message_type == 'sync_board':
            board_data = await self.get_board_state()
            if board_data is None:
                await self.close()
                return
            await self.send(text_data=json.dumps({
                'type': 'board_sync',
                'board_data': board_data,
                'timestamp': self.get_timestamp()
            }))

        else:
            logger.debug(f"Ignoring WebSocket message of type {message_type!r}")

    # === Board event handlers ===

    async def task_moved(self, event):
        await self.relay(event)

    async def task_created(self, event):
        await self.relay(event)

    async def task_updated(self, event):
        await self.relay(event)

    async def task_deleted(self, event):
        await self.relay(event)

    async def list_created(self, event):
        await self.relay(event)

    async def list_updated(self, event):
        await self.relay(event)

    async def list_deleted(self, event):
        await self.relay(event)

    async def board_updated(self, event):
        await self.relay(event)

    async def member_added(self, event):
        await self.relay(event)

    async def member_updated(self, event):
        await self.relay(event)

    async def member_removed(self, event):
        """
        Relays the removal; the removed user's own sockets are closed
        """
        await self.relay(event)
        if event['message'].get('user_id') == self.user.id:
            logger.info(f"🚪 {self.user.username} removed from board {self.board_id}, closing socket")
            await self.close()

    async def board_refresh(self, event):
        """
        Asks clients to reload everything (board deleted, bulk changes)
        """
        await self.send(text_data=json.dumps({
            'type': 'board_refresh',
            'message': event['message']
        }))

    async def user_joined(self, event):
        message = event['message']
        # not to the user themselves
        if message['user_id'] != self.user.id:
            await self.send(text_data=json.dumps({
                'type': 'user_joined',
                'message': message
            }))

    async def user_left(self, event):
        message = event['message']
        if message['user_id'] != self.user.id:
            await self.send(text_data=json.dumps({
                'type': 'user_left',
                'message': message
            }))

    # === Helpers ===

    async def relay(self, event):
        """
        Forwards a group event as ``{"type": ..., "message": ...}``
        unless it originated from this very connection
        """
        message = event['message']
        origin = message.get('origin')
        if origin and origin == self.client_id:
            return

        await self.send(text_data=json.dumps({
            'type': event['type'],
            'message': message
        }))

    @database_sync_to_async
    def check_board_access(self):
        """
        Checks the user can see the board
        """
        try:
            board = Board.objects.get(id=self.board_id)
        except Board.DoesNotExist:
            return False
        return BoardPermissions.can_view(self.user, board)

    @database_sync_to_async
    def get_board_state(self):
        """
        Current board state for ``sync_board``; None once access is gone
        """
        try:
            board = Board.objects.select_related('owner').get(id=self.board_id)
        except Board.DoesNotExist:
            return None
        role = board.role_for(self.user)
        if role is None:
            return None
        return board_to_dict(board, role)

    def get_timestamp(self):
        """
        Current timestamp in ISO format
        """
        return timezone.now().isoformat()
