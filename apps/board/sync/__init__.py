# apps/board/sync/__init__.py

"""
Board sync - client side of the drag-and-drop move protocol

Does not import Django: it runs in any process that talks to the board
server over HTTP and WebSocket.

- positions: ordering rules shared with the server
- store: single-writer local board cache
- targets: drop-target resolution
- gesture: drag state machine with optimistic moves
- persistence: authoritative move request + full resync on failure
- receiver: broadcast reconciliation
"""

from .api import BoardAPIClient
from .config import SyncSettings
from .errors import (
    AccessDeniedError,
    MoveValidationError,
    NetworkError,
    NotFoundError,
    ServerError,
    SyncError,
)
from .gesture import DragController, DragState
from .models import BoardSnapshot, DropTarget, MoveIntent, TaskCard, TaskColumn
from .notifications import Toast, ToastQueue
from .persistence import MovePersister
from .positions import move_in_sequence, relocate
from .receiver import BroadcastReceiver
from .search import DebouncedSearch
from .session import BoardSession
from .store import BoardStore
from .targets import resolve_drop_target
