# apps/board/sync/errors.py

"""Errors raised by the board API client"""


class SyncError(Exception):
    """Base class for every failure talking to the board server"""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class NetworkError(SyncError):
    """Request never got a response (connection refused, timeout, ...)"""


class NotFoundError(SyncError):
    """Board, list or task vanished, usually deleted by another user"""


class MoveValidationError(SyncError):
    """Server rejected the destination list or position"""


class AccessDeniedError(SyncError):
    """Not logged in, or the board role does not allow the action"""


class ServerError(SyncError):
    """Any other non-2xx answer"""
