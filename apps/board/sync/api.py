# apps/board/sync/api.py

"""
HTTP client for the board REST API.

Every failure is turned into one of the ``errors`` classes so callers can
decide between "tell the user and resynchronise" and "give up".
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

import httpx

from .config import SyncSettings
from .errors import (
    AccessDeniedError,
    MoveValidationError,
    NetworkError,
    NotFoundError,
    ServerError,
)
from .models import BoardSnapshot

logger = logging.getLogger(__name__)

CLIENT_ID_HEADER = 'X-Client-Id'


class BoardAPIClient:
    """Async client for ``/board/api/`` and ``/api/users/``"""

    def __init__(self, settings: Optional[SyncSettings] = None, client_id: Optional[str] = None,
                 http: Optional[httpx.AsyncClient] = None, headers: Optional[Dict[str, str]] = None,
                 cookies: Optional[Dict[str, str]] = None):
        self.settings = settings or SyncSettings()
        self.client_id = client_id or uuid.uuid4().hex

        default_headers = {CLIENT_ID_HEADER: self.client_id, 'Accept': 'application/json'}
        default_headers.update(headers or {})

        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=self.settings.http_timeout,
        )
        self._http.headers.update(default_headers)
        if cookies:
            self._http.cookies.update(cookies)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # === Boards ===

    async def list_boards(self) -> List[Dict[str, Any]]:
        data = await self._request('GET', '/board/api/boards/')
        return data['boards']

    async def fetch_board(self, board_id: str) -> BoardSnapshot:
        """Full board state: lists, tasks (with positions) and members"""
        data = await self._request('GET', f'/board/api/boards/{board_id}/')
        return BoardSnapshot.from_dict(data['board'])

    # === Tasks ===

    async def create_task(self, board_id: str, list_id: str, title: str, **fields) -> Dict[str, Any]:
        payload = {'list_id': list_id, 'title': title}
        payload.update(fields)
        data = await self._request('POST', f'/board/api/boards/{board_id}/tasks/', json=payload)
        return data['task']

    async def move_task(self, board_id: str, task_id: str, list_id: str, position: int) -> Dict[str, Any]:
        """The authoritative move: task ends up at ``position`` of ``list_id``"""
        data = await self._request(
            'POST',
            f'/board/api/boards/{board_id}/tasks/{task_id}/move/',
            json={'list_id': list_id, 'position': position},
        )
        return data['task']

    # === Members ===

    async def search_users(self, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        data = await self._request('GET', '/api/users/search/', params={'q': query, 'limit': limit})
        return data['users']

    async def add_member(self, board_id: str, user_id: int, role: str = 'editor') -> Dict[str, Any]:
        data = await self._request(
            'POST', f'/board/api/boards/{board_id}/members/',
            json={'user_id': user_id, 'role': role},
        )
        return data['member']

    async def remove_member(self, board_id: str, user_id: int) -> None:
        await self._request('DELETE', f'/board/api/boards/{board_id}/members/{user_id}/')

    # === Activity ===

    async def activity(self, board_id: str, page: int = 1) -> Dict[str, Any]:
        return await self._request('GET', f'/board/api/boards/{board_id}/activity/', params={'page': page})

    # === Internals ===

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkError(f'{method} {url} timed out') from exc
        except httpx.TransportError as exc:
            raise NetworkError(f'{method} {url} failed: {exc}') from exc

        if response.is_success:
            if not response.content:
                return {}
            try:
                data = response.json()
            except ValueError as exc:
                raise ServerError(f'{method} {url} returned a body that is not JSON', response.status_code) from exc
            if not isinstance(data, dict):
                raise ServerError(f'{method} {url} returned unexpected JSON', response.status_code)
            return data

        payload = self._error_payload(response)
        message = payload.get('error') or f'{method} {url} returned {response.status_code}'
        logger.warning("❌ %s %s -> %s: %s", method, url, response.status_code, message)

        status = response.status_code
        if status == 404:
            raise NotFoundError(message, status, payload)
        if status in (401, 403):
            raise AccessDeniedError(message, status, payload)
        if status in (400, 409, 422):
            raise MoveValidationError(message, status, payload)
        raise ServerError(message, status, payload)

    @staticmethod
    def _error_payload(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
