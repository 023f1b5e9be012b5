# apps/board/sync/search.py

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .api import BoardAPIClient
from .errors import SyncError

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2

Results = List[Dict[str, Any]]


class DebouncedSearch:
    """
    Member search that waits for typing to settle.

    Each ``submit`` supersedes the pending one: the earlier lookup is
    cancelled before it reaches the server, or its answer is dropped if it
    was already in flight. Users who are already on the board are filtered
    out of the results.
    """

    def __init__(self, api: BoardAPIClient, on_results: Callable[[Results], None],
                 exclude: Callable[[], Iterable[int]] = tuple,
                 delay: float = 0.3, limit: int = 10):
        self.api = api
        self.on_results = on_results
        self.exclude = exclude
        self.delay = delay
        self.limit = limit
        self.searching = False
        self._pending: Optional[asyncio.Task] = None

    def submit(self, query: str) -> Optional[asyncio.Task]:
        self.cancel()

        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            self.searching = False
            self.on_results([])
            return None

        self.searching = True
        self._pending = asyncio.ensure_future(self._run(query))
        return self._pending

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _run(self, query: str) -> None:
        await asyncio.sleep(self.delay)
        try:
            users = await self.api.search_users(query, self.limit)
        except SyncError as exc:
            logger.warning("User search for %r failed: %s", query, exc)
            users = []

        existing = set(self.exclude())
        self.searching = False
        self.on_results([u for u in users if u['id'] not in existing])
