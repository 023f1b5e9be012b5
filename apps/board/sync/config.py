# apps/board/sync/config.py

from dataclasses import dataclass
from typing import Optional

import environ


@dataclass
class SyncSettings:
    """Connection settings for a board sync client"""

    api_url: str = 'http://localhost:8000'
    ws_url: str = 'ws://localhost:8000'
    http_timeout: float = 10.0
    search_delay: float = 0.3
    search_limit: int = 10
    reconnect_delay: float = 3.0
    toast_duration: float = 3.0

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'SyncSettings':
        """
        Read TASKBOARD_* variables, optionally from a .env file first.
        Missing variables keep the defaults above.
        """
        env = environ.Env()
        if env_file:
            environ.Env.read_env(env_file)

        defaults = cls()
        api_url = env.str('TASKBOARD_API_URL', default=defaults.api_url).rstrip('/')
        ws_default = api_url.replace('https://', 'wss://').replace('http://', 'ws://')
        return cls(
            api_url=api_url,
            ws_url=env.str('TASKBOARD_WS_URL', default=ws_default).rstrip('/'),
            http_timeout=env.float('TASKBOARD_HTTP_TIMEOUT', default=defaults.http_timeout),
            search_delay=env.float('TASKBOARD_SEARCH_DELAY', default=defaults.search_delay),
            search_limit=env.int('TASKBOARD_SEARCH_LIMIT', default=defaults.search_limit),
            reconnect_delay=env.float('TASKBOARD_RECONNECT_DELAY', default=defaults.reconnect_delay),
            toast_duration=env.float('TASKBOARD_TOAST_DURATION', default=defaults.toast_duration),
        )

    def board_socket_url(self, board_id: str, client_id: str) -> str:
        return f'{self.ws_url}/ws/board/{board_id}/?client_id={client_id}'
