# apps/board/sync/notifications.py

"""
Transient user notifications ("toasts").

The client never renders anything itself: it queues short messages with a
level and a lifetime, and the UI layer polls ``active()`` or subscribes.
Every toast is also logged.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

LEVELS = ('success', 'error', 'info')

_LOG_LEVELS = {
    'success': logging.INFO,
    'info': logging.INFO,
    'error': logging.WARNING,
}


@dataclass
class Toast:
    id: int
    message: str
    level: str = 'info'
    duration: float = 3.0
    created_at: float = field(default_factory=time.monotonic)

    def expired(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.created_at >= self.duration


class ToastQueue:
    """Holds the toasts currently visible"""

    def __init__(self, default_duration: float = 3.0, clock: Callable[[], float] = time.monotonic):
        self.default_duration = default_duration
        self._clock = clock
        self._toasts: List[Toast] = []
        self._ids = itertools.count(1)
        self._listeners: List[Callable[[Toast], None]] = []

    def subscribe(self, listener: Callable[[Toast], None]) -> None:
        self._listeners.append(listener)

    def add(self, message: str, level: str = 'info', duration: Optional[float] = None) -> Toast:
        if level not in LEVELS:
            raise ValueError(f'Unknown toast level: {level}')

        toast = Toast(
            id=next(self._ids),
            message=message,
            level=level,
            duration=self.default_duration if duration is None else duration,
            created_at=self._clock(),
        )
        self._toasts.append(toast)
        logger.log(_LOG_LEVELS[level], "🔔 %s", message)

        for listener in list(self._listeners):
            listener(toast)
        return toast

    def success(self, message: str) -> Toast:
        return self.add(message, 'success')

    def error(self, message: str) -> Toast:
        return self.add(message, 'error')

    def dismiss(self, toast_id: int) -> bool:
        before = len(self._toasts)
        self._toasts = [t for t in self._toasts if t.id != toast_id]
        return len(self._toasts) != before

    def active(self) -> List[Toast]:
        """Visible toasts; expired ones are dropped on the way"""
        now = self._clock()
        self._toasts = [t for t in self._toasts if not t.expired(now)]
        return list(self._toasts)
