"""
Toast notifications for a clinic session.

Non-fatal problems (remote write failed, working on local data, session
count exceeded) are queued here and drained by the client through
/api/sync/notifications/. Every toast is also logged.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from django.utils import timezone

logger = logging.getLogger(__name__)

INFO = 'info'
SUCCESS = 'success'
WARNING = 'warning'
ERROR = 'error'

_LOG_LEVELS = {
    INFO: logging.INFO,
    SUCCESS: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}

MAX_PENDING = 100


@dataclass
class Notification:
    level: str
    message: str
    created_at: datetime = field(default_factory=timezone.now)

    def to_dict(self) -> dict:
        return {
            'level': self.level,
            'message': self.message,
            'created_at': self.created_at.isoformat(),
        }


class Notifier:
    def __init__(self, maxlen: int = MAX_PENDING):
        self._queue: deque[Notification] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def notify(self, level: str, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        logger.log(_LOG_LEVELS.get(level, logging.INFO), 'toast level=%s %s', level, message)
        with self._lock:
            self._queue.append(notification)
        return notification

    def info(self, message: str) -> Notification:
        return self.notify(INFO, message)

    def success(self, message: str) -> Notification:
        return self.notify(SUCCESS, message)

    def warning(self, message: str) -> Notification:
        return self.notify(WARNING, message)

    def error(self, message: str) -> Notification:
        return self.notify(ERROR, message)

    def pending(self) -> list[Notification]:
        with self._lock:
            return list(self._queue)

    def drain(self) -> list[Notification]:
        with self._lock:
            items = list(self._queue)
            self._queue.clear()
        return items

    def clear(self) -> None:
        with self._lock:
            self._queue.clear()
