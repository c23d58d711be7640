"""
Connection status state machine.

checking -> connected | offline | error
connected -> error | checking
error -> connected | checking
offline: sticky for the lifetime of the session.
"""

from __future__ import annotations

import logging
import threading

from personart_backend.sync.exceptions import InvalidTransition

logger = logging.getLogger(__name__)


class ConnectionStatus:
    CHECKING = 'checking'
    CONNECTED = 'connected'
    ERROR = 'error'
    OFFLINE = 'offline'

    ALL = (CHECKING, CONNECTED, ERROR, OFFLINE)


TRANSITIONS = {
    ConnectionStatus.CHECKING: {ConnectionStatus.CONNECTED, ConnectionStatus.OFFLINE, ConnectionStatus.ERROR},
    ConnectionStatus.CONNECTED: {ConnectionStatus.ERROR, ConnectionStatus.CHECKING},
    ConnectionStatus.ERROR: {ConnectionStatus.CONNECTED, ConnectionStatus.CHECKING},
    ConnectionStatus.OFFLINE: set(),
}


class ConnectionMonitor:
    """Holds the connection status of one clinic session."""

    def __init__(self, initial: str = ConnectionStatus.CHECKING):
        if initial not in TRANSITIONS:
            raise ValueError(f"unknown connection status {initial!r}")
        self._status = initial
        self._lock = threading.Lock()

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_offline(self) -> bool:
        return self._status == ConnectionStatus.OFFLINE

    def can_transition(self, target: str) -> bool:
        return target in TRANSITIONS.get(self._status, set())

    def transition(self, target: str) -> str:
        with self._lock:
            if target == self._status:
                return self._status
            if target not in TRANSITIONS.get(self._status, set()):
                raise InvalidTransition(self._status, target)
            logger.info('connection status %s -> %s', self._status, target)
            self._status = target
            return self._status

    # Convenience wrappers used by the coordinator.
    def mark_connected(self) -> str:
        return self.transition(ConnectionStatus.CONNECTED)

    def mark_error(self) -> str:
        return self.transition(ConnectionStatus.ERROR)

    def mark_offline(self) -> str:
        return self.transition(ConnectionStatus.OFFLINE)

    def mark_checking(self) -> str:
        return self.transition(ConnectionStatus.CHECKING)
