"""
Clinic sessions.

A ClinicSession binds a signed-in user to a SyncCoordinator. It is opened
on login (which runs the initial fetch) and closed on logout, dropping the
transient inbox and pending toasts. The SessionRegistry owned by the sync
app config keeps one session per user id.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from django.apps import apps
from django.conf import settings
from django.utils import timezone

from personart_backend.appointments.access import ProfessionalDirectory, visible
from personart_backend.appointments.calendar import CalendarProjector
from personart_backend.sync.coordinator import CacheRevision, SyncCoordinator
from personart_backend.sync.remote import RemoteStore, build_remote_store

logger = logging.getLogger(__name__)


class ClinicSession:
    def __init__(self, user, coordinator: SyncCoordinator):
        self.user = user
        self.coordinator = coordinator
        self.opened_at = None
        self._projector: CalendarProjector | None = None

    @property
    def status(self) -> str:
        return self.coordinator.status

    @property
    def notifier(self):
        return self.coordinator.notifier

    def open(self) -> 'ClinicSession':
        self.opened_at = timezone.now()
        self.coordinator.fetch_data()
        return self

    def close(self) -> None:
        self._projector = None
        self.coordinator.close()

    # Reads narrowed by the access filter.

    def visible_patients(self) -> list:
        return visible(self.coordinator.patients(), self.user)

    def visible_appointments(self) -> list:
        return visible(self.coordinator.appointments(), self.user)

    def calendar(self) -> CalendarProjector:
        """Projector over the appointments this user may see, per cache revision."""
        revision = self.coordinator.revision.value
        if self._projector is None or self._projector.revision != revision:
            appointments = visible(self.coordinator.appointments(), self.user, ProfessionalDirectory())
            self._projector = CalendarProjector(appointments, revision)
        return self._projector


class SessionRegistry:
    def __init__(self, remote_factory: Callable[[], RemoteStore | None] = build_remote_store):
        self.remote_factory = remote_factory
        self.revision = CacheRevision()
        self._sessions: dict[int, ClinicSession] = {}
        self._lock = threading.Lock()

    def create_coordinator(self) -> SyncCoordinator:
        return SyncCoordinator(
            self.remote_factory(),
            conflict_policy=getattr(settings, 'BOOKING_CONFLICT_POLICY', None),
            revision=self.revision,
        )

    def open(self, user) -> ClinicSession:
        """Open a fresh session for ``user``, replacing any existing one."""
        session = ClinicSession(user, self.create_coordinator())
        with self._lock:
            previous = self._sessions.pop(user.pk, None)
            self._sessions[user.pk] = session
        if previous is not None:
            previous.close()
        session.open()
        logger.info('session opened user=%s status=%s', user.pk, session.status)
        return session

    def get(self, user) -> ClinicSession | None:
        with self._lock:
            return self._sessions.get(user.pk)

    def for_user(self, user) -> ClinicSession:
        """The user's session, opened lazily (e.g. after a process restart)."""
        session = self.get(user)
        if session is None:
            session = self.open(user)
        else:
            session.user = user
        return session

    def close(self, user) -> bool:
        with self._lock:
            session = self._sessions.pop(user.pk, None)
        if session is None:
            return False
        session.close()
        logger.info('session closed user=%s', user.pk)
        return True

    def clear(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()

    def __len__(self) -> int:
        return len(self._sessions)


def session_registry() -> SessionRegistry:
    return apps.get_app_config('sync').sessions


def session_for(user) -> ClinicSession:
    return session_registry().for_user(user)
