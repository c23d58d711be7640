"""
Remote store clients.

The remote store is a generic keyed table store with three tables
(patients, appointments, inbox). Rows carry ``id``, a ``data`` JSON
document and a few denormalized columns used for server-side search.

SupabaseStore talks to the Supabase REST (PostgREST) endpoint with
``requests``. build_remote_store() returns None when no store is
configured, which puts the session offline.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests
from django.conf import settings

from personart_backend.sync.exceptions import RemoteStoreError

logger = logging.getLogger(__name__)

PATIENTS = 'patients'
APPOINTMENTS = 'appointments'
INBOX = 'inbox'

TABLES = (PATIENTS, APPOINTMENTS, INBOX)


class RemoteStore(ABC):
    """Keyed table store contract."""

    @abstractmethod
    def select(self, table: str) -> list[dict[str, Any]]:
        """Return every row of ``table``."""

    @abstractmethod
    def upsert(self, table: str, rows: dict[str, Any] | list[dict[str, Any]]) -> None:
        """Insert or replace rows keyed by ``id``."""

    @abstractmethod
    def delete(self, table: str, record_id: str) -> None:
        """Delete the row with ``id == record_id``."""


class SupabaseStore(RemoteStore):
    def __init__(self, url: str, api_key: str, *, timeout: float | None = None, session: requests.Session | None = None):
        self.base_url = url.rstrip('/') + '/rest/v1'
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                'apikey': api_key,
                'Authorization': f'Bearer {api_key}',
                'Accept': 'application/json',
                'Content-Type': 'application/json',
            }
        )

    def _url(self, table: str) -> str:
        return f"{self.base_url}/{table}"

    def _request(self, method: str, table: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, self._url(table), timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response
        except requests.RequestException as exc:
            resp = getattr(exc, 'response', None)
            status_code = getattr(resp, 'status_code', None)
            body = getattr(resp, 'text', '') if resp is not None else ''
            logger.warning('remote %s %s failed: %s %s', method, table, exc, body[:200])
            raise RemoteStoreError(str(exc), table=table, status_code=status_code) from exc

    def select(self, table: str) -> list[dict[str, Any]]:
        response = self._request('GET', table, params={'select': '*'})
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteStoreError(f'invalid JSON from {table}: {exc}', table=table) from exc
        if not isinstance(data, list):
            raise RemoteStoreError(f'unexpected payload from {table}', table=table)
        return data

    def upsert(self, table: str, rows: dict[str, Any] | list[dict[str, Any]]) -> None:
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            return
        self._request(
            'POST',
            table,
            params={'on_conflict': 'id'},
            json=rows,
            headers={'Prefer': 'resolution=merge-duplicates,return=minimal'},
        )

    def delete(self, table: str, record_id: str) -> None:
        self._request('DELETE', table, params={'id': f'eq.{record_id}'})


def build_remote_store() -> RemoteStore | None:
    url = (getattr(settings, 'SUPABASE_URL', '') or '').strip()
    key = (getattr(settings, 'SUPABASE_ANON_KEY', '') or '').strip()
    if not url or not key or not url.startswith('http'):
        logger.warning('remote store not configured; sessions will run offline')
        return None
    return SupabaseStore(url, key, timeout=getattr(settings, 'SUPABASE_TIMEOUT', None))
