"""
Sync-specific exceptions.

Remote failures are caught inside the coordinator and turned into log
records, toasts and outbox entries; they never reach the caller of a
mutation. InvalidTransition and RecordNotFound do propagate.
"""

from __future__ import annotations

from typing import Any

from personart_backend.appointments.exceptions import ValidationError


class SyncError(Exception):
    """Base exception for all sync-related errors."""
    pass


class RemoteStoreError(SyncError):
    """Transport or HTTP failure talking to the remote store."""
    def __init__(self, message: str, *, table: str | None = None, status_code: int | None = None):
        self.table = table
        self.status_code = status_code
        super().__init__(message)


class RemoteWriteError(SyncError):
    """An upsert/delete failed after the local commit succeeded."""
    def __init__(self, table: str, record_id: str, operation: str, cause: Exception | None = None):
        self.table = table
        self.record_id = record_id
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} {table}/{record_id} failed: {cause}")


class RemoteReadError(SyncError):
    """The initial load (select of patients/appointments/inbox) failed."""
    def __init__(self, table: str, cause: Exception | None = None):
        self.table = table
        self.cause = cause
        super().__init__(f"loading {table} failed: {cause}")


class InvalidTransition(SyncError):
    """Illegal connection status change."""
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"cannot go from {current!r} to {target!r}")


class RecordNotFound(SyncError):
    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id!r} not found")

    def to_dict(self) -> dict[str, Any]:
        return {'detail': str(self)}


class DocumentError(ValidationError):
    """A legacy document carries a value that cannot be decoded."""
    pass
