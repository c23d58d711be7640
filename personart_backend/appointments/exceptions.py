"""
Booking-specific exceptions for the appointments app.

These exceptions are raised by the recurrence generator and the booking
conflict policy and are translated to DRF responses in the views.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Conflict:
    """Represents a single slot collision."""
    type: str  # 'professional_conflict'
    model: str  # 'Appointment'
    id: str | None = None
    professional: str | None = None
    date: str | None = None
    time: str | None = None
    message: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result = {
            'type': self.type,
            'model': self.model,
        }
        if self.id is not None:
            result['id'] = self.id
        if self.professional is not None:
            result['professional'] = self.professional
        if self.date is not None:
            result['date'] = self.date
        if self.time is not None:
            result['time'] = self.time
        if self.message:
            result['message'] = self.message
        if self.meta:
            result['meta'] = self.meta
        return result


class SchedulingError(Exception):
    """Base exception for all booking-related errors."""
    pass


class ValidationError(SchedulingError):
    """
    Raised when a booking request is incomplete or malformed.

    Raised before any state is touched. ``field`` names the offending
    request attribute (patient, professional, date, time, policy, count).
    """
    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = {'detail': str(self)}
        if self.field:
            result['field'] = self.field
        return result


class SlotConflictError(SchedulingError):
    """
    Raised by the "reject" booking policy when requested slots are taken.

    Contains a list of Conflict objects describing each collision.
    """
    def __init__(self, conflicts: list[Conflict], message: str = "Requested slots are already booked"):
        self.conflicts = conflicts
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            'detail': self.message,
            'conflicts': [c.to_dict() for c in self.conflicts],
        }
