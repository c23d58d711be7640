"""
Remote effects and the outbox.

Every local mutation is followed by one or more RemoteEffect commands. An
effect only names the record; the row is rebuilt from the local cache when
the effect runs, so replaying an old effect never sends stale data.
Effects that fail are stored in the outbox (sync.PendingEffect) and
replayed later by the coordinator or the flush_outbox Celery task.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from django.db import transaction

from personart_backend.appointments.models import Appointment
from personart_backend.patients.models import Patient
from personart_backend.sync import codec
from personart_backend.sync.exceptions import RemoteStoreError
from personart_backend.sync.models import PendingEffect
from personart_backend.sync.remote import APPOINTMENTS, INBOX, PATIENTS, RemoteStore

logger = logging.getLogger(__name__)

UPSERT = PendingEffect.UPSERT
DELETE = PendingEffect.DELETE


@dataclass(frozen=True)
class RemoteEffect:
    table: str
    record_id: str
    operation: str = UPSERT

    def row(self) -> dict[str, Any] | None:
        """Current local row for an upsert, None when the record is gone."""
        if self.table == PATIENTS:
            patient = (
                Patient.objects.using('default')
                .select_related('insurance_plan')
                .filter(id=self.record_id)
                .first()
            )
            return codec.patient_row(patient) if patient else None
        if self.table == APPOINTMENTS:
            appt = Appointment.objects.using('default').filter(id=self.record_id).first()
            return codec.appointment_row(appt) if appt else None
        # Inbox entries are only ever deleted from here.
        return None


def apply_effects(store: RemoteStore, effects: Iterable[RemoteEffect]) -> None:
    """Run effects against the store: one upsert per table, deletes one by one.

    Raises RemoteStoreError on the first failure.
    """
    upserts: dict[str, list[dict[str, Any]]] = {}
    deletes: list[RemoteEffect] = []
    for effect in effects:
        if effect.operation == DELETE:
            deletes.append(effect)
            continue
        row = effect.row()
        if row is None:
            logger.info('skipping upsert of missing %s/%s', effect.table, effect.record_id)
            continue
        upserts.setdefault(effect.table, []).append(row)

    for table, rows in upserts.items():
        store.upsert(table, rows)
    for effect in deletes:
        store.delete(effect.table, effect.record_id)


class Outbox:
    """Persistent queue of failed effects, one entry per record."""

    def record(self, effects: Iterable[RemoteEffect], error: str = '') -> None:
        with transaction.atomic(using='default'):
            for effect in effects:
                entry, created = PendingEffect.objects.using('default').get_or_create(
                    table=effect.table,
                    record_id=effect.record_id,
                    defaults={'operation': effect.operation},
                )
                entry.operation = effect.operation
                entry.attempts = entry.attempts + 1 if error else entry.attempts
                entry.last_error = error[:2000]
                entry.save(using='default')

    def discard(self, effects: Iterable[RemoteEffect]) -> None:
        for effect in effects:
            PendingEffect.objects.using('default').filter(
                table=effect.table,
                record_id=effect.record_id,
            ).delete()

    def pending(self) -> list[RemoteEffect]:
        return [
            RemoteEffect(entry.table, entry.record_id, entry.operation)
            for entry in PendingEffect.objects.using('default').order_by('created_at', 'id')
        ]

    def pending_ids(self, table: str) -> set[str]:
        return set(
            PendingEffect.objects.using('default').filter(table=table).values_list('record_id', flat=True)
        )

    def count(self) -> int:
        return PendingEffect.objects.using('default').count()


def replay_outbox(store: RemoteStore, outbox: Outbox | None = None) -> tuple[int, int]:
    """Send every pending effect; returns (sent, failed)."""
    outbox = outbox or Outbox()
    sent = failed = 0
    for effect in outbox.pending():
        try:
            apply_effects(store, [effect])
        except RemoteStoreError as exc:
            failed += 1
            outbox.record([effect], error=str(exc))
            logger.warning(
                'outbox replay failed table=%s op=%s id=%s: %s',
                effect.table,
                effect.operation,
                effect.record_id,
                exc,
            )
            continue
        outbox.discard([effect])
        sent += 1
    if sent or failed:
        logger.info('outbox replay sent=%s failed=%s', sent, failed)
    return sent, failed


__all__ = [
    'APPOINTMENTS',
    'DELETE',
    'INBOX',
    'Outbox',
    'PATIENTS',
    'RemoteEffect',
    'UPSERT',
    'apply_effects',
    'replay_outbox',
]
