"""
Sync coordinator: the single authority for mutating patients and appointments.

Writes are local-first. Each mutation commits to the local cache inside a
transaction and only then mirrors to the remote store through RemoteEffect
commands. A remote failure never undoes the local write and never reaches
the caller: it is logged, the connection status goes to ``error``, a
warning toast is queued and the effect waits in the outbox.

While the session is ``offline`` no remote call is attempted at all; the
effects go straight to the outbox.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Any, Iterable

from django.conf import settings
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from personart_backend.appointments.calendar import CalendarProjector
from personart_backend.appointments.exceptions import SlotConflictError, ValidationError
from personart_backend.appointments.models import Appointment
from personart_backend.appointments.recurrence import (
    BookingRequest,
    RecurrenceSpec,
    generate_series,
    new_appointment_id,
    slot_conflicts,
)
from personart_backend.core.models import AuditLog
from personart_backend.core.utils import log_patient_action
from personart_backend.patients.models import InsurancePlan, Patient
from personart_backend.patients.services import derive_age_bracket, new_patient_id
from personart_backend.sync import codec
from personart_backend.sync.effects import (
    APPOINTMENTS,
    DELETE,
    INBOX,
    PATIENTS,
    Outbox,
    RemoteEffect,
    apply_effects,
    replay_outbox,
)
from personart_backend.sync.exceptions import RecordNotFound, RemoteReadError, RemoteStoreError, RemoteWriteError
from personart_backend.sync.inbox import InboxEntry
from personart_backend.sync.notifications import Notifier
from personart_backend.sync.remote import RemoteStore
from personart_backend.sync.status import ConnectionMonitor, ConnectionStatus

logger = logging.getLogger(__name__)

POLICY_ALLOW = 'allow'
POLICY_REJECT = 'reject'
CONFLICT_POLICIES = (POLICY_ALLOW, POLICY_REJECT)


class CacheRevision:
    """Monotonic counter of local cache changes, shared by the sessions of a process."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def bump(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


class SyncCoordinator:
    def __init__(
        self,
        remote: RemoteStore | None,
        *,
        monitor: ConnectionMonitor | None = None,
        notifier: Notifier | None = None,
        conflict_policy: str | None = None,
        revision: CacheRevision | None = None,
        outbox: Outbox | None = None,
    ):
        self.remote = remote
        self.monitor = monitor or ConnectionMonitor()
        self.notifier = notifier or Notifier()
        self.revision = revision or CacheRevision()
        self.outbox = outbox or Outbox()

        policy = conflict_policy or getattr(settings, 'BOOKING_CONFLICT_POLICY', POLICY_ALLOW)
        if policy not in CONFLICT_POLICIES:
            raise ValueError(f'unknown booking conflict policy {policy!r}')
        self.conflict_policy = policy

        self._inbox: dict[str, InboxEntry] = {}
        self._projector: CalendarProjector | None = None

        if self.remote is None and not self.monitor.is_offline:
            self.monitor.mark_offline()

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    @property
    def status(self) -> str:
        return self.monitor.status

    @property
    def is_offline(self) -> bool:
        return self.monitor.is_offline

    def _mirror(self, effects: list[RemoteEffect], what: str) -> bool:
        """Send effects to the remote store; True when they all went through."""
        if not effects:
            return True
        if self.is_offline or self.remote is None:
            self.outbox.record(effects)
            return False
        try:
            apply_effects(self.remote, effects)
        except RemoteStoreError as exc:
            first = effects[0]
            error = RemoteWriteError(first.table, first.record_id, first.operation, exc)
            logger.error('%s (batch of %s)', error, len(effects))
            self.outbox.record(effects, error=str(exc))
            self.monitor.mark_error()
            self.notifier.warning(f'Could not sync {what} with the server. Saved locally; will retry.')
            return False
        self.outbox.discard(effects)
        if self.status != ConnectionStatus.CONNECTED:
            self.monitor.mark_connected()
        return True

    def _changed(self) -> int:
        return self.revision.bump()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def patients(self) -> list[Patient]:
        return list(Patient.objects.using('default').select_related('insurance_plan').order_by('name', 'id'))

    def appointments(self) -> list[Appointment]:
        return list(Appointment.objects.using('default').order_by('cache_order', 'id'))

    def get_patient(self, patient_id: str) -> Patient:
        patient = (
            Patient.objects.using('default')
            .select_related('insurance_plan')
            .filter(id=patient_id)
            .first()
        )
        if patient is None:
            raise RecordNotFound('patient', patient_id)
        return patient

    def get_appointment(self, appointment_id: str) -> Appointment:
        appt = Appointment.objects.using('default').filter(id=appointment_id).first()
        if appt is None:
            raise RecordNotFound('appointment', appointment_id)
        return appt

    def calendar(self) -> CalendarProjector:
        """Projector over the current revision of the appointment list."""
        revision = self.revision.value
        if self._projector is None or self._projector.revision != revision:
            self._projector = CalendarProjector(self.appointments(), revision)
        return self._projector

    # -------------------------------------------------------------------------
    # Patients
    # -------------------------------------------------------------------------

    def save_patient(self, document: dict[str, Any]) -> Patient:
        """Create or update a patient from a legacy document.

        Keeps the document id (or generates one), takes the authorization
        from the insurer sub-object when it has one and derives the age
        bracket from the birth date when none was given.
        """
        decoded = codec.decode_patient(document)
        fields = decoded.fields
        if not fields['name']:
            raise ValidationError('nome is required.', field='nome')
        if not fields['age_bracket']:
            fields['age_bracket'] = derive_age_bracket(fields['birth_date'])

        patient_id = decoded.id or new_patient_id()
        with transaction.atomic(using='default'):
            patient, created = Patient.objects.using('default').update_or_create(
                id=patient_id,
                defaults=fields,
            )
            if decoded.plan is not None:
                InsurancePlan.objects.using('default').update_or_create(
                    patient=patient,
                    defaults=decoded.plan,
                )
        self._changed()
        logger.info('patient %s id=%s', 'created' if created else 'updated', patient_id)

        self._mirror([RemoteEffect(PATIENTS, patient_id)], f'patient {fields["name"]}')
        return self.get_patient(patient_id)

    def delete_patient(self, patient_id: str, user=None) -> None:
        """Delete the patient (and plan); appointments keep their copy."""
        patient = self.get_patient(patient_id)
        with transaction.atomic(using='default'):
            patient.delete(using='default')
        self._changed()
        log_patient_action(user, AuditLog.PATIENT_DELETED, patient_id=patient_id, meta={'name': patient.name})
        logger.info('patient deleted id=%s', patient_id)

        self._mirror([RemoteEffect(PATIENTS, patient_id, DELETE)], f'deletion of patient {patient.name}')

    def register_insurance_session(self, patient_id: str, on: date | None = None) -> InsurancePlan:
        """Count one used insurer session; warns when the authorized total is exceeded."""
        on = on or timezone.localdate()
        patient = self.get_patient(patient_id)
        with transaction.atomic(using='default'):
            plan, _ = InsurancePlan.objects.using('default').select_for_update().get_or_create(
                patient=patient,
                defaults={'start_date': on},
            )
            day = on.isoformat()
            if day in (plan.history or []):
                self.notifier.info(f'{patient.name}: a session was already registered on {day}.')
            plan.used_sessions += 1
            plan.history = [day] + list(plan.history or [])
            plan.save(using='default')
        self._changed()

        if plan.used_sessions > plan.total_sessions:
            self.notifier.warning(
                f'{patient.name}: {plan.used_sessions} sessions used, only {plan.total_sessions} authorized.'
            )
        self._mirror([RemoteEffect(PATIENTS, patient_id)], f'sessions of {patient.name}')
        return plan

    def renew_insurance_authorization(
        self,
        patient_id: str,
        on: date | None = None,
        *,
        total_sessions: int | None = None,
        authorization_number: str | None = None,
        authorization_date: str | None = None,
    ) -> InsurancePlan:
        """Start a new authorized guide: counter and history reset."""
        on = on or timezone.localdate()
        patient = self.get_patient(patient_id)
        with transaction.atomic(using='default'):
            plan, _ = InsurancePlan.objects.using('default').get_or_create(patient=patient)
            plan.used_sessions = 0
            plan.start_date = on
            plan.history = []
            if total_sessions is not None:
                if total_sessions < 1:
                    raise ValidationError('total_sessions must be positive.', field='total_sessions')
                plan.total_sessions = total_sessions
            plan.save(using='default')
            if authorization_number is not None or authorization_date is not None:
                if authorization_number is not None:
                    patient.authorization_number = authorization_number.strip()
                if authorization_date is not None:
                    patient.authorization_date = authorization_date.strip()
                patient.save(using='default', update_fields=['authorization_number', 'authorization_date', 'updated_at'])
        self._changed()
        logger.info('insurance authorization renewed patient=%s', patient_id)

        self._mirror([RemoteEffect(PATIENTS, patient_id)], f'guide renewal of {patient.name}')
        return plan

    # -------------------------------------------------------------------------
    # Appointments
    # -------------------------------------------------------------------------

    def add_appointment(self, appt: Appointment) -> Appointment:
        return self.add_appointment_batch([appt])[0]

    def add_appointment_batch(self, appointments: Iterable[Appointment]) -> list[Appointment]:
        """Append appointments in one transaction, then one remote upsert.

        The authorization of each appointment is taken from its patient as
        stored right now; the appointment's own value is kept only when the
        patient has none.
        """
        appointments = list(appointments)
        if not appointments:
            return []

        with transaction.atomic(using='default'):
            patient_ids = {a.patient_id for a in appointments}
            patients = {p.id: p for p in Patient.objects.using('default').filter(id__in=patient_ids)}
            current = Appointment.objects.using('default').aggregate(top=Max('cache_order'))['top'] or 0
            for offset, appt in enumerate(appointments):
                patient = patients.get(appt.patient_id)
                if patient is not None:
                    appt.authorization_number = patient.authorization_number or appt.authorization_number
                    appt.authorization_date = patient.authorization_date or appt.authorization_date
                if not appt.id:
                    appt.id = new_appointment_id(offset)
                appt.cache_order = current + offset + 1
                appt.save(using='default')
        self._changed()
        logger.info('appointments added count=%s', len(appointments))

        self._mirror(
            [RemoteEffect(APPOINTMENTS, a.id) for a in appointments],
            f'{len(appointments)} appointment(s)',
        )
        return appointments

    def book(self, request: BookingRequest, recurrence: RecurrenceSpec | None = None) -> list[Appointment]:
        series = generate_series(request, recurrence)
        if self.conflict_policy == POLICY_REJECT:
            conflicts = slot_conflicts(series)
            if conflicts:
                raise SlotConflictError(conflicts)
        return self.add_appointment_batch(series)

    def update_appointment(self, appt: Appointment) -> Appointment:
        if not Appointment.objects.using('default').filter(id=appt.id).exists():
            raise RecordNotFound('appointment', appt.id)
        appt.save(using='default')
        self._changed()
        self._mirror([RemoteEffect(APPOINTMENTS, appt.id)], f'appointment on {appt.date}')
        return appt

    def set_appointment_status(self, appointment_id: str, status: str) -> Appointment:
        if status not in dict(Appointment.STATUS_CHOICES):
            raise ValidationError(f'unknown appointment status {status!r}.', field='status')
        appt = self.get_appointment(appointment_id)
        appt.status = status
        appt.save(using='default', update_fields=['status', 'updated_at'])
        self._changed()
        self._mirror([RemoteEffect(APPOINTMENTS, appt.id)], f'appointment on {appt.date}')
        return appt

    def delete_appointment(self, appointment_id: str) -> None:
        appt = self.get_appointment(appointment_id)
        appt.delete(using='default')
        self._changed()
        self._mirror([RemoteEffect(APPOINTMENTS, appointment_id, DELETE)], f'deletion of appointment on {appt.date}')

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    def retry_pending(self) -> int:
        """Replay the outbox; returns how many effects went through."""
        if self.is_offline or self.remote is None:
            return 0
        sent, failed = replay_outbox(self.remote, self.outbox)
        if failed:
            self.monitor.mark_error()
            self.notifier.warning(f'{failed} change(s) still waiting to sync with the server.')
        elif sent and self.status == ConnectionStatus.ERROR:
            self.monitor.mark_connected()
        return sent

    def fetch_data(self) -> bool:
        """Load patients, appointments and inbox from the remote store.

        Remote rows overwrite the local cache, except records that still
        have a pending local effect. On failure the local cache is left as
        it is and the session keeps working on local data.
        """
        if self.remote is None:
            if not self.is_offline:
                self.monitor.mark_offline()
            logger.info('remote store not configured, working offline')
            return False
        if self.is_offline:
            return False

        replay_outbox(self.remote, self.outbox)

        rows = {}
        for table in (PATIENTS, APPOINTMENTS, INBOX):
            try:
                rows[table] = self.remote.select(table)
            except RemoteStoreError as exc:
                error = RemoteReadError(table, exc)
                logger.error('%s', error)
                self.monitor.mark_error()
                self.notifier.warning('Could not reach the server. Working on local data.')
                return False

        self._overwrite(rows[PATIENTS], rows[APPOINTMENTS])
        self._merge_inbox(rows[INBOX])
        self._changed()
        self.monitor.mark_connected()
        logger.info(
            'fetched patients=%s appointments=%s inbox=%s',
            len(rows[PATIENTS]),
            len(rows[APPOINTMENTS]),
            len(self._inbox),
        )
        return True

    def _overwrite(self, patient_rows: list[dict], appointment_rows: list[dict]) -> None:
        patients = codec.decode_rows(PATIENTS, patient_rows, codec.decode_remote_patient)
        appointments = codec.decode_rows(APPOINTMENTS, appointment_rows, codec.decode_appointment)

        with transaction.atomic(using='default'):
            keep_patients = self.outbox.pending_ids(PATIENTS)
            remote_ids = codec.row_ids(patient_rows)
            (
                Patient.objects.using('default')
                .exclude(id__in=remote_ids | keep_patients)
                .delete()
            )
            for decoded in patients:
                if decoded.id in keep_patients:
                    continue
                fields = decoded.fields
                if not fields['age_bracket']:
                    fields['age_bracket'] = derive_age_bracket(fields['birth_date'])
                patient, _ = Patient.objects.using('default').update_or_create(id=decoded.id, defaults=fields)
                if decoded.plan is not None:
                    InsurancePlan.objects.using('default').update_or_create(patient=patient, defaults=decoded.plan)
                else:
                    InsurancePlan.objects.using('default').filter(patient=patient).delete()

            keep_appointments = self.outbox.pending_ids(APPOINTMENTS)
            remote_ids = codec.row_ids(appointment_rows)
            (
                Appointment.objects.using('default')
                .exclude(id__in=remote_ids | keep_appointments)
                .delete()
            )
            order = 0
            for decoded in appointments:
                if decoded.id in keep_appointments:
                    continue
                order += 1
                Appointment.objects.using('default').update_or_create(
                    id=decoded.id,
                    defaults={**decoded.fields, 'cache_order': order},
                )
            # Unsynced local appointments go after the remote ones.
            kept = Appointment.objects.using('default').filter(id__in=keep_appointments).order_by('cache_order', 'id')
            for appt in kept:
                order += 1
                appt.cache_order = order
                appt.save(using='default', update_fields=['cache_order'])

    def _merge_inbox(self, rows: list[dict]) -> None:
        entries = codec.decode_rows(INBOX, rows, InboxEntry.from_document)
        dismissed = self.outbox.pending_ids(INBOX)
        self._inbox.update({e.id: e for e in entries})
        for entry_id in dismissed:
            self._inbox.pop(entry_id, None)

    def reconnect(self) -> bool:
        """Explicit reconnect attempt; a no-op for offline sessions."""
        if self.is_offline:
            return False
        self.monitor.mark_checking()
        return self.fetch_data()

    # -------------------------------------------------------------------------
    # Inbox
    # -------------------------------------------------------------------------

    @property
    def inbox(self) -> list[InboxEntry]:
        return sorted(self._inbox.values(), key=lambda e: (e.submitted_at, e.id))

    def get_inbox_entry(self, entry_id: str) -> InboxEntry:
        entry = self._inbox.get(entry_id)
        if entry is None:
            raise RecordNotFound('inbox entry', entry_id)
        return entry

    def approve_inbox(self, entry_id: str) -> tuple[Patient, list[Appointment]]:
        """Turn a pre-registration into a patient, booking the requested first session."""
        entry = self.get_inbox_entry(entry_id)
        patient = self.save_patient(entry.patient_document())

        booked: list[Appointment] = []
        if entry.schedule is not None and entry.schedule.is_requested():
            professional = entry.professional or next(iter(patient.professionals or []), '')
            note = f'Frequency: {entry.schedule.frequency}' if entry.schedule.frequency else ''
            try:
                booked = self.book(
                    BookingRequest(
                        patient=patient,
                        professional=professional,
                        date=entry.requested_date(),
                        time=entry.schedule.time,
                        note=note,
                    )
                )
            except (ValidationError, SlotConflictError) as exc:
                self.notifier.warning(f'{patient.name}: first appointment not booked ({exc}).')

        self._drop_inbox_entry(entry)
        self.notifier.success(f'{patient.name} registered.')
        return patient, booked

    def dismiss_inbox(self, entry_id: str) -> None:
        entry = self.get_inbox_entry(entry_id)
        self._drop_inbox_entry(entry)

    def _drop_inbox_entry(self, entry: InboxEntry) -> None:
        self._inbox.pop(entry.id, None)
        self._mirror([RemoteEffect(INBOX, entry.id, DELETE)], f'inbox entry {entry.name}')

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Drop transient state (inbox, toasts)."""
        self._inbox.clear()
        self._projector = None
        self.notifier.clear()
