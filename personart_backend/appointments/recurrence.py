"""Recurrence & slot generation.

Turns one booking request into one or more unsaved ``Appointment`` instances.
No collision check happens here; the booking conflict policy is applied by
the sync coordinator (see ``slot_conflicts``).
"""

from __future__ import annotations

import secrets
import time as _time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from personart_backend.patients.models import Patient

from .exceptions import Conflict, ValidationError
from .models import TIME_SLOTS, Appointment

POLICY_NONE = 'none'
POLICY_WEEKLY = 'weekly'
POLICY_BIWEEKLY = 'biweekly'

POLICY_STEP_DAYS = {
	POLICY_WEEKLY: 7,
	POLICY_BIWEEKLY: 14,
}

MIN_OCCURRENCES = 2
MAX_OCCURRENCES = 52


@dataclass
class BookingRequest:
	patient: Patient | None
	professional: str
	date: date | str | None
	time: str | None
	type: str | None = None
	note: str = ''
	status: str = Appointment.STATUS_SCHEDULED


@dataclass
class RecurrenceSpec:
	policy: str = POLICY_NONE
	count: int = 1
	# Defaults to the request date.
	anchor: date | None = field(default=None)

	@property
	def repeats(self) -> bool:
		return self.policy != POLICY_NONE


def parse_date(value, *, field_name: str = 'date') -> date:
	if isinstance(value, datetime):
		return value.date()
	if isinstance(value, date):
		return value
	if not value or not isinstance(value, str):
		raise ValidationError(f'{field_name} is required.', field=field_name)
	try:
		return date.fromisoformat(value.strip())
	except ValueError:
		raise ValidationError(f'{field_name} must be an ISO date (YYYY-MM-DD).', field=field_name)


def new_appointment_id(index: int) -> str:
	return f"{_time.time_ns()}-{secrets.token_hex(4)}-{index}"


def occurrence_note(note: str, number: int) -> str:
	"""Note for the N-th occurrence (1-based); the first keeps the note as is."""
	if number <= 1:
		return note
	label = f"Session {number}"
	if note:
		return f"{note} - {label}"
	return label


def validate_request(request: BookingRequest) -> date:
	"""Check required fields; returns the parsed start date."""
	if request.patient is None:
		raise ValidationError('patient is required.', field='patient')
	if not (request.professional or '').strip():
		raise ValidationError('professional is required.', field='professional')
	start = parse_date(request.date)
	if not request.time:
		raise ValidationError('time is required.', field='time')
	if request.time not in TIME_SLOTS:
		raise ValidationError(f'time {request.time!r} is not a bookable slot.', field='time')
	if request.type is not None and request.type not in dict(Appointment.TYPE_CHOICES):
		raise ValidationError(f'unknown appointment type {request.type!r}.', field='type')
	if request.status not in dict(Appointment.STATUS_CHOICES):
		raise ValidationError(f'unknown appointment status {request.status!r}.', field='status')
	return start


def validate_recurrence(recurrence: RecurrenceSpec) -> int:
	"""Returns the number of occurrences to generate."""
	if recurrence.policy != POLICY_NONE and recurrence.policy not in POLICY_STEP_DAYS:
		raise ValidationError(f'unknown recurrence policy {recurrence.policy!r}.', field='policy')
	if not recurrence.repeats:
		return 1
	try:
		count = int(recurrence.count)
	except (TypeError, ValueError):
		raise ValidationError('count must be an integer.', field='count')
	if not MIN_OCCURRENCES <= count <= MAX_OCCURRENCES:
		raise ValidationError(
			f'count must be between {MIN_OCCURRENCES} and {MAX_OCCURRENCES}.',
			field='count',
		)
	return count


def default_type(patient: Patient) -> str:
	if patient.has_insurer:
		return Appointment.TYPE_INSURANCE
	return Appointment.TYPE_PRIVATE


def generate_series(request: BookingRequest, recurrence: RecurrenceSpec | None = None) -> list[Appointment]:
	"""Expand a booking request into unsaved appointments.

	policy "none" yields exactly one appointment. "weekly"/"biweekly" yield
	``count`` appointments, 7 or 14 calendar days apart starting at the anchor,
	all at the same time. Raises ValidationError before producing anything.
	"""
	recurrence = recurrence or RecurrenceSpec()
	start = validate_request(request)
	count = validate_recurrence(recurrence)

	anchor = start
	if recurrence.anchor is not None:
		anchor = parse_date(recurrence.anchor, field_name='anchor')
	step = timedelta(days=POLICY_STEP_DAYS.get(recurrence.policy, 0))

	patient = request.patient
	appt_type = request.type or default_type(patient)
	note = (request.note or '').strip()

	series = []
	for index in range(count):
		series.append(
			Appointment(
				id=new_appointment_id(index),
				patient_id=patient.id,
				patient_name=patient.name,
				card_number=patient.card_number,
				insurer_name=patient.insurer,
				authorization_number=patient.authorization_number,
				authorization_date=patient.authorization_date,
				professional=request.professional.strip(),
				date=anchor + step * index,
				time=request.time,
				type=appt_type,
				status=request.status,
				note=occurrence_note(note, index + 1),
			)
		)
	return series


def slot_conflicts(planned: list[Appointment]) -> list[Conflict]:
	"""Existing, non-cancelled appointments on the same professional/date/time."""
	conflicts = []
	for appt in planned:
		taken = (
			Appointment.objects.using('default')
			.filter(professional=appt.professional, date=appt.date, time=appt.time)
			.exclude(status=Appointment.STATUS_CANCELLED)
			.exclude(id=appt.id)
			.order_by('cache_order', 'id')
		)
		for other in taken:
			conflicts.append(
				Conflict(
					type='professional_conflict',
					model='Appointment',
					id=other.id,
					professional=other.professional,
					date=other.date.isoformat(),
					time=other.time,
					message=f'{other.professional} already has {other.patient_name or other.patient_id} at this slot',
				)
			)
	return conflicts
