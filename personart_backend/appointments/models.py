"""Appointment cache for the clinic agenda.

Notes:

- ``patient_id`` is a weak string reference to ``patients.Patient``. There is no
  ForeignKey: appointments outlive patient deletion and keep their
  denormalized copy (name, card, authorization).
- ``professional`` is the free-text display string ("Name - CRP 123"), the same
  namespace as ``Patient.professionals``.
- (date, time, professional) is deliberately not unique.
"""

from django.db import models


def _build_time_slots(start_hour=7, end_hour=20, step_minutes=30):
	slots = []
	minutes = start_hour * 60
	while minutes <= end_hour * 60:
		slots.append(f"{minutes // 60:02d}:{minutes % 60:02d}")
		minutes += step_minutes
	return slots


# 07:00 ... 20:00, every 30 minutes.
TIME_SLOTS = tuple(_build_time_slots())


class Appointment(models.Model):
	"""A single booked session."""

	TYPE_INSURANCE = 'insurance'
	TYPE_PRIVATE = 'private'
	TYPE_CHOICES = [
		(TYPE_INSURANCE, 'Insurance'),
		(TYPE_PRIVATE, 'Private'),
	]

	STATUS_SCHEDULED = 'scheduled'
	STATUS_COMPLETED = 'completed'
	STATUS_CANCELLED = 'cancelled'
	STATUS_CHOICES = [
		(STATUS_SCHEDULED, 'Scheduled'),
		(STATUS_COMPLETED, 'Completed'),
		(STATUS_CANCELLED, 'Cancelled'),
	]

	id = models.CharField(primary_key=True, max_length=80)
	patient_id = models.CharField(max_length=64, db_index=True)

	# Denormalized from the patient at creation time.
	patient_name = models.CharField(max_length=200, blank=True, default='')
	card_number = models.CharField(max_length=64, blank=True, default='')
	insurer_name = models.CharField(max_length=120, blank=True, default='')
	authorization_number = models.CharField(max_length=64, blank=True, default='')
	authorization_date = models.CharField(max_length=32, blank=True, default='')

	professional = models.CharField(max_length=200, db_index=True)
	date = models.DateField(db_index=True)
	time = models.CharField(max_length=5)
	type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_PRIVATE)
	status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)
	note = models.TextField(blank=True, default='')

	# Local insertion counter, secondary sort key for day views.
	cache_order = models.PositiveIntegerField(default=0, db_index=True)
	extra_data = models.JSONField(default=dict, blank=True)

	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		db_table = 'appointments_cache'
		ordering = ['cache_order', 'id']
		verbose_name = 'Appointment (Cache)'
		verbose_name_plural = 'Appointments (Cache)'
		indexes = [
			models.Index(fields=['date', 'time'], name='appointment_date_time_idx'),
		]

	def __str__(self) -> str:
		return f"Appointment {self.id} {self.date} {self.time} ({self.professional})"
