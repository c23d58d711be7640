from __future__ import annotations

from datetime import date

from django.test import SimpleTestCase

from personart_backend.appointments.exceptions import ValidationError
from personart_backend.appointments.models import Appointment
from personart_backend.appointments.recurrence import (
	POLICY_BIWEEKLY,
	POLICY_WEEKLY,
	BookingRequest,
	RecurrenceSpec,
	generate_series,
	occurrence_note,
)
from personart_backend.patients.models import Patient

SIMONE = "Simone Martins De Agrela - CRP 196674"


class GenerateSeriesTest(SimpleTestCase):
	def setUp(self):
		self.patient = Patient(
			id="p-1",
			name="Ana Souza",
			insurer="Funserv",
			card_number="CART-1",
			authorization_number="AUT-1",
			authorization_date="2024-01-10",
		)

	def _request(self, **overrides):
		data = {
			"patient": self.patient,
			"professional": SIMONE,
			"date": "2024-01-25",
			"time": "09:00",
			"note": "",
		}
		data.update(overrides)
		return BookingRequest(**data)

	def _assert_field_error(self, field, request=None, recurrence=None):
		with self.assertRaises(ValidationError) as ctx:
			generate_series(request or self._request(), recurrence)
		self.assertEqual(ctx.exception.field, field)

	def test_single_appointment(self):
		series = generate_series(self._request(note="First visit"))
		self.assertEqual(len(series), 1)
		appt = series[0]
		self.assertEqual(appt.date, date(2024, 1, 25))
		self.assertEqual(appt.note, "First visit")
		self.assertEqual(appt.patient_name, "Ana Souza")
		self.assertEqual(appt.card_number, "CART-1")
		self.assertEqual(appt.insurer_name, "Funserv")
		self.assertEqual(appt.authorization_number, "AUT-1")
		self.assertEqual(appt.status, Appointment.STATUS_SCHEDULED)

	def test_weekly_series(self):
		series = generate_series(self._request(), RecurrenceSpec(policy=POLICY_WEEKLY, count=4))
		self.assertEqual(
			[a.date for a in series],
			[date(2024, 1, 25), date(2024, 2, 1), date(2024, 2, 8), date(2024, 2, 15)],
		)
		self.assertEqual({a.time for a in series}, {"09:00"})
		self.assertEqual([a.note for a in series], ["", "Session 2", "Session 3", "Session 4"])

	def test_biweekly_series(self):
		series = generate_series(self._request(note="Funserv"), RecurrenceSpec(policy=POLICY_BIWEEKLY, count=3))
		self.assertEqual([a.date for a in series], [date(2024, 1, 25), date(2024, 2, 8), date(2024, 2, 22)])
		self.assertEqual(series[2].note, "Funserv - Session 3")

	def test_ids_are_distinct(self):
		series = generate_series(self._request(), RecurrenceSpec(policy=POLICY_WEEKLY, count=52))
		self.assertEqual(len({a.id for a in series}), 52)

	def test_anchor_overrides_start(self):
		series = generate_series(
			self._request(),
			RecurrenceSpec(policy=POLICY_WEEKLY, count=2, anchor=date(2024, 2, 1)),
		)
		self.assertEqual(series[0].date, date(2024, 2, 1))

	def test_type_follows_insurer(self):
		self.assertEqual(generate_series(self._request())[0].type, Appointment.TYPE_INSURANCE)
		self.patient.insurer = ""
		self.assertEqual(generate_series(self._request())[0].type, Appointment.TYPE_PRIVATE)
		self.patient.insurer = "Funserv"
		explicit = generate_series(self._request(type=Appointment.TYPE_PRIVATE))
		self.assertEqual(explicit[0].type, Appointment.TYPE_PRIVATE)

	def test_required_fields(self):
		self._assert_field_error("patient", self._request(patient=None))
		self._assert_field_error("professional", self._request(professional="  "))
		self._assert_field_error("date", self._request(date=None))
		self._assert_field_error("date", self._request(date="25/01/2024"))
		self._assert_field_error("time", self._request(time=None))

	def test_time_must_be_a_slot(self):
		self._assert_field_error("time", self._request(time="09:15"))
		self._assert_field_error("time", self._request(time="20:30"))
		self.assertEqual(generate_series(self._request(time="20:00"))[0].time, "20:00")

	def test_recurrence_bounds(self):
		self._assert_field_error("count", recurrence=RecurrenceSpec(policy=POLICY_WEEKLY, count=1))
		self._assert_field_error("count", recurrence=RecurrenceSpec(policy=POLICY_WEEKLY, count=53))
		self._assert_field_error("count", recurrence=RecurrenceSpec(policy=POLICY_WEEKLY, count="many"))
		self._assert_field_error("policy", recurrence=RecurrenceSpec(policy="monthly", count=2))

	def test_occurrence_note(self):
		self.assertEqual(occurrence_note("", 1), "")
		self.assertEqual(occurrence_note("Obs", 1), "Obs")
		self.assertEqual(occurrence_note("Obs", 2), "Obs - Session 2")

	def test_series_crosses_year_boundary(self):
		series = generate_series(
			self._request(date="2024-12-26"),
			RecurrenceSpec(policy=POLICY_BIWEEKLY, count=3),
		)
		self.assertEqual([a.date for a in series], [date(2024, 12, 26), date(2025, 1, 9), date(2025, 1, 23)])
