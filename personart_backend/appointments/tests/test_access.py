from __future__ import annotations

from types import SimpleNamespace

from django.test import SimpleTestCase

from personart_backend.appointments.access import (
	ProfessionalDirectory,
	can_access,
	fuzzy_match,
	record_professionals,
	visible,
)
from personart_backend.core.models import Professional

SIMONE = "Simone Martins De Agrela - CRP 196674"
RAFAEL = "Rafael Costa - CRP 100200"


def _user(role="professional", professional_id=None, name=""):
	return SimpleNamespace(role_name=role, professional_id=professional_id, display_name=lambda: name)


def _appt(pk, professional):
	return SimpleNamespace(id=pk, professional=professional)


class AccessFilterTest(SimpleTestCase):
	def setUp(self):
		self.directory = ProfessionalDirectory(
			[
				Professional(id=1, name="Simone Martins De Agrela", credential="CRP 196674"),
				Professional(id=2, name="Rafael Costa", credential="CRP 100200"),
				Professional(id=3, name="Ana Lima", credential="CRP 1"),
				Professional(id=4, name="Ana Lima", credential="CRP 2"),
			]
		)
		self.simone = _user(professional_id=1, name=SIMONE)

	def test_professional_sees_own_appointments_only(self):
		appointments = [_appt("mine", SIMONE), _appt("theirs", RAFAEL)]
		self.assertEqual([a.id for a in visible(appointments, self.simone, self.directory)], ["mine"])

	def test_other_roles_see_everything(self):
		appointments = [_appt("mine", SIMONE), _appt("theirs", RAFAEL)]
		for role in ("clinic", "admin"):
			self.assertEqual(len(visible(appointments, _user(role=role), self.directory)), 2)

	def test_directory_resolution_is_case_insensitive(self):
		self.assertEqual(self.directory.resolve(SIMONE.upper()), 1)
		self.assertEqual(self.directory.resolve("simone martins de agrela"), 1)
		self.assertEqual(self.directory.resolve("Simone Martins De Agrela - CRP 999"), 1)
		self.assertIsNone(self.directory.resolve("Ana Lima"))
		self.assertEqual(self.directory.resolve("Ana Lima - CRP 2"), 4)
		self.assertIsNone(self.directory.resolve(""))

	def test_resolved_ids_beat_fuzzy_names(self):
		# "Rafael Costa" contains no part of Simone's name, and resolves to another id.
		self.assertFalse(can_access(_appt("x", "Rafael Costa"), self.simone, self.directory))
		ana_one = _user(professional_id=3, name="Ana Lima - CRP 1")
		self.assertFalse(can_access(_appt("x", "Ana Lima - CRP 2"), ana_one, self.directory))

	def test_unresolved_values_fall_back_to_fuzzy_match(self):
		self.assertTrue(can_access(_appt("x", "Simone"), self.simone, self.directory))
		self.assertTrue(can_access(_appt("x", "Dra. Simone Martins De Agrela"), _user(name="Simone Martins De Agrela"), self.directory))
		self.assertFalse(can_access(_appt("x", ""), self.simone, self.directory))

	def test_fuzzy_match(self):
		self.assertTrue(fuzzy_match(SIMONE, "simone martins"))
		self.assertTrue(fuzzy_match("Simone Martins De Agrela - CRP 1", SIMONE))
		self.assertFalse(fuzzy_match(RAFAEL, SIMONE))
		self.assertFalse(fuzzy_match(SIMONE, ""))

	def test_patient_records_match_any_professional(self):
		patients = [
			{"id": "p-1", "profissionais": [RAFAEL, SIMONE]},
			{"id": "p-2", "profissionais": [RAFAEL]},
			SimpleNamespace(id="p-3", professionals=[SIMONE]),
		]
		shown = visible(patients, self.simone, self.directory)
		self.assertEqual([p["id"] if isinstance(p, dict) else p.id for p in shown], ["p-1", "p-3"])
		self.assertEqual(record_professionals({"profissional": SIMONE}), [SIMONE])
		self.assertEqual(record_professionals(_appt("x", "")), [])
