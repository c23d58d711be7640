from __future__ import annotations

from datetime import date

from django.test import SimpleTestCase

from personart_backend.patients.models import InsurancePlan, Patient
from personart_backend.patients.services import (
    alert_level,
    derive_age_bracket,
    estimated_end_date,
    new_patient_id,
)


class PatientServicesTest(SimpleTestCase):
    def test_new_patient_id_format(self):
        first, second = new_patient_id(), new_patient_id()
        self.assertRegex(first, r"^\d{13}-[0-9a-z]{9}$")
        self.assertNotEqual(first, second)

    def test_age_bracket_turns_adult_on_18th_birthday(self):
        birth = date(2006, 3, 5)
        self.assertEqual(derive_age_bracket(birth, today=date(2024, 3, 4)), Patient.CHILD)
        self.assertEqual(derive_age_bracket(birth, today=date(2024, 3, 5)), Patient.ADULT)
        self.assertEqual(derive_age_bracket(None), "")


class InsurancePlanProjectionTest(SimpleTestCase):
    def _plan(self, **kwargs):
        defaults = {"start_date": date(2024, 1, 1), "total_sessions": 10, "used_sessions": 0}
        defaults.update(kwargs)
        return InsurancePlan(**defaults)

    def test_estimated_end_date_per_frequency(self):
        self.assertEqual(estimated_end_date(self._plan(frequency=InsurancePlan.WEEKLY)), date(2024, 3, 11))
        self.assertEqual(estimated_end_date(self._plan(frequency=InsurancePlan.TWICE_WEEKLY)), date(2024, 2, 5))
        self.assertEqual(estimated_end_date(self._plan(frequency=InsurancePlan.BIWEEKLY)), date(2024, 5, 20))
        self.assertIsNone(estimated_end_date(self._plan(frequency=InsurancePlan.OTHER)))
        self.assertIsNone(estimated_end_date(self._plan(start_date=None)))

    def test_alert_levels(self):
        self.assertEqual(alert_level(self._plan(used_sessions=3)), "ok")
        self.assertEqual(alert_level(self._plan(used_sessions=4)), "warning")
        self.assertEqual(alert_level(self._plan(used_sessions=7)), "critical")
        self.assertEqual(alert_level(self._plan(used_sessions=12)), "critical")
        self.assertEqual(self._plan(used_sessions=12).remaining_sessions, -2)
