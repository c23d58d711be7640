from __future__ import annotations

from datetime import date
from types import SimpleNamespace

from django.test import SimpleTestCase

from personart_backend.appointments.calendar import (
	CalendarProjector,
	day_appointments,
	month_grid,
	slot_bucket,
	week_grid,
	week_of,
)


def _appt(pk, day, time):
	return SimpleNamespace(id=pk, date=day, time=time)


class CalendarBuildersTest(SimpleTestCase):
	def test_month_grid_february_leap_year(self):
		weeks = month_grid(2024, 1)
		days = [d for week in weeks for d in week if d is not None]

		self.assertEqual(len(days), 29)
		self.assertTrue(all(len(week) == 7 for week in weeks))
		# 1 Feb 2024 is a Thursday; Sunday-first rows.
		self.assertEqual(weeks[0], [None, None, None, None, date(2024, 2, 1), date(2024, 2, 2), date(2024, 2, 3)])
		self.assertEqual(weeks[-1][4], date(2024, 2, 29))
		self.assertEqual(weeks[-1][5:], [None, None])

	def test_month_grid_rejects_one_indexed_december(self):
		self.assertEqual(month_grid(2024, 11)[0][0], date(2024, 12, 1))
		with self.assertRaises(ValueError):
			month_grid(2024, 12)

	def test_week_of_starts_on_sunday(self):
		week = week_of(date(2024, 3, 6))
		self.assertEqual(week[0], date(2024, 3, 3))
		self.assertEqual(week[-1], date(2024, 3, 9))
		self.assertEqual(week_of(date(2024, 3, 3))[0], date(2024, 3, 3))
		self.assertEqual(week_of(date(2024, 3, 9))[0], date(2024, 3, 3))

	def test_day_appointments_sorted_by_time_stable(self):
		day = date(2024, 3, 4)
		appointments = [
			_appt("late", day, "14:00"),
			_appt("first-9", day, "09:00"),
			_appt("other-day", date(2024, 3, 5), "07:00"),
			_appt("second-9", day, "09:00"),
		]
		self.assertEqual([a.id for a in day_appointments(appointments, day)], ["first-9", "second-9", "late"])
		self.assertEqual([a.id for a in slot_bucket(appointments, "2024-03-04", "09:00")], ["first-9", "second-9"])

	def test_week_grid(self):
		appointments = [_appt("a", date(2024, 3, 4), "09:00"), _appt("b", date(2024, 3, 11), "09:00")]
		grid = week_grid(appointments, date(2024, 3, 6))

		self.assertEqual(grid["labels"][0], "Dom 03/03")
		self.assertEqual(grid["prev_week"], date(2024, 2, 25))
		self.assertEqual(grid["next_week"], date(2024, 3, 10))
		nine = next(row for row in grid["rows"] if row["time"] == "09:00")
		self.assertEqual([a.id for a in nine["cells"][1]], ["a"])
		self.assertEqual(sum(len(cell) for row in grid["rows"] for cell in row["cells"]), 1)


class CalendarProjectorTest(SimpleTestCase):
	def test_memoizes_per_view(self):
		day = date(2024, 3, 4)
		projector = CalendarProjector([_appt("a", day, "09:00")], revision=3)

		self.assertIs(projector.day(day), projector.day(day))
		self.assertIs(projector.week(day), projector.week(date(2024, 3, 9)))
		self.assertIs(projector.month(2024, 2), projector.month(2024, 2))
		self.assertEqual([a.id for a in projector.slot(day, "09:00")], ["a"])
		self.assertEqual(projector.revision, 3)

	def test_source_list_is_copied(self):
		source = [_appt("a", date(2024, 3, 4), "09:00")]
		projector = CalendarProjector(source)
		source.append(_appt("b", date(2024, 3, 4), "10:00"))
		self.assertEqual(len(projector.appointments), 1)
