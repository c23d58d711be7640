"""
Calendar projections for the clinic agenda.

Pure builders over an in-memory appointment list:
- week_of: the Sunday-first week around a date
- month_grid: 7-column month grid (0-indexed month, as the browser client)
- slot_bucket / day_appointments: per-slot and per-day selections
- week_grid: slot x day cells for the week view

CalendarProjector memoizes these per (source revision, view parameters).
"""

from __future__ import annotations

import calendar as _calendar
from datetime import date, timedelta
from typing import Any, Iterable

from .models import TIME_SLOTS

# Sunday-first weeks (Brazilian convention).
FIRST_WEEKDAY = _calendar.SUNDAY

WEEKDAY_LABELS = ['Dom', 'Seg', 'Ter', 'Qua', 'Qui', 'Sex', 'Sáb']


def _iso(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value or '')


def week_of(day: date) -> list[date]:
    """7 consecutive dates, Sunday through Saturday, containing ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid(year: int, month: int) -> list[list[date | None]]:
    """Weeks of the month as rows of 7 cells; padding cells are None.

    ``month`` is 0-indexed (January = 0).
    """
    if not 0 <= month <= 11:
        raise ValueError(f'month must be 0..11, got {month}')
    cal = _calendar.Calendar(firstweekday=FIRST_WEEKDAY)
    rows = []
    for week in cal.monthdatescalendar(year, month + 1):
        rows.append([d if d.month == month + 1 else None for d in week])
    return rows


def slot_bucket(appointments: Iterable[Any], day: date | str, time: str) -> list:
    key = _iso(day)
    return [a for a in appointments if _iso(a.date) == key and a.time == time]


def day_appointments(appointments: Iterable[Any], day: date | str) -> list:
    """The day's appointments sorted by time; ties keep input order."""
    key = _iso(day)
    return sorted((a for a in appointments if _iso(a.date) == key), key=lambda a: a.time)


def week_grid(appointments: Iterable[Any], day: date) -> dict[str, Any]:
    days = week_of(day)
    by_day = {d.isoformat(): [] for d in days}
    for appt in appointments:
        bucket = by_day.get(_iso(appt.date))
        if bucket is not None:
            bucket.append(appt)

    rows = []
    for slot in TIME_SLOTS:
        rows.append(
            {
                'time': slot,
                'cells': [[a for a in by_day[d.isoformat()] if a.time == slot] for d in days],
            }
        )
    return {
        'days': days,
        'labels': [f"{WEEKDAY_LABELS[i]} {d:%d/%m}" for i, d in enumerate(days)],
        'rows': rows,
        'prev_week': days[0] - timedelta(days=7),
        'next_week': days[0] + timedelta(days=7),
    }


class CalendarProjector:
    """Memoized calendar views over one revision of the appointment list."""

    def __init__(self, appointments: Iterable[Any], revision: int = 0):
        self.revision = revision
        self._appointments = list(appointments)
        self._memo: dict[tuple, Any] = {}

    def _cached(self, key: tuple, build):
        if key not in self._memo:
            self._memo[key] = build()
        return self._memo[key]

    @property
    def appointments(self) -> list:
        return self._appointments

    def day(self, day: date) -> list:
        return self._cached(('day', _iso(day)), lambda: day_appointments(self._appointments, day))

    def slot(self, day: date, time: str) -> list:
        return self._cached(('slot', _iso(day), time), lambda: slot_bucket(self._appointments, day, time))

    def week(self, day: date) -> dict[str, Any]:
        start = week_of(day)[0]
        return self._cached(('week', start.isoformat()), lambda: week_grid(self._appointments, start))

    def month(self, year: int, month: int) -> list[list[date | None]]:
        return self._cached(('month', year, month), lambda: month_grid(year, month))
