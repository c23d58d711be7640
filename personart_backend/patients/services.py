"""
Patient service helpers.

Pure functions used by the sync coordinator and the patient endpoints:
- new_patient_id: client-style patient ids
- age_on / derive_age_bracket: child/adult derivation from the birth date
- estimated_end_date / alert_level: insurer session plan projections
"""

from __future__ import annotations

import random
import time
from datetime import date, timedelta

from personart_backend.patients.models import InsurancePlan, Patient

ADULT_AGE = 18

ALERT_OK = 'ok'
ALERT_WARNING = 'warning'
ALERT_CRITICAL = 'critical'

CRITICAL_REMAINING = 3
WARNING_REMAINING = 6

_BASE36 = '0123456789abcdefghijklmnopqrstuvwxyz'


def _base36(value: int) -> str:
    if value == 0:
        return '0'
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return ''.join(reversed(digits))


def new_patient_id() -> str:
    """Return "<epoch-ms>-<random base36>", the id format the clients use."""
    suffix = _base36(random.getrandbits(46)).rjust(9, '0')[-9:]
    return f"{int(time.time() * 1000)}-{suffix}"


def age_on(birth_date: date, today: date) -> int:
    return today.year - birth_date.year - (
        (today.month, today.day) < (birth_date.month, birth_date.day)
    )


def derive_age_bracket(birth_date: date | None, today: date | None = None) -> str:
    """child below 18 years, adult otherwise, blank without a birth date."""
    if birth_date is None:
        return ''
    today = today or date.today()
    if age_on(birth_date, today) < ADULT_AGE:
        return Patient.CHILD
    return Patient.ADULT


# Days covered by the whole plan, per frequency.
_PLAN_DAYS = {
    InsurancePlan.WEEKLY: lambda total: total * 7,
    InsurancePlan.TWICE_WEEKLY: lambda total: int(total * 7 / 2),
    InsurancePlan.BIWEEKLY: lambda total: total * 14,
}


def estimated_end_date(plan: InsurancePlan) -> date | None:
    """Projected last session date, counted from the plan start.

    None for the "Outro" frequency or when start/total are missing.
    """
    if not plan.start_date or not plan.total_sessions:
        return None
    days = _PLAN_DAYS.get(plan.frequency)
    if days is None:
        return None
    return plan.start_date + timedelta(days=days(plan.total_sessions))


def alert_level(plan: InsurancePlan) -> str:
    remaining = plan.remaining_sessions
    if remaining <= CRITICAL_REMAINING:
        return ALERT_CRITICAL
    if remaining <= WARNING_REMAINING:
        return ALERT_WARNING
    return ALERT_OK
