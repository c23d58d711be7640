"""
Access filter for professional accounts.

Professionals only see appointments and patients assigned to them. Records
carry the professional as a display string ("Name - CRP 123"):
- appointments: ``professional``
- patients: any entry of ``professionals``

Matching resolves both sides to the professional directory and compares
ids. When either side does not resolve, it falls back to a case-insensitive
substring match in either direction, with the stored string's credential
suffix stripped before the reverse comparison.

Every other role sees everything.
"""

from __future__ import annotations

from typing import Any, Iterable

from personart_backend.core.models import Professional, Role


def is_restricted(user) -> bool:
    return getattr(user, 'role_name', None) == Role.PROFESSIONAL


class ProfessionalDirectory:
    """Case-insensitive lookup of display strings to professional ids.

    Ambiguous names (two directory entries with the same name) do not
    resolve.
    """

    def __init__(self, professionals: Iterable[Professional] | None = None):
        if professionals is None:
            professionals = Professional.objects.using('default').filter(active=True)
        self._by_display: dict[str, int | None] = {}
        self._by_name: dict[str, int | None] = {}
        for professional in professionals:
            self._add(self._by_display, professional.display_name, professional.id)
            self._add(self._by_name, professional.name, professional.id)

    @staticmethod
    def _add(index: dict, key: str, pk: int) -> None:
        key = (key or '').strip().lower()
        if not key:
            return
        if key in index and index[key] != pk:
            index[key] = None
        else:
            index[key] = pk

    def resolve(self, value: str) -> int | None:
        value = (value or '').strip().lower()
        if not value:
            return None
        if value in self._by_display:
            return self._by_display[value]
        name, _ = Professional.split_display(value)
        return self._by_name.get(name)


def fuzzy_match(stored: str, user_name: str) -> bool:
    stored = (stored or '').strip().lower()
    user_name = (user_name or '').strip().lower()
    if not stored or not user_name:
        return False
    if user_name in stored:
        return True
    stored_name, _ = Professional.split_display(stored)
    return bool(stored_name) and stored_name in user_name


class _Viewer:
    def __init__(self, user, directory: ProfessionalDirectory):
        self.professional_id = getattr(user, 'professional_id', None)
        display = getattr(user, 'display_name', None)
        self.name = display() if callable(display) else (display or '')
        self.directory = directory

    def matches(self, stored: str) -> bool:
        if self.professional_id is not None:
            resolved = self.directory.resolve(stored)
            if resolved is not None:
                return resolved == self.professional_id
        return fuzzy_match(stored, self.name)


def record_professionals(record: Any) -> list[str]:
    if isinstance(record, dict):
        many = record.get('professionals', record.get('profissionais'))
        one = record.get('professional', record.get('profissional'))
    else:
        many = getattr(record, 'professionals', None)
        one = getattr(record, 'professional', None)
    if many is not None:
        return [p for p in many if p]
    return [one] if one else []


def visible(records: Iterable[Any], user, directory: ProfessionalDirectory | None = None) -> list:
    records = list(records)
    if not is_restricted(user):
        return records
    viewer = _Viewer(user, directory or ProfessionalDirectory())
    return [r for r in records if any(viewer.matches(p) for p in record_professionals(r))]


def can_access(record: Any, user, directory: ProfessionalDirectory | None = None) -> bool:
    return bool(visible([record], user, directory))
