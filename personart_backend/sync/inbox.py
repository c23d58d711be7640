"""
Pre-registrations ("pré-cadastros") waiting for approval.

Entries come from the public registration form through the remote ``inbox``
table. They are held in memory by the session only; approving one turns it
into a patient (and optionally a first appointment).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from personart_backend.sync.codec import parse_document_date
from personart_backend.sync.exceptions import DocumentError


def _text(value) -> str:
    return '' if value is None else str(value).strip()


@dataclass
class InboxSchedule:
    date: str = ''
    time: str = ''
    frequency: str = ''

    def is_requested(self) -> bool:
        return bool(self.date and self.time)


@dataclass
class InboxEntry:
    id: str
    name: str
    birth_date: str = ''
    guardian: str = ''
    phone: str = ''
    email: str = ''
    address: str = ''
    insurer: str = ''
    card_number: str = ''
    crm: str = ''
    origin: str = ''
    professional: str = ''
    submitted_at: str = ''
    schedule: InboxSchedule | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    KNOWN_KEYS = frozenset(
        {
            'id',
            'nome',
            'nascimento',
            'responsavel',
            'contato',
            'email',
            'endereco',
            'convenio',
            'carteirinha',
            'crm',
            'origem',
            'profissional',
            'dataEnvio',
            'agendamento',
        }
    )

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> 'InboxEntry':
        entry_id = _text(document.get('id'))
        if not entry_id:
            raise DocumentError('inbox entry id is required.', field='id')
        name = _text(document.get('nome'))
        if not name:
            raise DocumentError('nome is required.', field='nome')

        schedule = None
        raw = document.get('agendamento')
        if isinstance(raw, dict):
            schedule = InboxSchedule(
                date=_text(raw.get('data')),
                time=_text(raw.get('hora')),
                frequency=_text(raw.get('frequencia')),
            )

        return cls(
            id=entry_id,
            name=name,
            birth_date=_text(document.get('nascimento')),
            guardian=_text(document.get('responsavel')),
            phone=_text(document.get('contato')),
            email=_text(document.get('email')),
            address=_text(document.get('endereco')),
            insurer=_text(document.get('convenio')),
            card_number=_text(document.get('carteirinha')),
            crm=_text(document.get('crm')),
            origin=_text(document.get('origem')),
            professional=_text(document.get('profissional')),
            submitted_at=_text(document.get('dataEnvio')),
            schedule=schedule,
            extra={k: v for k, v in document.items() if k not in cls.KNOWN_KEYS},
        )

    def patient_document(self) -> dict[str, Any]:
        """Patient document for approval. The patient gets a fresh id."""
        document = dict(self.extra)
        document.update(
            {
                'nome': self.name,
                'nascimento': self.birth_date,
                'faixa': '',
                'responsavel': self.guardian,
                'contato': self.phone,
                'email': self.email,
                'endereco': self.address,
                'convenio': self.insurer,
                'carteirinha': self.card_number,
                'origem': self.origin,
                'profissionais': [self.professional] if self.professional else [],
                'especialidades': [],
            }
        )
        if self.crm:
            document['crm'] = self.crm
        return document

    def requested_date(self):
        if self.schedule is None:
            return None
        return parse_document_date(self.schedule.date, 'agendamento.data')

    def to_dict(self) -> dict[str, Any]:
        data = {
            'id': self.id,
            'nome': self.name,
            'nascimento': self.birth_date,
            'responsavel': self.guardian,
            'contato': self.phone,
            'email': self.email,
            'endereco': self.address,
            'convenio': self.insurer,
            'carteirinha': self.card_number,
            'crm': self.crm,
            'origem': self.origin,
            'profissional': self.professional,
            'dataEnvio': self.submitted_at,
        }
        if self.schedule is not None:
            data['agendamento'] = {
                'data': self.schedule.date,
                'hora': self.schedule.time,
                'frequencia': self.schedule.frequency,
            }
        return data
