"""
Legacy document <-> model conversion.

The browser client and the remote ``data`` column speak the legacy
Portuguese vocabulary (nome, faixa, convenio, funservConfig, patientId,
profissional, ...). Models use the local field names. Keys the models do
not know are kept in ``extra_data`` so documents survive a round trip.

The insurer authorization exists once in the model. On the way out it is
written both at the top level and inside ``funservConfig``; on the way in a
non-empty value inside ``funservConfig`` wins over the top-level one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Iterable

from personart_backend.appointments.models import Appointment
from personart_backend.patients.models import InsurancePlan, Patient
from personart_backend.sync.exceptions import DocumentError

logger = logging.getLogger(__name__)

FAIXA_CHILD = 'Criança'
FAIXA_ADULT = 'Adulto'

AGE_BRACKET_IN = {
    FAIXA_CHILD: Patient.CHILD,
    FAIXA_ADULT: Patient.ADULT,
    Patient.CHILD: Patient.CHILD,
    Patient.ADULT: Patient.ADULT,
    '': '',
}
AGE_BRACKET_OUT = {
    Patient.CHILD: FAIXA_CHILD,
    Patient.ADULT: FAIXA_ADULT,
    '': '',
}

TYPE_IN = {
    'Convênio': Appointment.TYPE_INSURANCE,
    'Particular': Appointment.TYPE_PRIVATE,
    Appointment.TYPE_INSURANCE: Appointment.TYPE_INSURANCE,
    Appointment.TYPE_PRIVATE: Appointment.TYPE_PRIVATE,
}
TYPE_OUT = {
    Appointment.TYPE_INSURANCE: 'Convênio',
    Appointment.TYPE_PRIVATE: 'Particular',
}

STATUS_IN = {
    'Agendado': Appointment.STATUS_SCHEDULED,
    'Realizado': Appointment.STATUS_COMPLETED,
    'Cancelado': Appointment.STATUS_CANCELLED,
    Appointment.STATUS_SCHEDULED: Appointment.STATUS_SCHEDULED,
    Appointment.STATUS_COMPLETED: Appointment.STATUS_COMPLETED,
    Appointment.STATUS_CANCELLED: Appointment.STATUS_CANCELLED,
}
STATUS_OUT = {
    Appointment.STATUS_SCHEDULED: 'Agendado',
    Appointment.STATUS_COMPLETED: 'Realizado',
    Appointment.STATUS_CANCELLED: 'Cancelado',
}

PATIENT_KEYS = {
    'id',
    'nome',
    'nascimento',
    'faixa',
    'responsavel',
    'endereco',
    'contato',
    'email',
    'convenio',
    'carteirinha',
    'numero_autorizacao',
    'data_autorizacao',
    'profissionais',
    'especialidades',
    'origem',
    'funservConfig',
}

APPOINTMENT_KEYS = {
    'id',
    'patientId',
    'patientName',
    'carteirinha',
    'numero_autorizacao',
    'data_autorizacao',
    'profissional',
    'date',
    'time',
    'type',
    'convenioName',
    'status',
    'obs',
}


@dataclass
class DecodedPatient:
    id: str
    fields: dict[str, Any]
    plan: dict[str, Any] | None


@dataclass
class DecodedAppointment:
    id: str
    fields: dict[str, Any]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _text(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _list(value, field: str) -> list[str]:
    if value in (None, ''):
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise DocumentError(f'{field} must be a list.', field=field)
    return [_text(v) for v in value if _text(v)]


def parse_document_date(value, field: str) -> date | None:
    """ISO (YYYY-MM-DD, optionally with a time part) or pt-BR (DD/MM/YYYY)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = _text(value)
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        pass
    try:
        return datetime.strptime(value, '%d/%m/%Y').date()
    except ValueError:
        raise DocumentError(f'{field} is not a valid date: {value!r}.', field=field)


def _iso(value: date | None) -> str:
    return value.isoformat() if value else ''


def reconcile_authorization(document: dict[str, Any]) -> tuple[str, str]:
    """(number, date): the insurer sub-object wins when it carries a value."""
    config = document.get('funservConfig') or {}
    if not isinstance(config, dict):
        config = {}
    number = _text(config.get('numeroAutorizacao')) or _text(document.get('numero_autorizacao'))
    auth_date = _text(config.get('dataAutorizacao')) or _text(document.get('data_autorizacao'))
    return number, auth_date


# -----------------------------------------------------------------------------
# Patients
# -----------------------------------------------------------------------------


def _plan_from_config(config: dict[str, Any]) -> dict[str, Any]:
    frequency = _text(config.get('frequency')) or InsurancePlan.WEEKLY
    if frequency not in dict(InsurancePlan.FREQUENCY_CHOICES):
        raise DocumentError(f'unknown frequency {frequency!r}.', field='funservConfig.frequency')
    try:
        total = int(config.get('totalSessions', InsurancePlan.DEFAULT_TOTAL_SESSIONS) or 0)
        used = int(config.get('usedSessions', 0) or 0)
    except (TypeError, ValueError):
        raise DocumentError('session counters must be integers.', field='funservConfig')
    if total < 0 or used < 0:
        raise DocumentError('session counters must not be negative.', field='funservConfig')
    return {
        'active': bool(config.get('active', True)),
        'total_sessions': total,
        'used_sessions': used,
        'start_date': parse_document_date(config.get('startDate'), 'funservConfig.startDate'),
        'frequency': frequency,
        'alert_email': _text(config.get('alertEmail')),
        'history': _list(config.get('history'), 'funservConfig.history'),
    }


def decode_patient(document: dict[str, Any]) -> DecodedPatient:
    """Legacy patient document -> model field values.

    Does not generate ids or derive the age bracket; the coordinator does.
    """
    if not isinstance(document, dict):
        raise DocumentError('patient document must be an object.')

    faixa = _text(document.get('faixa'))
    if faixa not in AGE_BRACKET_IN:
        raise DocumentError(f'unknown age bracket {faixa!r}.', field='faixa')

    number, auth_date = reconcile_authorization(document)
    fields = {
        'name': _text(document.get('nome')),
        'birth_date': parse_document_date(document.get('nascimento'), 'nascimento'),
        'age_bracket': AGE_BRACKET_IN[faixa],
        'guardian': _text(document.get('responsavel')),
        'address': _text(document.get('endereco')),
        'phone': _text(document.get('contato')),
        'email': _text(document.get('email')),
        'insurer': _text(document.get('convenio')),
        'card_number': _text(document.get('carteirinha')),
        'authorization_number': number,
        'authorization_date': auth_date,
        'professionals': _list(document.get('profissionais'), 'profissionais'),
        'specialties': _list(document.get('especialidades'), 'especialidades'),
        'origin': _text(document.get('origem')),
        'extra_data': {k: v for k, v in document.items() if k not in PATIENT_KEYS},
    }

    config = document.get('funservConfig')
    plan = _plan_from_config(config) if isinstance(config, dict) else None
    return DecodedPatient(id=_text(document.get('id')), fields=fields, plan=plan)


def _insurance_plan(patient: Patient) -> InsurancePlan | None:
    # RelatedObjectDoesNotExist is an AttributeError.
    return getattr(patient, 'insurance_plan', None)


def patient_document(patient: Patient) -> dict[str, Any]:
    document = dict(patient.extra_data or {})
    document.update(
        {
            'id': patient.id,
            'nome': patient.name,
            'nascimento': _iso(patient.birth_date),
            'faixa': AGE_BRACKET_OUT.get(patient.age_bracket, ''),
            'responsavel': patient.guardian,
            'endereco': patient.address,
            'contato': patient.phone,
            'email': patient.email,
            'convenio': patient.insurer,
            'carteirinha': patient.card_number,
            'numero_autorizacao': patient.authorization_number,
            'data_autorizacao': patient.authorization_date,
            'profissionais': list(patient.professionals or []),
            'especialidades': list(patient.specialties or []),
            'origem': patient.origin,
        }
    )
    plan = _insurance_plan(patient)
    if plan is not None:
        document['funservConfig'] = {
            'active': plan.active,
            'totalSessions': plan.total_sessions,
            'usedSessions': plan.used_sessions,
            'startDate': _iso(plan.start_date),
            'frequency': plan.frequency,
            'alertEmail': plan.alert_email,
            'history': list(plan.history or []),
            'numeroAutorizacao': patient.authorization_number,
            'dataAutorizacao': patient.authorization_date,
        }
    else:
        document.pop('funservConfig', None)
    return document


def patient_row(patient: Patient) -> dict[str, Any]:
    return {
        'id': patient.id,
        'data': patient_document(patient),
        'nome': patient.name,
        'carteirinha': patient.card_number,
        'numero_autorizacao': patient.authorization_number,
        'data_autorizacao': patient.authorization_date,
    }


# -----------------------------------------------------------------------------
# Appointments
# -----------------------------------------------------------------------------


def decode_appointment(document: dict[str, Any]) -> DecodedAppointment:
    if not isinstance(document, dict):
        raise DocumentError('appointment document must be an object.')

    record_id = _text(document.get('id'))
    if not record_id:
        raise DocumentError('appointment id is required.', field='id')

    day = parse_document_date(document.get('date'), 'date')
    if day is None:
        raise DocumentError('date is required.', field='date')

    raw_type = _text(document.get('type')) or 'Particular'
    if raw_type not in TYPE_IN:
        raise DocumentError(f'unknown appointment type {raw_type!r}.', field='type')
    raw_status = _text(document.get('status')) or 'Agendado'
    if raw_status not in STATUS_IN:
        raise DocumentError(f'unknown appointment status {raw_status!r}.', field='status')

    fields = {
        'patient_id': _text(document.get('patientId')),
        'patient_name': _text(document.get('patientName')),
        'card_number': _text(document.get('carteirinha')),
        'insurer_name': _text(document.get('convenioName')),
        'authorization_number': _text(document.get('numero_autorizacao')),
        'authorization_date': _text(document.get('data_autorizacao')),
        'professional': _text(document.get('profissional')),
        'date': day,
        'time': _text(document.get('time')),
        'type': TYPE_IN[raw_type],
        'status': STATUS_IN[raw_status],
        'note': _text(document.get('obs')),
        'extra_data': {k: v for k, v in document.items() if k not in APPOINTMENT_KEYS},
    }
    return DecodedAppointment(id=record_id, fields=fields)


def appointment_document(appt: Appointment) -> dict[str, Any]:
    document = dict(appt.extra_data or {})
    document.update(
        {
            'id': appt.id,
            'patientId': appt.patient_id,
            'patientName': appt.patient_name,
            'carteirinha': appt.card_number,
            'numero_autorizacao': appt.authorization_number,
            'data_autorizacao': appt.authorization_date,
            'profissional': appt.professional,
            'date': _iso(appt.date) if isinstance(appt.date, date) else _text(appt.date),
            'time': appt.time,
            'type': TYPE_OUT.get(appt.type, 'Particular'),
            'convenioName': appt.insurer_name,
            'status': STATUS_OUT.get(appt.status, 'Agendado'),
            'obs': appt.note,
        }
    )
    return document


def appointment_row(appt: Appointment) -> dict[str, Any]:
    document = appointment_document(appt)
    return {
        'id': appt.id,
        'data': document,
        'date': document['date'],
        'patient_id': appt.patient_id,
        'status': document['status'],
        'carteirinha': appt.card_number,
        'numero_autorizacao': appt.authorization_number,
        'data_autorizacao': appt.authorization_date,
    }


# -----------------------------------------------------------------------------
# Remote rows
# -----------------------------------------------------------------------------


def row_document(row: dict[str, Any]) -> dict[str, Any]:
    """The ``data`` document of a row; the row id is authoritative."""
    if not isinstance(row, dict):
        raise DocumentError('row must be an object.')
    data = row.get('data')
    if isinstance(data, dict):
        document = dict(data)
    else:
        document = {k: v for k, v in row.items() if k != 'data'}
    if row.get('id') not in (None, ''):
        document['id'] = str(row['id'])
    return document


def row_ids(rows: Iterable[dict[str, Any]]) -> set[str]:
    """Ids of every row that carries one, decodable or not."""
    ids = set()
    for row in rows:
        try:
            record_id = row_document(row).get('id')
        except DocumentError:
            continue
        if record_id not in (None, ''):
            ids.add(str(record_id))
    return ids


def decode_rows(table: str, rows: Iterable[dict[str, Any]], decode: Callable[[dict[str, Any]], Any]) -> list:
    """Decode every row; undecodable rows are logged and skipped."""
    decoded = []
    for row in rows:
        try:
            item = decode(row_document(row))
        except DocumentError as exc:
            logger.warning(
                'skipping undecodable %s row id=%s: %s',
                table,
                row.get('id') if isinstance(row, dict) else None,
                exc,
            )
            continue
        decoded.append(item)
    return decoded


def decode_remote_patient(document: dict[str, Any]) -> DecodedPatient:
    decoded = decode_patient(document)
    if not decoded.id:
        raise DocumentError('patient id is required.', field='id')
    if not decoded.fields['name']:
        raise DocumentError('nome is required.', field='nome')
    return decoded
