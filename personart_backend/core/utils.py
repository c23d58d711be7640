import logging

from .models import AuditLog

logger = logging.getLogger(__name__)

AUDIT_ACTIONS = frozenset(value for value, _ in AuditLog.ACTION_CHOICES)


def _role_name(user) -> str:
    role = getattr(user, 'role', None)
    return getattr(role, 'name', '') or ''


def log_patient_action(user, action: str, patient_id: str | None = None, meta: dict | None = None) -> AuditLog | None:
    """Record who touched which patient record (alias: default).

    ``action`` must be one of ``AuditLog.ACTION_CHOICES``; an unknown action
    is a programming error and raises ValueError. A failed database write is
    logged and returns None so the request itself still succeeds.
    """
    if action not in AUDIT_ACTIONS:
        raise ValueError(f'unknown audit action {action!r}')

    try:
        return AuditLog.objects.using('default').create(
            user=user if getattr(user, 'is_authenticated', False) else None,
            role_name=_role_name(user),
            action=action,
            patient_id=patient_id,
            meta=meta,
        )
    except Exception:
        logger.exception('audit write failed action=%s patient_id=%s', action, patient_id)
        return None
