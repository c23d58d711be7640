"""Celery tasks for the sync app."""

import logging

from celery import shared_task

from personart_backend.sync.effects import Outbox, replay_outbox
from personart_backend.sync.remote import build_remote_store

logger = logging.getLogger(__name__)


@shared_task(name='personart_backend.sync.tasks.flush_outbox')
def flush_outbox():
    """Replay failed remote effects (scheduled by Celery beat)."""
    outbox = Outbox()
    pending = outbox.count()
    if not pending:
        return {'pending': 0, 'sent': 0, 'failed': 0}

    store = build_remote_store()
    if store is None:
        logger.info('flush_outbox skipped: remote store not configured (pending=%s)', pending)
        return {'pending': pending, 'sent': 0, 'failed': 0}

    sent, failed = replay_outbox(store, outbox)
    return {'pending': pending, 'sent': sent, 'failed': failed}
