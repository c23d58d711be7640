from __future__ import annotations

from unittest.mock import patch

from django.test import TestCase

from personart_backend.patients.models import Patient
from personart_backend.sync.effects import PATIENTS, Outbox, RemoteEffect
from personart_backend.sync.tasks import flush_outbox
from personart_backend.sync.tests.fakes import InMemoryRemoteStore


class FlushOutboxTaskTest(TestCase):
    databases = {"default"}

    def test_empty_outbox(self):
        self.assertEqual(flush_outbox(), {"pending": 0, "sent": 0, "failed": 0})

    def test_skipped_without_store(self):
        Outbox().record([RemoteEffect(PATIENTS, "p-1")])
        result = flush_outbox()
        self.assertEqual(result, {"pending": 1, "sent": 0, "failed": 0})
        self.assertEqual(Outbox().count(), 1)

    def test_replays_pending_effects(self):
        Patient.objects.using("default").create(id="p-1", name="Ana")
        Outbox().record([RemoteEffect(PATIENTS, "p-1")])
        store = InMemoryRemoteStore()

        with patch("personart_backend.sync.tasks.build_remote_store", return_value=store):
            result = flush_outbox()

        self.assertEqual(result, {"pending": 1, "sent": 1, "failed": 0})
        self.assertEqual(Outbox().count(), 0)
        self.assertEqual(store.tables[PATIENTS]["p-1"]["nome"], "Ana")

    def test_failed_replay_stays_queued(self):
        Patient.objects.using("default").create(id="p-1", name="Ana")
        Outbox().record([RemoteEffect(PATIENTS, "p-1")])
        store = InMemoryRemoteStore()
        store.fail_writes = True

        with patch("personart_backend.sync.tasks.build_remote_store", return_value=store):
            result = flush_outbox()

        self.assertEqual(result["failed"], 1)
        self.assertEqual(Outbox().count(), 1)
