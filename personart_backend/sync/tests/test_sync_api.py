from __future__ import annotations

from django.test import TestCase

from rest_framework.test import APIClient

from personart_backend.core.models import AuditLog, Role, User
from personart_backend.patients.models import Patient
from personart_backend.sync.effects import INBOX, PATIENTS
from personart_backend.sync.session import session_registry
from personart_backend.sync.tests.fakes import InMemoryRemoteStore


class SyncAPITest(TestCase):
    """Tests for /api/sync/ and /api/inbox/ against an in-memory remote store."""

    databases = {"default"}

    def setUp(self):
        role_clinic, _ = Role.objects.using("default").get_or_create(
            name="clinic",
            defaults={"label": "Clínica"},
        )
        role_professional, _ = Role.objects.using("default").get_or_create(
            name="professional",
            defaults={"label": "Profissional"},
        )

        self.clinic = User.objects.db_manager("default").create_user(
            username="clinic_sync_test",
            email="clinic_sync@example.com",
            password="DummyPass123!",
            role=role_clinic,
        )
        self.professional = User.objects.db_manager("default").create_user(
            username="professional_sync_test",
            email="professional_sync@example.com",
            password="DummyPass123!",
            role=role_professional,
        )

        self.store = InMemoryRemoteStore(
            {
                INBOX: [
                    {
                        "id": "pre-1",
                        "data": {
                            "nome": "Davi Lima",
                            "profissional": "Simone Martins De Agrela - CRP 196674",
                            "agendamento": {"data": "2024-03-04", "hora": "09:00", "frequencia": "1x Semana"},
                        },
                    },
                ],
            }
        )
        self.registry = session_registry()
        self._remote_factory = self.registry.remote_factory
        self.registry.remote_factory = lambda: self.store

    def tearDown(self):
        self.registry.clear()
        self.registry.remote_factory = self._remote_factory

    def _client_for(self, user: User) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        client.force_authenticate(user=user)
        return client

    # ========== STATUS ==========

    def test_status_requires_auth(self):
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        response = client.get("/api/sync/status/")
        self.assertIn(response.status_code, (401, 403))

    def test_status_after_initial_load(self):
        response = self._client_for(self.clinic).get("/api/sync/status/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "connected")
        self.assertEqual(response.data["pending_effects"], 0)
        self.assertEqual(response.data["inbox"], 1)

    def test_unreachable_remote_reports_error_and_toast(self):
        self.store.fail_reads = True
        client = self._client_for(self.clinic)

        response = client.get("/api/sync/status/")
        self.assertEqual(response.data["status"], "error")

        toasts = client.get("/api/sync/notifications/").data
        self.assertEqual([t["level"] for t in toasts], ["warning"])
        self.assertEqual(client.get("/api/sync/notifications/").data, [])

    def test_refresh_reconnects(self):
        self.store.fail_reads = True
        client = self._client_for(self.clinic)
        client.get("/api/sync/status/")

        self.store.fail_reads = False
        response = client.post("/api/sync/refresh/")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["refreshed"])
        self.assertEqual(response.data["status"], "connected")

    def test_retry_sends_pending_writes(self):
        client = self._client_for(self.clinic)
        client.get("/api/sync/status/")
        self.store.fail_writes = True

        response = client.post("/api/patients/", {"id": "p-1", "nome": "Ana Souza"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertTrue(Patient.objects.using("default").filter(id="p-1").exists())

        status_data = client.get("/api/sync/status/").data
        self.assertEqual(status_data["status"], "error")
        self.assertEqual(status_data["pending_effects"], 1)

        self.store.fail_writes = False
        response = client.post("/api/sync/retry/")
        self.assertEqual(response.data["sent"], 1)
        self.assertEqual(response.data["pending_effects"], 0)
        self.assertEqual(response.data["status"], "connected")
        self.assertIn("p-1", self.store.tables[PATIENTS])

    # ========== INBOX ==========

    def test_inbox_list_as_clinic(self):
        response = self._client_for(self.clinic).get("/api/inbox/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([e["id"] for e in response.data], ["pre-1"])
        self.assertEqual(response.data[0]["nome"], "Davi Lima")

    def test_inbox_forbidden_for_professional(self):
        response = self._client_for(self.professional).get("/api/inbox/")
        self.assertEqual(response.status_code, 403)

    def test_approve_creates_patient_and_appointment(self):
        client = self._client_for(self.clinic)
        response = client.post("/api/inbox/pre-1/approve/")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["patient"]["nome"], "Davi Lima")
        self.assertEqual(len(response.data["appointments"]), 1)
        self.assertEqual(response.data["appointments"][0]["time"], "09:00")
        self.assertNotIn("pre-1", self.store.tables[INBOX])
        self.assertTrue(
            AuditLog.objects.using("default").filter(action="inbox_approved", user=self.clinic).exists()
        )
        self.assertEqual(client.get("/api/inbox/").data, [])

    def test_approve_invalid_birth_date_400(self):
        self.store.tables[INBOX]["pre-2"] = {"id": "pre-2", "data": {"nome": "Davi", "nascimento": "1990-15-05"}}
        client = self._client_for(self.clinic)

        response = client.post("/api/inbox/pre-2/approve/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["field"], "nascimento")
        self.assertFalse(Patient.objects.using("default").exists())
        self.assertIn("pre-2", self.store.tables[INBOX])
        self.assertIn("pre-2", [e["id"] for e in client.get("/api/inbox/").data])

    def test_approve_unknown_entry_404(self):
        response = self._client_for(self.clinic).post("/api/inbox/missing/approve/")
        self.assertEqual(response.status_code, 404)

    def test_dismiss(self):
        client = self._client_for(self.clinic)
        response = client.delete("/api/inbox/pre-1/")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.store.tables[INBOX], {})
        self.assertFalse(Patient.objects.using("default").exists())
