from __future__ import annotations

from datetime import date

from django.test import SimpleTestCase, TestCase

from personart_backend.appointments.models import Appointment
from personart_backend.patients.models import InsurancePlan, Patient
from personart_backend.sync import codec
from personart_backend.sync.exceptions import DocumentError


class DocumentDateTest(SimpleTestCase):
    def test_formats(self):
        self.assertEqual(codec.parse_document_date("2024-03-04", "d"), date(2024, 3, 4))
        self.assertEqual(codec.parse_document_date("2024-03-04T10:30:00Z", "d"), date(2024, 3, 4))
        self.assertEqual(codec.parse_document_date("04/03/2024", "d"), date(2024, 3, 4))
        self.assertIsNone(codec.parse_document_date("", "d"))
        self.assertIsNone(codec.parse_document_date(None, "d"))

    def test_garbage_names_field(self):
        with self.assertRaises(DocumentError) as ctx:
            codec.parse_document_date("next tuesday", "nascimento")
        self.assertEqual(ctx.exception.field, "nascimento")


class DecodePatientTest(SimpleTestCase):
    def test_fields_and_extras(self):
        decoded = codec.decode_patient(
            {
                "id": "p-1",
                "nome": " Ana Souza ",
                "faixa": "Criança",
                "responsavel": "Maria",
                "profissionais": "Simone",
                "evolucoes": [{"texto": "ok"}],
            }
        )
        self.assertEqual(decoded.id, "p-1")
        self.assertEqual(decoded.fields["name"], "Ana Souza")
        self.assertEqual(decoded.fields["age_bracket"], Patient.CHILD)
        self.assertEqual(decoded.fields["professionals"], ["Simone"])
        self.assertEqual(decoded.fields["extra_data"], {"evolucoes": [{"texto": "ok"}]})
        self.assertIsNone(decoded.plan)

    def test_config_authorization_wins_over_top_level(self):
        document = {
            "nome": "Ana",
            "numero_autorizacao": "TOP",
            "data_autorizacao": "2024-01-01",
            "funservConfig": {"numeroAutorizacao": "CFG", "dataAutorizacao": ""},
        }
        self.assertEqual(codec.reconcile_authorization(document), ("CFG", "2024-01-01"))

    def test_plan_defaults(self):
        decoded = codec.decode_patient({"nome": "Ana", "funservConfig": {}})
        self.assertEqual(decoded.plan["total_sessions"], InsurancePlan.DEFAULT_TOTAL_SESSIONS)
        self.assertEqual(decoded.plan["frequency"], InsurancePlan.WEEKLY)
        self.assertTrue(decoded.plan["active"])

    def test_invalid_values(self):
        with self.assertRaises(DocumentError):
            codec.decode_patient({"nome": "Ana", "faixa": "Idoso"})
        with self.assertRaises(DocumentError):
            codec.decode_patient({"nome": "Ana", "funservConfig": {"frequency": "daily"}})
        with self.assertRaises(DocumentError):
            codec.decode_patient({"nome": "Ana", "funservConfig": {"usedSessions": -1}})

    def test_remote_patient_requires_id_and_name(self):
        with self.assertRaises(DocumentError):
            codec.decode_remote_patient({"nome": "Ana"})
        with self.assertRaises(DocumentError):
            codec.decode_remote_patient({"id": "p-1"})


class DecodeAppointmentTest(SimpleTestCase):
    def test_legacy_labels(self):
        decoded = codec.decode_appointment(
            {
                "id": "a-1",
                "patientId": "p-1",
                "date": "2024-03-04",
                "time": "09:00",
                "type": "Convênio",
                "status": "Cancelado",
                "obs": "Session 2",
                "color": "blue",
            }
        )
        self.assertEqual(decoded.fields["type"], Appointment.TYPE_INSURANCE)
        self.assertEqual(decoded.fields["status"], Appointment.STATUS_CANCELLED)
        self.assertEqual(decoded.fields["note"], "Session 2")
        self.assertEqual(decoded.fields["extra_data"], {"color": "blue"})

    def test_defaults_to_private_scheduled(self):
        decoded = codec.decode_appointment({"id": "a-1", "date": "2024-03-04"})
        self.assertEqual(decoded.fields["type"], Appointment.TYPE_PRIVATE)
        self.assertEqual(decoded.fields["status"], Appointment.STATUS_SCHEDULED)

    def test_required_keys(self):
        with self.assertRaises(DocumentError):
            codec.decode_appointment({"date": "2024-03-04"})
        with self.assertRaises(DocumentError):
            codec.decode_appointment({"id": "a-1"})


class RowsTest(SimpleTestCase):
    def test_row_id_is_authoritative(self):
        document = codec.row_document({"id": 7, "data": {"id": "other", "nome": "Ana"}})
        self.assertEqual(document, {"id": "7", "nome": "Ana"})

    def test_flat_rows_without_data(self):
        document = codec.row_document({"id": "p-1", "nome": "Ana"})
        self.assertEqual(document, {"id": "p-1", "nome": "Ana"})

    def test_decode_rows_skips_bad_rows(self):
        rows = [
            {"id": "p-1", "data": {"nome": "Ana"}},
            {"id": "p-2", "data": {"nome": ""}},
            {"id": "p-3", "data": {"nome": "Bia", "nascimento": "soon"}},
        ]
        with self.assertLogs("personart_backend.sync.codec", level="WARNING"):
            decoded = codec.decode_rows("patients", rows, codec.decode_remote_patient)
        self.assertEqual([d.id for d in decoded], ["p-1"])


class EncodeTest(TestCase):
    databases = {"default"}

    def test_patient_document_synthesizes_authorization(self):
        patient = Patient.objects.using("default").create(
            id="p-1",
            name="Ana",
            birth_date=date(1990, 5, 15),
            age_bracket=Patient.ADULT,
            authorization_number="AUT-1",
            authorization_date="2024-01-10",
            extra_data={"evolucoes": []},
        )
        InsurancePlan.objects.using("default").create(patient=patient, total_sessions=8, used_sessions=2)
        patient = Patient.objects.using("default").select_related("insurance_plan").get(id="p-1")

        document = codec.patient_document(patient)

        self.assertEqual(document["faixa"], "Adulto")
        self.assertEqual(document["nascimento"], "1990-05-15")
        self.assertEqual(document["numero_autorizacao"], "AUT-1")
        self.assertEqual(document["funservConfig"]["numeroAutorizacao"], "AUT-1")
        self.assertEqual(document["funservConfig"]["dataAutorizacao"], "2024-01-10")
        self.assertEqual(document["funservConfig"]["usedSessions"], 2)
        self.assertEqual(document["evolucoes"], [])

    def test_patient_without_plan_has_no_config(self):
        patient = Patient.objects.using("default").create(
            id="p-2",
            name="Bia",
            extra_data={"funservConfig": {"stale": True}},
        )
        self.assertNotIn("funservConfig", codec.patient_document(patient))

    def test_appointment_row_columns(self):
        appt = Appointment.objects.using("default").create(
            id="a-1",
            patient_id="p-1",
            professional="Simone",
            date=date(2024, 3, 4),
            time="09:00",
            type=Appointment.TYPE_INSURANCE,
            status=Appointment.STATUS_COMPLETED,
        )
        row = codec.appointment_row(appt)
        self.assertEqual(row["date"], "2024-03-04")
        self.assertEqual(row["status"], "Realizado")
        self.assertEqual(row["data"]["type"], "Convênio")
        self.assertEqual(row["data"]["patientId"], "p-1")
