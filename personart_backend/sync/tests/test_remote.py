from __future__ import annotations

import json
from unittest.mock import patch

import requests
from django.test import SimpleTestCase, override_settings

from personart_backend.sync.exceptions import RemoteStoreError
from personart_backend.sync.remote import PATIENTS, SupabaseStore, build_remote_store


def _response(status_code=200, payload=None):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload).encode() if payload is not None else b""
    response.url = "https://example.supabase.co/rest/v1/patients"
    return response


class SupabaseStoreTest(SimpleTestCase):
    def setUp(self):
        self.store = SupabaseStore("https://example.supabase.co/", "anon-key", timeout=5)

    def test_auth_headers(self):
        headers = self.store.session.headers
        self.assertEqual(headers["apikey"], "anon-key")
        self.assertEqual(headers["Authorization"], "Bearer anon-key")

    def test_select(self):
        rows = [{"id": "p-1", "data": {"nome": "Ana"}}]
        with patch.object(self.store.session, "request", return_value=_response(200, rows)) as request:
            self.assertEqual(self.store.select(PATIENTS), rows)
        request.assert_called_once_with(
            "GET",
            "https://example.supabase.co/rest/v1/patients",
            timeout=5,
            params={"select": "*"},
        )

    def test_select_rejects_non_list(self):
        with patch.object(self.store.session, "request", return_value=_response(200, {"oops": 1})):
            with self.assertRaises(RemoteStoreError):
                self.store.select(PATIENTS)

    def test_upsert_merges_on_id(self):
        with patch.object(self.store.session, "request", return_value=_response(201)) as request:
            self.store.upsert(PATIENTS, {"id": "p-1", "data": {}})
        args, kwargs = request.call_args
        self.assertEqual(args[0], "POST")
        self.assertEqual(kwargs["params"], {"on_conflict": "id"})
        self.assertEqual(kwargs["json"], [{"id": "p-1", "data": {}}])
        self.assertIn("merge-duplicates", kwargs["headers"]["Prefer"])

    def test_upsert_empty_is_noop(self):
        with patch.object(self.store.session, "request") as request:
            self.store.upsert(PATIENTS, [])
        request.assert_not_called()

    def test_delete_filters_by_id(self):
        with patch.object(self.store.session, "request", return_value=_response(204)) as request:
            self.store.delete(PATIENTS, "p-1")
        args, kwargs = request.call_args
        self.assertEqual(args[0], "DELETE")
        self.assertEqual(kwargs["params"], {"id": "eq.p-1"})

    def test_http_error_becomes_remote_store_error(self):
        with patch.object(self.store.session, "request", return_value=_response(500, {"message": "boom"})):
            with self.assertRaises(RemoteStoreError) as ctx:
                self.store.delete(PATIENTS, "p-1")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.table, PATIENTS)

    def test_transport_error_becomes_remote_store_error(self):
        with patch.object(self.store.session, "request", side_effect=requests.ConnectionError("refused")):
            with self.assertRaises(RemoteStoreError) as ctx:
                self.store.select(PATIENTS)
        self.assertIsNone(ctx.exception.status_code)


class BuildRemoteStoreTest(SimpleTestCase):
    @override_settings(SUPABASE_URL="", SUPABASE_ANON_KEY="key")
    def test_unconfigured_returns_none(self):
        self.assertIsNone(build_remote_store())

    @override_settings(SUPABASE_URL="YOUR_SUPABASE_URL", SUPABASE_ANON_KEY="key")
    def test_placeholder_url_returns_none(self):
        self.assertIsNone(build_remote_store())

    @override_settings(SUPABASE_URL="https://example.supabase.co", SUPABASE_ANON_KEY="key", SUPABASE_TIMEOUT=3.0)
    def test_configured_store(self):
        store = build_remote_store()
        self.assertIsInstance(store, SupabaseStore)
        self.assertEqual(store.base_url, "https://example.supabase.co/rest/v1")
        self.assertEqual(store.timeout, 3.0)
