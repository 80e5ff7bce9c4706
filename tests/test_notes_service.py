"""Tests for the note resolver."""

import unittest

import requests

from secretnotes.config import DEFAULT_MESSAGE
from secretnotes.exceptions import (
    ApiError,
    NoteNotFound,
    ServerRejected,
    TransportError,
)
from secretnotes.services.notes import NotesHttpClient, NotesService
from tests.fakes import (
    ROOT,
    FakeSession,
    InMemoryNotesServer,
    make_config,
    make_response,
    note_json,
)

URL = ROOT + "/notes/secret"


class NotesServiceTest(unittest.TestCase):
    def setUp(self):
        self.session = FakeSession()
        self.service = NotesService(
            NotesHttpClient(make_config(), session=self.session)
        )

    def test_read(self):
        self.session.add("GET", URL, make_response(200, note_json("hi")))
        note = self.service.read("secret")
        self.assertEqual(note.id, "n1")
        self.assertEqual(note.message, "hi")
        self.assertFalse(note.hasImage)

    def test_read_missing(self):
        self.session.add("GET", URL, make_response(404, {"error": "note not found"}))
        with self.assertRaises(NoteNotFound):
            self.service.read("secret")

    def test_write_methods(self):
        for method, call in (
            ("POST", self.service.create),
            ("PUT", self.service.upsert),
            ("PATCH", self.service.patch),
        ):
            self.session.add(method, URL, make_response(200, note_json("new")))
            self.assertEqual(call("secret", "new").message, "new")
        self.assertEqual(
            [(m, kw["json"]) for m, _, kw in self.session.calls],
            [
                ("POST", {"message": "new"}),
                ("PUT", {"message": "new"}),
                ("PATCH", {"message": "new"}),
            ],
        )

    def test_invalid_note_payload(self):
        self.session.add("GET", URL, make_response(200, {"unexpected": True}))
        with self.assertRaises(ApiError):
            self.service.read("secret")

    def test_get_or_create_keeps_note_with_skewed_timestamps(self):
        body = note_json("my precious text")
        body["created"] = "2024-01-01T00:00:00.500Z"
        self.session.add("GET", URL, make_response(200, body))
        with self.assertLogs("secretnotes.services.notes.service", "WARNING"):
            note = self.service.get_or_create("secret")
        self.assertEqual(note.message, "my precious text")
        self.assertEqual(self.session.methods(), [("GET", URL)])

    def test_read_accepts_mixed_naive_and_aware_timestamps(self):
        body = note_json(updated="2024-01-02T00:00:00")
        self.session.add("GET", URL, make_response(200, body))
        note = self.service.read("secret")
        self.assertIsNone(note.updated.tzinfo)
        self.assertIsNotNone(note.created.tzinfo)

    def test_write_without_body_raises(self):
        self.session.add("PUT", URL, make_response(204, b""))
        with self.assertRaises(ApiError):
            self.service.upsert("secret", "x")

    def test_empty_default_message_is_refused(self):
        with self.assertRaises(ValueError):
            NotesService(NotesHttpClient(make_config()), default_message="")


class GetOrCreateTest(unittest.TestCase):
    def setUp(self):
        self.session = FakeSession()
        self.service = NotesService(
            NotesHttpClient(make_config(), session=self.session)
        )

    def test_existing_note_is_returned_unchanged(self):
        self.session.add("GET", URL, make_response(200, note_json("kept")))
        note = self.service.get_or_create("secret")
        self.assertEqual(note.message, "kept")
        self.assertEqual(self.session.methods(), [("GET", URL)])

    def test_missing_note_is_upserted_with_default_message(self):
        self.session.add(
            "GET",
            URL,
            make_response(404, {"error": "note not found"}),
            # A read right after the write would fail; it must not happen.
            make_response(500, {"error": "read after write"}),
        )
        self.session.add(
            "PUT", URL, make_response(200, note_json(DEFAULT_MESSAGE, note_id="new"))
        )
        note = self.service.get_or_create("secret")
        self.assertEqual(note.message, DEFAULT_MESSAGE)
        self.assertEqual(note.id, "new")
        self.assertEqual(self.session.methods(), [("GET", URL), ("PUT", URL)])
        _, _, kwargs = self.session.calls[1]
        self.assertEqual(kwargs["json"], {"message": DEFAULT_MESSAGE})

    def test_any_read_failure_triggers_write(self):
        self.session.add("GET", URL, requests.ConnectionError("offline"))
        self.session.add("PUT", URL, make_response(200, note_json(DEFAULT_MESSAGE)))
        self.assertEqual(self.service.get_or_create("secret").message, DEFAULT_MESSAGE)

    def test_falls_back_to_create_when_upsert_fails(self):
        self.session.add("GET", URL, make_response(404, {"error": "note not found"}))
        self.session.add("PUT", URL, make_response(405, b"Method Not Allowed"))
        self.session.add("POST", URL, make_response(200, note_json(DEFAULT_MESSAGE)))
        note = self.service.get_or_create("secret")
        self.assertEqual(note.message, DEFAULT_MESSAGE)
        self.assertEqual(
            self.session.methods(), [("GET", URL), ("PUT", URL), ("POST", URL)]
        )

    def test_create_error_wins_when_everything_fails(self):
        self.session.add("GET", URL, make_response(404, {"error": "note not found"}))
        self.session.add("PUT", URL, make_response(500, {"error": "upsert broke"}))
        self.session.add("POST", URL, make_response(409, {"error": "create broke"}))
        with self.assertRaises(ServerRejected) as ctx:
            self.service.get_or_create("secret")
        self.assertIn("create broke", str(ctx.exception))

    def test_transport_failure_of_create_propagates(self):
        self.session.add("GET", URL, requests.ConnectionError("offline"))
        self.session.add("PUT", URL, requests.ConnectionError("offline"))
        self.session.add("POST", URL, requests.ConnectionError("still offline"))
        with self.assertRaises(TransportError) as ctx:
            self.service.get_or_create("secret")
        self.assertIn("still offline", str(ctx.exception))

    def test_write_without_body_reads_back(self):
        self.session.add(
            "GET",
            URL,
            make_response(404, {"error": "note not found"}),
            make_response(200, note_json(DEFAULT_MESSAGE)),
        )
        self.session.add("PUT", URL, make_response(204, b""))
        note = self.service.get_or_create("secret")
        self.assertEqual(note.message, DEFAULT_MESSAGE)
        self.assertEqual(
            self.session.methods(), [("GET", URL), ("PUT", URL), ("GET", URL)]
        )


class InMemoryServerTest(unittest.TestCase):
    def setUp(self):
        self.server = InMemoryNotesServer()
        self.service = NotesService(
            NotesHttpClient(make_config(), session=FakeSession(fallback=self.server))
        )

    def test_last_write_wins(self):
        self.service.upsert("secret", "A")
        self.service.upsert("secret", "B")
        self.assertEqual(self.service.read("secret").message, "B")

    def test_updates_keep_identity(self):
        first = self.service.get_or_create("secret")
        second = self.service.upsert("secret", "changed")
        self.assertEqual(first.id, second.id)
        self.assertEqual(first.created, second.created)
        self.assertGreaterEqual(second.updated, first.updated)

    def test_patch_requires_existing_note(self):
        with self.assertRaises(NoteNotFound):
            self.service.patch("secret", "x")

    def test_create_conflict(self):
        self.service.create("secret", "one")
        with self.assertRaises(ServerRejected) as ctx:
            self.service.create("secret", "two")
        self.assertEqual(ctx.exception.status, 409)

    def test_keys_are_independent(self):
        self.service.upsert("alpha", "a")
        self.service.upsert("beta", "b")
        self.assertEqual(self.service.read("alpha").message, "a")
        self.assertEqual(self.service.read("beta").message, "b")


if __name__ == "__main__":
    unittest.main()
