"""Tests for NoteSession and the SecretNotesService facade."""

import unittest
from unittest.mock import MagicMock

from secretnotes import SecretNotesService
from secretnotes.config import DEFAULT_MESSAGE
from secretnotes.exceptions import InvalidKeyError, SecretNotesError
from secretnotes.services.notes import AutosaveState, Note
from tests.fakes import (
    ROOT,
    FakeSession,
    FakeTimers,
    InMemoryNotesServer,
    make_config,
    make_response,
    note_json,
)

SOURCE_URL = "https://images.test/cat.png"


class NoteSessionTest(unittest.TestCase):
    def setUp(self):
        self.server = InMemoryNotesServer()
        self.http = FakeSession(fallback=self.server)
        self.api = SecretNotesService(make_config(), session=self.http)
        self.timers = FakeTimers()
        self.session = self.api.open_session(timer_factory=self.timers)

    def tearDown(self):
        self.session.close()
        self.api.close()

    def test_load_creates_note_on_first_use(self):
        note = self.session.load("  my secret  ")
        self.assertEqual(note.message, DEFAULT_MESSAGE)
        self.assertEqual(self.session.key, "my secret")
        self.assertIn("my secret", self.server.notes)
        self.assertEqual(self.session.autosave.state, AutosaveState.IDLE)

    def test_short_passphrase_is_rejected_before_any_request(self):
        with self.assertRaises(InvalidKeyError):
            self.session.load("  ab ")
        self.assertEqual(self.http.calls, [])

    def test_edit_autosaves_after_quiet_period(self):
        self.session.load("secret")
        self.session.edit("d")
        self.session.edit("dr")
        self.session.edit("draft")
        self.timers.fire_all()
        self.assertEqual(self.server.notes["secret"]["message"], "draft")
        self.assertEqual(self.session.note.message, "draft")
        puts = [c for c in self.http.calls if c[0] == "PUT"]
        # One PUT establishing the note, one autosave.
        self.assertEqual(len(puts), 2)

    def test_edit_without_note_is_ignored(self):
        self.session.edit("nothing loaded")
        self.assertEqual(self.timers.created, [])
        self.assertEqual(self.http.calls, [])

    def test_reload_closes_previous_autosave(self):
        self.session.load("first")
        self.session.edit("typed for first")
        old_timer = self.timers.created[0]
        self.session.load("second")
        self.assertTrue(old_timer.cancelled)
        self.assertEqual(self.session.key, "second")

    def test_close_cancels_pending_autosave(self):
        self.session.load("secret")
        self.session.edit("unsaved")
        self.session.close()
        self.assertTrue(self.timers.created[0].cancelled)

    def test_upload_and_delete_refresh_has_image(self):
        self.http.add(
            "GET", SOURCE_URL, make_response(200, b"png", content_type="image/png")
        )
        self.session.load("secret")
        self.assertFalse(self.session.note.hasImage)

        info = self.session.upload_image(SOURCE_URL)
        self.assertEqual(info.fileName, "cat.png")
        self.assertTrue(self.session.note.hasImage)

        image = self.session.fetch_image()
        self.assertEqual(image.data_url, "data:image/png;base64,cG5n")
        self.assertIs(self.session.image, image)

        self.session.delete_image()
        self.assertIsNone(self.session.image)
        self.assertFalse(self.session.note.hasImage)

    def test_image_result_survives_failed_refresh(self):
        self.http.add(
            "GET", SOURCE_URL, make_response(200, b"png", content_type="image/png")
        )
        self.session.load("secret")
        self.http.add(
            "GET", ROOT + "/notes/secret", make_response(503, b"maintenance")
        )

        with self.assertLogs("secretnotes.services.notes.session", "WARNING"):
            info = self.session.upload_image(SOURCE_URL)
        self.assertEqual(info.fileName, "cat.png")
        self.assertTrue(self.server.notes["secret"]["hasImage"])
        self.assertFalse(self.session.note.hasImage)

        with self.assertLogs("secretnotes.services.notes.session", "WARNING"):
            result = self.session.delete_image()
        self.assertEqual(result.message, "Image deleted")
        self.assertIsNone(self.session.image)

    def test_image_ops_need_a_loaded_note(self):
        with self.assertRaises(SecretNotesError):
            self.session.fetch_image()

    def test_health(self):
        self.http.add(
            "GET", ROOT + "/", make_response(200, {"message": "ok", "version": "2"})
        )
        info = self.api.health()
        self.assertEqual((info.message, info.version), ("ok", "2"))


class GenerationGuardTest(unittest.TestCase):
    def setUp(self):
        self.api = SecretNotesService(make_config(), session=FakeSession())
        self.api.notes = MagicMock()
        self.session = self.api.open_session(timer_factory=FakeTimers())

    def test_stale_load_is_discarded(self):
        newer = Note.model_validate(note_json("newer", note_id="n2"))
        older = Note.model_validate(note_json("older", note_id="n1"))

        def get_or_create(key):
            if key == "first":
                # The user switches passphrase before this load returns.
                self.assertIs(self.session.load("second"), newer)
                return older
            return newer

        self.api.notes.get_or_create.side_effect = get_or_create
        self.assertIsNone(self.session.load("first"))
        self.assertIs(self.session.note, newer)
        self.assertEqual(self.session.key, "second")

    def test_stale_failure_is_discarded(self):
        newer = Note.model_validate(note_json("newer"))

        def get_or_create(key):
            if key == "first":
                self.session.load("second")
                raise SecretNotesError("first failed")
            return newer

        self.api.notes.get_or_create.side_effect = get_or_create
        self.assertIsNone(self.session.load("first"))
        self.assertIs(self.session.note, newer)

    def test_current_failure_propagates(self):
        self.api.notes.get_or_create.side_effect = SecretNotesError("down")
        with self.assertRaises(SecretNotesError):
            self.session.load("secret")
        self.assertIsNone(self.session.note)


if __name__ == "__main__":
    unittest.main()
