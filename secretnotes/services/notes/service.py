"""
Note resolver.

Public API:
  - NotesService.read(key) -> Note
  - NotesService.create(key, message) -> Note
  - NotesService.upsert(key, message) -> Note
  - NotesService.patch(key, message) -> Note
  - NotesService.get_or_create(key) -> Note
  - NotesService.raw -> NotesHttpClient (escape hatch)

Keys are expected to be normalized already (see secretnotes.keys).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from secretnotes.config import DEFAULT_MESSAGE
from secretnotes.exceptions import ApiError, SecretNotesError
from secretnotes.services.base import BaseService

from .client import NotesHttpClient
from .models import Note

LOGGER = logging.getLogger(__name__)


class NotesService(BaseService):
    """
    Get-or-create access to the single note addressed by a passphrase key.
    """

    def __init__(
        self, http: NotesHttpClient, *, default_message: str = DEFAULT_MESSAGE
    ):
        super().__init__(http)
        if not default_message:
            raise ValueError("default_message must not be empty")
        self._default_message = default_message

    @property
    def default_message(self) -> str:
        return self._default_message

    # -------------------------- Public API methods ---------------------------

    def read(self, key: str) -> Note:
        """Fetch the note. Raises NoteNotFound when the server has none."""
        LOGGER.debug("Reading note")
        data = self._http.request_json("GET", self._http.note_path(key))
        return self._to_note(data)

    def create(self, key: str, message: str) -> Note:
        """POST a new note; the server decides whether an existing one conflicts."""
        return self._require(self._write("POST", key, message))

    def upsert(self, key: str, message: str) -> Note:
        """PUT the note, creating it if absent. Preferred write path."""
        return self._require(self._write("PUT", key, message))

    def patch(self, key: str, message: str) -> Note:
        """PATCH an existing note. Raises NoteNotFound if it does not exist."""
        return self._require(self._write("PATCH", key, message))

    def get_or_create(self, key: str) -> Note:
        """
        Resolve ``key`` to exactly one note, establishing it if needed.

        Any read failure triggers an upsert with the default message, then a
        create as fallback. The write response is returned as-is: a read
        right after a write for the same key may transiently fail on the
        server, so no confirmation read is issued.
        """
        read_error: Optional[SecretNotesError] = None
        try:
            return self.read(key)
        except SecretNotesError as exc:
            read_error = exc
            LOGGER.info("Read failed (%s); establishing note", exc)

        note: Optional[Note] = None
        written = False
        upsert_error: Optional[SecretNotesError] = None
        create_error: Optional[SecretNotesError] = None

        try:
            note = self._write("PUT", key, self._default_message)
            written = True
        except SecretNotesError as exc:
            upsert_error = exc
            LOGGER.warning("Upsert failed (%s); falling back to create", exc)
            try:
                note = self._write("POST", key, self._default_message)
                written = True
            except SecretNotesError as exc2:
                create_error = exc2
                LOGGER.error("Create failed as well: %s", exc2)

        if note is not None:
            return note

        if not written:
            raise create_error or upsert_error or read_error  # type: ignore[misc]

        # A write succeeded but echoed no note body.
        LOGGER.warning("Write returned no note; reading back")
        return self.read(key)

    # -------------------------- Internal helpers -----------------------------

    def _write(self, method: str, key: str, message: str) -> Optional[Note]:
        """Send ``{message}``; None when the server acknowledged with no body."""
        LOGGER.debug("%s note (len=%d)", method, len(message))
        data = self._http.request_json(
            method, self._http.note_path(key), {"message": message}
        )
        if data == {}:
            return None
        return self._to_note(data)

    @staticmethod
    def _require(note: Optional[Note]) -> Note:
        if note is None:
            raise ApiError("Server acknowledged the write but returned no note")
        return note

    @staticmethod
    def _to_note(data) -> Note:
        try:
            note = Note.model_validate(data)
        except ValidationError as e:
            LOGGER.error("Note response validation failed: %s", e)
            raise ApiError("Invalid note payload from server", payload=data) from e
        if _as_utc(note.updated) < _as_utc(note.created):
            # Server-assigned; reported only.
            LOGGER.warning(
                "Note %s has updated (%s) before created (%s)",
                note.id,
                note.updated.isoformat(),
                note.created.isoformat(),
            )
        return note


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so mixed payloads stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
