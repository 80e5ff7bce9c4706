"""
One passphrase session: the loaded note, its autosave and its image.

Loads are tagged with a generation number. A load that finishes after a
newer one was started is discarded, so switching passphrases quickly never
shows the note of an older passphrase.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from secretnotes.exceptions import SecretNotesError
from secretnotes.keys import MIN_KEY_LENGTH, require_valid

from .autosave import DEFAULT_DELAY, AutosaveCoordinator, TimerFactory, thread_timer
from .domain import FetchedImage
from .images import ImageService
from .models import DeleteResult, Note, UploadInfo
from .service import NotesService

LOGGER = logging.getLogger(__name__)


class NoteSession:
    def __init__(
        self,
        notes: NotesService,
        images: ImageService,
        *,
        autosave_delay: float = DEFAULT_DELAY,
        min_key_length: int = MIN_KEY_LENGTH,
        timer_factory: TimerFactory = thread_timer,
        on_saved: Optional[Callable[[Note], None]] = None,
        on_error: Optional[Callable[[SecretNotesError], None]] = None,
    ):
        self._notes = notes
        self._images = images
        self._autosave_delay = autosave_delay
        self._min_key_length = min_key_length
        self._timer_factory = timer_factory
        self._on_saved = on_saved
        self._on_error = on_error

        self._lock = threading.Lock()
        self._generation = 0
        self._key: Optional[str] = None
        self._note: Optional[Note] = None
        self._image: Optional[FetchedImage] = None
        self._autosave: Optional[AutosaveCoordinator] = None

    @property
    def key(self) -> Optional[str]:
        return self._key

    @property
    def note(self) -> Optional[Note]:
        return self._note

    @property
    def image(self) -> Optional[FetchedImage]:
        return self._image

    @property
    def autosave(self) -> Optional[AutosaveCoordinator]:
        return self._autosave

    @property
    def generation(self) -> int:
        return self._generation

    # ----- Note -----

    def load(self, phrase: str) -> Optional[Note]:
        """
        Resolve ``phrase`` to its note, creating it on first use.

        Returns None when a newer load superseded this one while it ran.
        """
        key = require_valid(phrase, self._min_key_length)
        with self._lock:
            self._generation += 1
            generation = self._generation
        try:
            note = self._notes.get_or_create(key)
        except SecretNotesError:
            if generation != self._generation:
                LOGGER.info("Discarding failure of superseded load %d", generation)
                return None
            raise
        with self._lock:
            if generation != self._generation:
                LOGGER.info("Discarding superseded load %d", generation)
                return None
            if self._autosave is not None:
                self._autosave.close()
            self._key = key
            self._note = note
            self._image = None
            self._autosave = AutosaveCoordinator(
                self._notes.upsert,
                key,
                note,
                delay=self._autosave_delay,
                min_key_length=self._min_key_length,
                timer_factory=self._timer_factory,
                on_saved=self._saved,
                on_error=self._on_error,
            )
        return note

    def edit(self, message: str) -> None:
        """Feed the editor's current text to autosave; ignored with no note."""
        autosave = self._autosave
        if autosave is None:
            return
        autosave.edit(message)

    def refresh(self) -> Note:
        """Re-read the loaded note, e.g. to pick up a changed ``hasImage``."""
        key, generation = self._require_loaded()
        note = self._notes.read(key)
        with self._lock:
            if generation == self._generation:
                self._note = note
                if self._autosave is not None:
                    self._autosave.rebase(note)
        return note

    # ----- Image -----

    def fetch_image(self) -> FetchedImage:
        key, generation = self._require_loaded()
        image = self._images.fetch(key)
        with self._lock:
            if generation == self._generation:
                self._image = image
        return image

    def upload_image(self, source_url: str) -> UploadInfo:
        key, generation = self._require_loaded()
        info = self._images.upload_from_url(key, source_url)
        self._image_changed(generation)
        return info

    def delete_image(self) -> DeleteResult:
        key, generation = self._require_loaded()
        result = self._images.delete(key)
        self._image_changed(generation)
        return result

    def _image_changed(self, generation: int) -> None:
        """
        Drop the cached image and re-read ``hasImage``.

        The image operation already succeeded, so a failed re-read is logged
        and leaves the previous note in place.
        """
        with self._lock:
            if generation != self._generation:
                return
            self._image = None
        try:
            self.refresh()
        except SecretNotesError as exc:
            LOGGER.warning("Could not refresh note after image change: %s", exc)

    # ----- Teardown -----

    def close(self) -> None:
        with self._lock:
            self._generation += 1
            if self._autosave is not None:
                self._autosave.close()

    def __enter__(self) -> "NoteSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ----- Internals -----

    def _require_loaded(self):
        with self._lock:
            if self._key is None:
                raise SecretNotesError("No note loaded")
            return self._key, self._generation

    def _saved(self, note: Note) -> None:
        with self._lock:
            if self._autosave is not None and self._autosave.note is note:
                self._note = note
        if self._on_saved is not None:
            self._on_saved(note)
