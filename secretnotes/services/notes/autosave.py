"""
Debounced autosave for a loaded note.

States:
  IDLE        nothing pending
  DEBOUNCING  an edit is pending and the quiet-period timer is running
  SAVING      a write is in flight

Every edit restarts the timer, so a burst of edits produces one write with
the last value. An edit that matches the confirmed note is a no-op. Edits
arriving while SAVING are kept and scheduled once the write resolves; at
most one write is in flight per coordinator. Failed writes are reported
through ``on_error`` and are not retried.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional, Protocol

from secretnotes.exceptions import InvalidKeyError, SecretNotesError
from secretnotes.keys import MIN_KEY_LENGTH, is_valid

from .models import Note

LOGGER = logging.getLogger(__name__)

DEFAULT_DELAY = 2.0

WriteFn = Callable[[str, str], Note]
TimerFactory = Callable[[float, Callable[[], None]], "TimerHandle"]


class AutosaveState(Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SAVING = "saving"


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


def thread_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class AutosaveCoordinator:
    def __init__(
        self,
        write: WriteFn,
        key: str,
        note: Note,
        *,
        delay: float = DEFAULT_DELAY,
        min_key_length: int = MIN_KEY_LENGTH,
        timer_factory: TimerFactory = thread_timer,
        on_saved: Optional[Callable[[Note], None]] = None,
        on_error: Optional[Callable[[SecretNotesError], None]] = None,
    ):
        if note is None:
            raise ValueError("autosave needs a resolved note")
        if not is_valid(key, min_key_length):
            raise InvalidKeyError(
                f"Passphrase must be at least {min_key_length} characters."
            )
        self._write = write
        self._key = key
        self._note = note
        self._delay = delay
        self._timer_factory = timer_factory
        self._on_saved = on_saved
        self._on_error = on_error

        self._cond = threading.Condition()
        self._state = AutosaveState.IDLE
        self._pending: Optional[str] = None
        self._timer = None
        # Bumped on every schedule/cancel so a timer that already fired
        # cannot act on a superseded edit.
        self._token = 0
        self._closed = False
        self._last_error: Optional[SecretNotesError] = None

    # ----- Read-only state -----

    @property
    def state(self) -> AutosaveState:
        return self._state

    @property
    def note(self) -> Note:
        return self._note

    @property
    def pending(self) -> Optional[str]:
        return self._pending

    @property
    def last_error(self) -> Optional[SecretNotesError]:
        return self._last_error

    @property
    def closed(self) -> bool:
        return self._closed

    # ----- Events -----

    def edit(self, message: str) -> None:
        """Register the latest local value of the note text."""
        with self._cond:
            if self._closed:
                return
            if self._state is AutosaveState.SAVING:
                LOGGER.debug("Edit during save; queued")
                self._pending = message
                return
            if message == self._note.message:
                if self._state is AutosaveState.DEBOUNCING:
                    LOGGER.debug("Edit reverted to confirmed text; cancelling save")
                    self._cancel_timer()
                    self._pending = None
                    self._state = AutosaveState.IDLE
                return
            self._pending = message
            self._schedule()

    def rebase(self, note: Note) -> None:
        """Adopt a note re-read from the server as the confirmed state."""
        with self._cond:
            self._note = note
            if (
                self._state is AutosaveState.DEBOUNCING
                and self._pending == note.message
            ):
                self._cancel_timer()
                self._pending = None
                self._state = AutosaveState.IDLE

    def flush(self) -> Note:
        """
        Wait for any in-flight write, then save a pending edit right away.

        Returns the confirmed note afterwards.
        """
        with self._cond:
            while self._state is AutosaveState.SAVING:
                self._cond.wait()
            if self._closed or self._state is not AutosaveState.DEBOUNCING:
                return self._note
            self._cancel_timer()
            message = self._begin_save()
        self._save(message)
        return self._note

    def close(self) -> None:
        """Cancel the timer. Later edits and timer callbacks are ignored."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cancel_timer()
            if self._pending is not None:
                LOGGER.info("Autosave closed with an unsaved edit")
            self._pending = None
            if self._state is AutosaveState.DEBOUNCING:
                self._state = AutosaveState.IDLE

    # ----- Internals -----

    def _schedule(self) -> None:
        self._cancel_timer()
        token = self._token
        self._timer = self._timer_factory(self._delay, lambda: self._on_timer(token))
        self._state = AutosaveState.DEBOUNCING
        self._timer.start()

    def _cancel_timer(self) -> None:
        self._token += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _begin_save(self) -> str:
        message = self._pending
        self._pending = None
        self._state = AutosaveState.SAVING
        return message

    def _on_timer(self, token: int) -> None:
        with self._cond:
            if (
                self._closed
                or token != self._token
                or self._state is not AutosaveState.DEBOUNCING
            ):
                return
            self._timer = None
            message = self._begin_save()
        self._save(message)

    def _save(self, message: str) -> None:
        LOGGER.debug("Autosaving note (len=%d)", len(message))
        try:
            note = self._write(self._key, message)
        except SecretNotesError as exc:
            LOGGER.warning("Autosave failed: %s", exc)
            self._finish(None, exc)
            if self._on_error is not None:
                self._on_error(exc)
            return
        except Exception:
            self._finish(None, None)
            raise
        self._finish(note, None)
        if self._on_saved is not None:
            self._on_saved(note)

    def _finish(self, note: Optional[Note], error: Optional[SecretNotesError]) -> None:
        with self._cond:
            if note is not None:
                self._note = note
            self._last_error = error
            self._state = AutosaveState.IDLE
            pending = self._pending
            if pending is not None and not self._closed:
                if pending == self._note.message:
                    self._pending = None
                else:
                    self._schedule()
            self._cond.notify_all()
