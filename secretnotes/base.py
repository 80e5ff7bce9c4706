"""Top-level API object."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from secretnotes.config import ClientConfig
from secretnotes.exceptions import ApiError
from secretnotes.services.notes import (
    HealthInfo,
    ImageService,
    NoteSession,
    NotesHttpClient,
    NotesService,
)

LOGGER = logging.getLogger(__name__)


class SecretNotesService:
    """
    Entry point for the secret notes API.

    ``config`` defaults to ``ClientConfig.from_env()``. Pass ``session`` to
    reuse (or mock) a ``requests.Session``.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or ClientConfig.from_env()
        self._http = NotesHttpClient(self.config, session=session)
        self.notes = NotesService(
            self._http, default_message=self.config.default_message
        )
        self.images = ImageService(self._http)
        LOGGER.debug("SecretNotesService ready for %s", self.config.api_root)

    def health(self) -> HealthInfo:
        data = self._http.health()
        try:
            return HealthInfo.model_validate(data)
        except ValidationError as e:
            raise ApiError("Invalid health response from server", payload=data) from e

    def open_session(self, **kwargs) -> NoteSession:
        """New NoteSession using this service's config for autosave timing."""
        kwargs.setdefault("autosave_delay", self.config.autosave_delay)
        kwargs.setdefault("min_key_length", self.config.min_key_length)
        return NoteSession(self.notes, self.images, **kwargs)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SecretNotesService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
