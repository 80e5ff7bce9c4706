"""Base class for API-backed services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from secretnotes.services.notes.client import NotesHttpClient


class BaseService:
    """Holds the shared HTTP client for a service."""

    def __init__(self, http: "NotesHttpClient"):
        self._http = http

    @property
    def raw(self) -> "NotesHttpClient":
        """
        Escape hatch: the preconfigured HTTP client used by this service.
        """
        return self._http
