"""Library exceptions."""

from __future__ import annotations

from typing import Optional


class SecretNotesError(Exception):
    """Base secretnotes error. ``str(exc)`` is always safe to show to a user."""


class ConfigError(SecretNotesError):
    """Missing or malformed client configuration."""


class InvalidKeyError(SecretNotesError):
    """Passphrase too short to be used as a note key."""


class TransportError(SecretNotesError):
    """Network unreachable, timeout or connection reset."""


class ApiError(SecretNotesError):
    """Non-success response from the notes API."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        payload: Optional[object] = None,
    ):
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.payload = payload


class ServerRejected(ApiError):
    """Non-success response carrying a structured JSON error."""


class NoteNotFound(ServerRejected):
    """404 with a structured error body."""


class ServerOpaque(ApiError):
    """Non-success response whose body could not be interpreted."""


class SourceFetchFailed(SecretNotesError):
    """The external image URL could not be fetched."""

    def __init__(self, message: str, url: str, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status
