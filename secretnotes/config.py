"""
Client configuration.

The base URL is passed explicitly to the HTTP client at construction; nothing
in the library reads it from the process environment except
``ClientConfig.from_env``.

Environment variables:
  SECRETNOTES_API_BASE_URL     scheme://host[:port] of the notes server
  SECRETNOTES_TIMEOUT          per-request timeout in seconds
  SECRETNOTES_AUTOSAVE_DELAY   debounce quiet period in seconds
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .exceptions import ConfigError

DEFAULT_API_PREFIX = "/api/secretnotes"
DEFAULT_MESSAGE = "New note"


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    api_prefix: str = DEFAULT_API_PREFIX
    timeout: float = 30.0

    # Quiet period before a pending edit is written upstream.
    autosave_delay: float = 2.0

    # Callers must reject shorter passphrases before resolving a note.
    min_key_length: int = 3

    # Initializing write for a fresh key. Must never be empty: the server
    # rejects empty bodies on create.
    default_message: str = DEFAULT_MESSAGE

    user_agent: str = "secretnotes-python"

    def __post_init__(self):
        if not self.base_url:
            raise ConfigError("A base URL for the notes API is required")
        if not self.default_message:
            raise ConfigError("default_message must not be empty")

    @property
    def api_root(self) -> str:
        prefix = self.api_prefix.strip("/")
        root = self.base_url.rstrip("/")
        return f"{root}/{prefix}" if prefix else root

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """Build a config from ``SECRETNOTES_*`` variables; kwargs win."""
        values = {
            "base_url": os.getenv("SECRETNOTES_API_BASE_URL", ""),
        }
        timeout = _env_float("SECRETNOTES_TIMEOUT")
        if timeout is not None:
            values["timeout"] = timeout
        delay = _env_float("SECRETNOTES_AUTOSAVE_DELAY")
        if delay is not None:
            values["autosave_delay"] = delay
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _env_float(name: str):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
