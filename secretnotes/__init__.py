"""Client for passphrase-keyed secret notes."""

from secretnotes.base import SecretNotesService
from secretnotes.config import ClientConfig

__all__ = ["SecretNotesService", "ClientConfig"]

__version__ = "0.1.0"
