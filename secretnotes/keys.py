"""Passphrase to lookup-key normalization."""

from __future__ import annotations

from .exceptions import InvalidKeyError

MIN_KEY_LENGTH = 3


def normalize(raw: str) -> str:
    # Only surrounding whitespace is removed. URL escaping belongs to the
    # HTTP client.
    return raw.strip()


def is_valid(key: str, min_length: int = MIN_KEY_LENGTH) -> bool:
    return len(key) >= min_length


def require_valid(raw: str, min_length: int = MIN_KEY_LENGTH) -> str:
    """Normalize ``raw`` and raise InvalidKeyError if it is too short."""
    key = normalize(raw)
    if not is_valid(key, min_length):
        raise InvalidKeyError(
            f"Passphrase must be at least {min_length} characters."
        )
    return key
