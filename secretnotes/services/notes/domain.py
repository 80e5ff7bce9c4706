# secretnotes/services/notes/domain.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedImage:
    """Decoded note image, valid for the current view only."""

    data_url: str
    content_type: str
    size: int
