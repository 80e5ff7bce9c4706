"""Public exports for notes data models."""

from __future__ import annotations

from .wire import DeleteResult, HealthInfo, Note, UploadInfo

__all__ = [
    "Note",
    "UploadInfo",
    "DeleteResult",
    "HealthInfo",
]
