"""
Wire models for the /notes endpoints.

Field names follow the server's camelCase JSON so that ``model_validate``
works on response bodies directly.
"""

from __future__ import annotations

from datetime import datetime

from ._base import WireModel


class Note(WireModel):
    id: str
    message: str = ""
    hasImage: bool = False
    created: datetime
    updated: datetime


class UploadInfo(WireModel):
    """Server description of a stored image."""

    id: str
    fileName: str
    contentType: str
    created: datetime


class DeleteResult(WireModel):
    message: str = ""


class HealthInfo(WireModel):
    message: str = ""
    version: str = ""
