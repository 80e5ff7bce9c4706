"""Public API for the notes service."""

from .autosave import AutosaveCoordinator, AutosaveState
from .client import NotesHttpClient
from .domain import FetchedImage
from .images import ImageService, encode_base64, filename_from_url, to_data_url
from .models import DeleteResult, HealthInfo, Note, UploadInfo
from .service import NotesService
from .session import NoteSession

__all__ = [
    "NotesService",
    "ImageService",
    "NoteSession",
    "NotesHttpClient",
    "AutosaveCoordinator",
    "AutosaveState",
    "Note",
    "UploadInfo",
    "DeleteResult",
    "HealthInfo",
    "FetchedImage",
    "encode_base64",
    "filename_from_url",
    "to_data_url",
]
