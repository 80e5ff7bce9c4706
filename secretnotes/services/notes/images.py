"""
Note image operations.

Public API:
  - ImageService.fetch(key) -> FetchedImage
  - ImageService.save(key, path) -> (content_type, size)
  - ImageService.upload_from_url(key, source_url) -> UploadInfo
  - ImageService.delete(key) -> DeleteResult

Images are never cached here; every fetch goes to the server. After an
upload or delete the caller re-reads the note to refresh ``hasImage``.
"""

from __future__ import annotations

import base64
import logging
from typing import List, Tuple
from urllib.parse import urlsplit

from pydantic import ValidationError

from secretnotes.exceptions import ApiError
from secretnotes.services.base import BaseService

from .domain import FetchedImage
from .models import DeleteResult, UploadInfo

LOGGER = logging.getLogger(__name__)

CHUNK_SIZE = 32768
DEFAULT_FILE_NAME = "image"
UPLOAD_FIELD = "image"


def encode_base64(data: bytes, chunk_size: int = CHUNK_SIZE) -> str:
    """
    Base64-encode ``data`` reading at most ``chunk_size`` bytes at a time.

    Bytes that do not fill a 3-byte group are carried into the next chunk,
    so the result is identical to a single-pass encoding and no encoder call
    sees more than ``chunk_size + 2`` bytes.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    view = memoryview(data)
    parts: List[bytes] = []
    carry = b""
    for start in range(0, len(view), chunk_size):
        block = carry + bytes(view[start : start + chunk_size])
        cut = len(block) - len(block) % 3
        parts.append(base64.b64encode(block[:cut]))
        carry = block[cut:]
    if carry:
        parts.append(base64.b64encode(carry))
    return b"".join(parts).decode("ascii")


def to_data_url(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{encode_base64(data)}"


def filename_from_url(url: str, default: str = DEFAULT_FILE_NAME) -> str:
    """Last path segment of ``url`` without query or fragment."""
    path = urlsplit(url).path
    name = path.rsplit("/", 1)[-1]
    return name or default


class ImageService(BaseService):
    """Fetch, upload and delete the image attached to a note."""

    def fetch(self, key: str) -> FetchedImage:
        data, content_type = self._fetch_bytes(key)
        return FetchedImage(
            data_url=to_data_url(data, content_type),
            content_type=content_type,
            size=len(data),
        )

    def save(self, key: str, path: str) -> Tuple[str, int]:
        """Write the raw image bytes to ``path``; returns (content_type, size)."""
        data, content_type = self._fetch_bytes(key)
        with open(path, "wb") as f:
            f.write(data)
        LOGGER.info("Saved note image to %s", path)
        return content_type, len(data)

    def upload_from_url(self, key: str, source_url: str) -> UploadInfo:
        """Download ``source_url`` and store it as the note's image."""
        data, content_type = self._http.fetch_external(source_url)
        file_name = filename_from_url(source_url)
        LOGGER.info(
            "Uploading %s (%s, %d bytes)", file_name, content_type, len(data)
        )
        resp = self._http.request_multipart(
            "POST",
            self._http.image_path(key),
            UPLOAD_FIELD,
            data,
            file_name,
            content_type,
        )
        try:
            return UploadInfo.model_validate(resp)
        except ValidationError as e:
            LOGGER.error("Upload response validation failed: %s", e)
            raise ApiError("Invalid upload response from server", payload=resp) from e

    def delete(self, key: str) -> DeleteResult:
        resp = self._http.request_json("DELETE", self._http.image_path(key))
        try:
            return DeleteResult.model_validate(resp)
        except ValidationError as e:
            raise ApiError("Invalid delete response from server", payload=resp) from e

    def _fetch_bytes(self, key: str) -> Tuple[bytes, str]:
        return self._http.request_binary("GET", self._http.image_path(key))
