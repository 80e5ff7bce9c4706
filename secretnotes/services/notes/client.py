"""
Low-level HTTP client for the secret notes API.

Used internally by NotesService and ImageService. Decodes JSON or binary
bodies and turns every non-success status into a typed exception from
secretnotes.exceptions; callers never see a raw ``requests`` response.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Dict, Optional, Tuple
from urllib.parse import quote

import requests

from secretnotes.config import ClientConfig
from secretnotes.exceptions import (
    NoteNotFound,
    ServerOpaque,
    ServerRejected,
    SourceFetchFailed,
    TransportError,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
ERROR_SNIPPET_CHARS = 200
DEBUG_MAX_BYTES = 524288


# ------------------------------- Helpers -------------------------------------


def _decode_json(body: bytes):
    """Return the parsed body, or raise ValueError when it is not JSON."""
    return json.loads(body)


def _error_detail(parsed) -> Optional[str]:
    if not isinstance(parsed, dict):
        return None
    for field in ("error", "message"):
        value = parsed.get(field)
        if value:
            return str(value)
    return None


def _snippet(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")[:ERROR_SNIPPET_CHARS]


# ------------------------------- Transport -----------------------------------


class NotesHttpClient:
    """
    Minimal HTTP transport:
      - JSON requests via `json=payload`, multipart via `files=`
      - every response body is read once, as bytes
      - bounded debug dumps (SECRETNOTES_DEBUG, SECRETNOTES_DEBUG_MAX_BYTES)
    """

    def __init__(
        self, config: ClientConfig, session: Optional[requests.Session] = None
    ):
        self._config = config
        self._base_url = config.api_root
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = config.user_agent
        self._session = session
        LOGGER.debug("Initialized NotesHttpClient with base_url: %s", self._base_url)

    # ----- Paths -----

    @staticmethod
    def note_path(key: str) -> str:
        return f"/notes/{quote(key, safe='')}"

    @classmethod
    def image_path(cls, key: str) -> str:
        return f"{cls.note_path(key)}/image"

    def url_for(self, path: str) -> str:
        return f"{self._base_url}{path}"

    # ----- Requests -----

    def request_json(self, method: str, path: str, json_body: Optional[Dict] = None):
        url = self.url_for(path)
        kwargs = {}
        if json_body is not None:
            kwargs["json"] = json_body
        resp, body = self._send(method, url, **kwargs)
        if not self._ok(resp):
            self._dump_http_debug(method, url, json_body, resp, body)
            self._raise_api_error(method, url, resp, body)
        return self._parse_success(method, url, body)

    def request_binary(self, method: str, path: str) -> Tuple[bytes, str]:
        url = self.url_for(path)
        resp, body = self._send(method, url)
        if not self._ok(resp):
            # Binary endpoints never carry structured errors.
            self._dump_http_debug(method, url, None, resp, body)
            LOGGER.error("%s %s failed with code %d", method, url, resp.status_code)
            raise ServerOpaque(
                f"{resp.status_code} {resp.reason or ''}".strip(),
                status=resp.status_code,
                reason=resp.reason,
            )
        content_type = resp.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
        LOGGER.debug(
            "%s %s returned %d bytes (%s)", method, url, len(body), content_type
        )
        return body, content_type

    def request_multipart(
        self,
        method: str,
        path: str,
        field_name: str,
        data: bytes,
        file_name: str,
        content_type: str,
    ):
        url = self.url_for(path)
        files = {field_name: (file_name, data, content_type)}
        resp, body = self._send(method, url, files=files)
        if not self._ok(resp):
            self._dump_http_debug(
                method, url, {"field": field_name, "file": file_name}, resp, body
            )
            self._raise_api_error(method, url, resp, body)
        return self._parse_success(method, url, body)

    def fetch_external(self, url: str) -> Tuple[bytes, str]:
        """GET an arbitrary URL (not the notes API) and return its bytes."""
        LOGGER.info("GET external %s", url)
        try:
            resp = self._session.request("GET", url, timeout=self._config.timeout)
            body = resp.content
        except requests.RequestException as exc:
            LOGGER.error("GET external %s failed: %s", url, exc)
            raise SourceFetchFailed(f"Failed to fetch image: {exc}", url=url) from exc
        if not self._ok(resp):
            LOGGER.error("GET external %s failed with code %d", url, resp.status_code)
            raise SourceFetchFailed(
                f"Failed to fetch image: {resp.status_code}",
                url=url,
                status=resp.status_code,
            )
        content_type = resp.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
        return body, content_type

    def health(self) -> Dict:
        return self.request_json("GET", "/")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "NotesHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ----- Internals -----

    @staticmethod
    def _ok(resp) -> bool:
        return 200 <= resp.status_code < 300

    def _send(self, method: str, url: str, **kwargs):
        LOGGER.info("%s %s", method, url)
        try:
            resp = self._session.request(
                method, url, timeout=self._config.timeout, **kwargs
            )
            # The body is consumed exactly once, here, whatever the status.
            body = resp.content or b""
        except requests.Timeout as exc:
            LOGGER.error("%s %s timed out", method, url)
            raise TransportError(f"Request timed out: {method} {url}") from exc
        except requests.RequestException as exc:
            LOGGER.error("%s %s failed: %s", method, url, exc)
            raise TransportError(f"Network error: {exc}") from exc
        LOGGER.debug("%s %s returned status %d", method, url, resp.status_code)
        return resp, body

    @staticmethod
    def _parse_success(method: str, url: str, body: bytes):
        if not body.strip():
            return {}
        try:
            return _decode_json(body)
        except ValueError:
            # Tolerated: the server sometimes answers writes with a non-JSON
            # acknowledgement. Treated like an empty body.
            LOGGER.warning(
                "%s %s returned a non-JSON success body; treating as empty",
                method,
                url,
            )
            return {}

    @staticmethod
    def _raise_api_error(method: str, url: str, resp, body: bytes) -> None:
        status = resp.status_code
        status_line = f"{status} {resp.reason or ''}".strip()
        try:
            parsed = _decode_json(body)
        except ValueError:
            parsed = None
        detail = _error_detail(parsed)
        LOGGER.error("%s %s failed with code %d", method, url, status)
        if detail is not None:
            exc_cls = NoteNotFound if status == 404 else ServerRejected
            raise exc_cls(
                f"{status_line}: {detail}",
                status=status,
                reason=resp.reason,
                payload=parsed,
            )
        message = status_line
        if body:
            message = f"{status_line}: {_snippet(body)}"
        raise ServerOpaque(
            message,
            status=status,
            reason=resp.reason,
            payload=parsed if parsed is not None else _snippet(body),
        )

    @staticmethod
    def _dump_http_debug(method: str, url: str, payload, resp, body: bytes) -> None:
        if not os.getenv("SECRETNOTES_DEBUG"):
            return
        ts = time.strftime("%Y%m%d-%H%M%S")
        out_dir = os.path.join("workspace", "secretnotes_debug")
        path = os.path.join(out_dir, f"{ts}_{method.lower()}_http.txt")
        try:
            max_bytes = int(os.getenv("SECRETNOTES_DEBUG_MAX_BYTES", DEBUG_MAX_BYTES))
        except ValueError:
            max_bytes = DEBUG_MAX_BYTES
        text = body.decode("utf-8", errors="replace")
        if len(text) > max_bytes:
            text = text[:max_bytes] + "\n[truncated]\n"
        try:
            os.makedirs(out_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(f"{method} {url}\n")
                f.write(f"payload={json.dumps(payload, ensure_ascii=False)}\n")
                f.write(f"status={resp.status_code}\n")
                f.write(f"headers={dict(resp.headers)}\n\n")
                f.write(text)
        except OSError as exc:
            LOGGER.debug("Could not write HTTP debug dump %s: %s", path, exc)
