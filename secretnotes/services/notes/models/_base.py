from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict


def _env_extra_mode(default: str = "ignore") -> str:
    """
    Determine the extra-mode from environment vars.

    SECRETNOTES_EXTRA: allow|forbid|ignore
    Convenience booleans: "true/1/on" -> forbid (strict), "false/0/off" -> ignore
    """
    raw = (os.getenv("SECRETNOTES_EXTRA") or default).strip().lower()

    if raw in {"allow", "forbid", "ignore"}:
        return raw

    if raw in {"1", "true", "yes", "on", "strict"}:
        return "forbid"
    if raw in {"0", "false", "no", "off", "lenient"}:
        return "ignore"

    return default


_EXTRA = _env_extra_mode()


class WireModel(BaseModel):
    """
    Base for API payload models.

    Unknown server fields are ignored by default; set SECRETNOTES_EXTRA=forbid
    before import to catch contract drift during development.
    """

    model_config = ConfigDict(extra=_EXTRA, frozen=True)


__all__ = ["WireModel"]
