"""Command modules for the secretnotes CLI."""

from secretnotes.cli.commands import health, image, note

__all__ = ["health", "image", "note"]
