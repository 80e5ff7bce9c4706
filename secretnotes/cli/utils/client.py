"""Utility functions shared by the secretnotes CLI commands."""

import json
import logging
import os
from typing import Any, Dict, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from secretnotes import ClientConfig, SecretNotesService
from secretnotes.exceptions import ConfigError, SecretNotesError
from secretnotes.keys import require_valid

console = Console()

config_dir = os.path.expanduser("~/.config/secretnotes")
config_path = os.path.join(config_dir, "config.json")

# Filled by the root callback in secretnotes.cli.main
state: Dict[str, Any] = {"base_url": None, "verbose": False}


def setup_logging(verbose: bool) -> None:
    """Route library logs through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                show_time=True,
                log_time_format="%H:%M:%S",
            )
        ],
    )


def load_config() -> Dict[str, Any]:
    """Load configuration from file."""
    try:
        if os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as f:
                return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        console.print(f"[yellow]Warning:[/yellow] Could not load config file: {exc}")
    return {}


def _resolve_base_url() -> Optional[str]:
    """command line > SECRETNOTES_API_BASE_URL > config file."""
    return (
        state.get("base_url")
        or os.getenv("SECRETNOTES_API_BASE_URL")
        or load_config().get("base_url")
    )


def get_api_instance() -> SecretNotesService:
    """Build a SecretNotesService from CLI options, env and config file."""
    try:
        config = ClientConfig.from_env(base_url=_resolve_base_url())
    except ConfigError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        console.print(
            Panel(
                "Set the server address with one of:\n"
                "- the --base-url option\n"
                "- the SECRETNOTES_API_BASE_URL environment variable\n"
                f'- {{"base_url": "..."}} in {config_path}',
                title="Configuration Required",
                border_style="red",
            )
        )
        raise typer.Exit(1) from exc
    return SecretNotesService(config)


def get_key(phrase: str) -> str:
    """Normalize a passphrase or exit with a readable error."""
    try:
        return require_valid(phrase)
    except SecretNotesError as exc:
        fail(exc)


def fail(exc: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(1) from exc


def phrase_option():
    return typer.Option(
        ...,
        "--phrase",
        "-p",
        prompt="Passphrase",
        hide_input=True,
        envvar="SECRETNOTES_PASSPHRASE",
        help="Passphrase of the note (3+ characters)",
    )
