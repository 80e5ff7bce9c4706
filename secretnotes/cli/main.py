#!/usr/bin/env python
"""CLI for secretnotes."""

from typing import Optional

import typer

from secretnotes.cli.commands import health, image, note
from secretnotes.cli.utils import client

app = typer.Typer(help="Command Line Interface for passphrase-keyed secret notes")

app.add_typer(health.app, name="health")
app.add_typer(note.app, name="note")
app.add_typer(image.app, name="image")


@app.callback()
def callback(
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Notes server, e.g. https://notes.example.com"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Keep one secret note per passphrase on a remote server."""
    client.state["base_url"] = base_url
    client.state["verbose"] = verbose
    client.setup_logging(verbose)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
