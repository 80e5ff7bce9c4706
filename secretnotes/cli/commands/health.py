"""Health command for the secretnotes CLI."""

import typer
from rich.console import Console

from secretnotes.cli.utils import client
from secretnotes.exceptions import SecretNotesError

app = typer.Typer(help="Check that the notes server is reachable")
console = Console()


@app.callback(invoke_without_command=True)
def main():
    """Ping the notes server."""
    api = client.get_api_instance()
    try:
        info = api.health()
    except SecretNotesError as e:
        client.fail(e)
    finally:
        api.close()
    console.print(
        f"[green]{info.message or 'OK'}[/green] version {info.version or '?'}"
    )
