"""Write command for the note service."""

import typer
from rich.console import Console

from secretnotes.cli.utils import client
from secretnotes.exceptions import SecretNotesError

app = typer.Typer(help="Replace the note text")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    message: str = typer.Argument(..., help="New note text"),
    phrase: str = client.phrase_option(),
    patch: bool = typer.Option(
        False, "--patch", help="Fail instead of creating when the note is missing"
    ),
):
    """Write the note text."""
    key = client.get_key(phrase)
    api = client.get_api_instance()
    try:
        if patch:
            note = api.notes.patch(key, message)
        else:
            note = api.notes.upsert(key, message)
    except SecretNotesError as e:
        client.fail(e)
    finally:
        api.close()
    console.print(f"Saved at [bold]{note.updated.isoformat()}[/bold]")
