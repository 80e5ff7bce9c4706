"""Show command for the note service."""

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from secretnotes.cli.utils import client
from secretnotes.exceptions import SecretNotesError

app = typer.Typer(help="Show the note, creating it on first use")
console = Console()


@app.callback(invoke_without_command=True)
def main(phrase: str = client.phrase_option()):
    """Print the note for a passphrase."""
    key = client.get_key(phrase)
    api = client.get_api_instance()
    try:
        note = api.notes.get_or_create(key)
    except SecretNotesError as e:
        client.fail(e)
    finally:
        api.close()

    console.print(Panel(escape(note.message) or "[dim](empty)[/dim]", title="Message"))
    console.print(f"Updated: {note.updated.isoformat()}")
    if note.hasImage:
        console.print('Note has an image. Use "secretnotes image get" to fetch it.')
    else:
        console.print("No image uploaded yet.")
