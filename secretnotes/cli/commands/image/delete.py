"""Delete command for the image service."""

import typer
from rich.console import Console

from secretnotes.cli.utils import client
from secretnotes.exceptions import SecretNotesError

app = typer.Typer(help="Remove the note image")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    phrase: str = client.phrase_option(),
    force: bool = typer.Option(
        False, "--force", "-f", help="Delete without confirmation"
    ),
):
    """Delete the image attached to the note."""
    key = client.get_key(phrase)
    if not force:
        confirmed = typer.confirm("Are you sure you want to delete the image?")
        if not confirmed:
            console.print("Deletion cancelled")
            return

    api = client.get_api_instance()
    try:
        result = api.images.delete(key)
    except SecretNotesError as e:
        client.fail(e)
    finally:
        api.close()
    console.print(result.message or "Image deleted")
