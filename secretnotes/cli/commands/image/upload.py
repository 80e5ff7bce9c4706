"""Upload command for the image service."""

import typer
from rich.console import Console

from secretnotes.cli.utils import client
from secretnotes.exceptions import SecretNotesError

app = typer.Typer(help="Attach an image downloaded from a URL")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    url: str = typer.Argument(..., help="Direct image URL to upload"),
    phrase: str = client.phrase_option(),
):
    """Upload an image from a URL to the note."""
    key = client.get_key(phrase)
    api = client.get_api_instance()
    try:
        info = api.images.upload_from_url(key, url)
        note = api.notes.read(key)
    except SecretNotesError as e:
        client.fail(e)
    finally:
        api.close()
    console.print(f"Uploaded [bold]{info.fileName}[/bold] ({info.contentType})")
    if not note.hasImage:
        console.print("[yellow]Warning:[/yellow] server does not report an image yet")
