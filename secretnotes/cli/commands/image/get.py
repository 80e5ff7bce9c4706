"""Get command for the image service."""

from typing import Optional

import typer
from rich.console import Console

from secretnotes.cli.utils import client
from secretnotes.exceptions import SecretNotesError

app = typer.Typer(help="Fetch the note image")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    phrase: str = client.phrase_option(),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the image to this file"
    ),
):
    """Fetch the image; print a data URL unless --output is given."""
    key = client.get_key(phrase)
    api = client.get_api_instance()
    try:
        if output:
            content_type, size = api.images.save(key, output)
            console.print(
                f"Wrote {size} bytes ({content_type}) to [bold]{output}[/bold]"
            )
        else:
            image = api.images.fetch(key)
            typer.echo(image.data_url)
    except (SecretNotesError, OSError) as e:
        client.fail(e)
    finally:
        api.close()
