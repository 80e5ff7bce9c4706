"""Interactive edit command for the note service."""

import typer
from rich.console import Console
from rich.markup import escape

from secretnotes.cli.utils import client
from secretnotes.exceptions import SecretNotesError

app = typer.Typer(help="Type the note line by line; changes are saved automatically")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    phrase: str = client.phrase_option(),
    append: bool = typer.Option(
        False, "--append", help="Keep the current text and add lines after it"
    ),
):
    """Edit the note with debounced autosave. End input with Ctrl-D."""
    client.get_key(phrase)
    api = client.get_api_instance()
    session = api.open_session(
        on_saved=lambda n: console.print("[dim]Saved.[/dim]"),
        on_error=lambda e: console.print(
            f"[bold red]Autosave failed:[/bold red] {escape(str(e))}"
        ),
    )
    try:
        note = session.load(phrase)
        lines = note.message.splitlines() if append and note.message else []
        console.print("Changes are saved automatically. Ctrl-D to finish.")
        while True:
            try:
                lines.append(input())
            except EOFError:
                break
            session.edit("\n".join(lines))
        if session.autosave is not None:
            session.autosave.flush()
            if session.autosave.last_error is not None:
                raise typer.Exit(1)
    except SecretNotesError as e:
        client.fail(e)
    finally:
        session.close()
        api.close()
