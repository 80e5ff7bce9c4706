"""Note commands for the secretnotes CLI."""

import typer

from . import edit, show, write

app = typer.Typer(help="Read and write the note behind a passphrase")
app.add_typer(show.app, name="show")
app.add_typer(write.app, name="write")
app.add_typer(edit.app, name="edit")
