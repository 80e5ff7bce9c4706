"""Image commands for the secretnotes CLI."""

import typer

from . import delete, get, upload

app = typer.Typer(help="Manage the image attached to a note")
app.add_typer(get.app, name="get")
app.add_typer(upload.app, name="upload")
app.add_typer(delete.app, name="delete")
