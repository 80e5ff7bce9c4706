"""Command line interface for secretnotes."""
