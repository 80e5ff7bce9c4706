"""Services exposed by SecretNotesService."""
