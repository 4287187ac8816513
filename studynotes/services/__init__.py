"""Services built on the note repository: search, editing, notifications."""
