"""
CLI Commands.

Organized by domain/feature area.
"""

from studynotes.cli.commands.auth import app as auth_app
from studynotes.cli.commands.notes import app as notes_app

__all__ = [
    "auth_app",
    "notes_app",
]
