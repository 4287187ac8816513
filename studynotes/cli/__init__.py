"""
CLI Module.

Terminal front end for the note store, built with Typer and Rich.

Architecture:
- CLI is a thin presentation layer
- Persistence and fallback logic live in studynotes.repositories
- Editing goes through an EditorSession, as in the interactive shell

Usage:
    studynotes --help
    studynotes notes list
    studynotes notes search week1
    studynotes shell  # Interactive mode
"""
