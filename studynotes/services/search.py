"""
Note Search.

Case-insensitive substring search over title and content. The compact
list filter and the expanded results panel share the same predicate so
the two views always agree.
"""

import re
from collections.abc import Callable, Sequence

from studynotes.schemas.note import Note
from studynotes.services.events import SEARCH_RESULTS_CHANGED, NoteEvents

NO_CONTENT = "— no content —"

_WHITESPACE = re.compile(r"\s+")


def normalize_term(term: str | None) -> str:
    return (term or "").strip().lower()


def matches(note: Note, query: str) -> bool:
    """Whether a normalized query occurs in the note's title or content."""
    return query in (note.title or "").lower() or query in (note.content or "").lower()


def search(term: str | None, notes: Sequence[Note]) -> list[Note]:
    """
    Filter notes by a search term.

    Args:
        term: Raw user input; trimmed and lowercased before matching
        notes: Source list, most recent first

    Returns:
        All notes when the term is empty, otherwise the matching notes in
        source order
    """
    query = normalize_term(term)
    if not query:
        return list(notes)
    return [n for n in notes if matches(n, query)]


def snippet(note: Note, length: int = 120) -> str:
    """Single-line preview of a note's content."""
    text = _WHITESPACE.sub(" ", note.content or "").strip()[:length]
    return text or NO_CONTENT


class SearchIndexer:
    """
    Derives filtered views from a live note list.

    Args:
        source: Callable returning the current in-memory note list
        events: Notification registry for panel results
        snippet_length: Preview length for panel results
    """

    def __init__(
        self,
        source: Callable[[], Sequence[Note]],
        events: NoteEvents | None = None,
        snippet_length: int = 120,
    ) -> None:
        self._source = source
        self._events = events
        self.snippet_length = snippet_length

    def filter_compact(self, term: str | None) -> list[Note]:
        """Sidebar filter: same predicate, no notification."""
        return search(term, self._source())

    def search_panel(self, term: str | None) -> list[Note]:
        """Expanded panel search; announces the new results."""
        results = search(term, self._source())
        if self._events is not None:
            self._events.emit(SEARCH_RESULTS_CHANGED, results)
        return results

    def preview(self, note: Note) -> str:
        return snippet(note, self.snippet_length)
