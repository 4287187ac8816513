"""
Note Events.

In-process notifications for rendering collaborators. The note store
emits one of four events after state changes:

    notes_changed           - the in-memory note list was replaced or mutated
    search_results_changed  - the expanded search panel has new results
    active_note_changed     - the editor's active note changed
    mode_changed            - the store degraded from remote to local

Listeners are plain callables receiving the event payload. A failing
listener is logged and never interrupts the operation that emitted.

Usage:
    events = NoteEvents()
    events.subscribe(NOTES_CHANGED, lambda notes: render(notes))
"""

from collections import defaultdict
from collections.abc import Callable
from typing import Any

from studynotes.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

NOTES_CHANGED = "notes_changed"
SEARCH_RESULTS_CHANGED = "search_results_changed"
ACTIVE_NOTE_CHANGED = "active_note_changed"
MODE_CHANGED = "mode_changed"

EVENT_NAMES = frozenset({
    NOTES_CHANGED,
    SEARCH_RESULTS_CHANGED,
    ACTIVE_NOTE_CHANGED,
    MODE_CHANGED,
})

Listener = Callable[[Any], None]


class NoteEvents:
    """Registry of listeners per event name."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A callable that removes the listener again
        """
        if event not in EVENT_NAMES:
            raise ValueError(f"Unknown note event: {event}")
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(payload)
            except Exception as e:
                log_with_source(
                    logger,
                    "notes",
                    "error",
                    "Note event listener failed",
                    note_event=event,
                    error=str(e),
                )
