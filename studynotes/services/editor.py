"""
Editor Session.

Tracks the note being edited and turns edits into persist calls. Edits
mutate the shared note object in place and schedule a debounced persist;
an explicit save bypasses the debounce.

Usage:
    session = EditorSession(repository, autosave_delay=0.7)
    await session.open()
    session.edit("content", "Week 1: limits")
    await session.save()
    await session.close()
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from studynotes.core.exceptions import NoActiveNoteError, ValidationError
from studynotes.core.logging import get_logger, log_with_source
from studynotes.repositories.note import NoteRepository
from studynotes.schemas.note import UNTITLED, Note
from studynotes.services.events import ACTIVE_NOTE_CHANGED

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset({"title", "content"})

Confirm = Callable[[Note], bool | Awaitable[bool]]


class AutosaveTask:
    """
    Single-flight deferred call.

    schedule() (re)starts the timer; only the last scheduled target is
    passed to the action when the timer expires. Once the action has
    started it is no longer cancellable: cancel() only stops a waiting
    timer, never an in-flight save.
    """

    def __init__(self, delay: float, action: Callable[[Any], Awaitable[None]]) -> None:
        self.delay = delay
        self._action = action
        self._timer: asyncio.Task | None = None
        self._target: Any = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def target(self) -> Any:
        return self._target if self.pending else None

    def schedule(self, target: Any) -> None:
        self.cancel()
        self._target = target
        self._timer = asyncio.get_running_loop().create_task(self._wait_then_run(target))

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        self._target = None

    def fire_now(self) -> None:
        """Run a waiting action immediately, in the background."""
        if not self.pending:
            return
        target = self._target
        self.cancel()
        self._start(target)

    async def flush(self) -> None:
        """Run a waiting action now and wait for every started action."""
        self.fire_now()
        if self._inflight:
            await asyncio.gather(*self._inflight)

    async def _wait_then_run(self, target: Any) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        self._target = None
        self._start(target)

    def _start(self, target: Any) -> None:
        task = asyncio.get_running_loop().create_task(self._run(target))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, target: Any) -> None:
        try:
            await self._action(target)
        except Exception as e:
            log_with_source(logger, "editor", "error", "Autosave failed", error=str(e))


class EditorSession:
    """
    The active note plus the intents a user can issue against it.

    The active note is a reference into repository.notes, never a copy.
    """

    def __init__(
        self,
        repository: NoteRepository,
        autosave_delay: float = 0.7,
        untitled_title: str = UNTITLED,
    ) -> None:
        self.repository = repository
        self.events = repository.events
        self.untitled_title = untitled_title
        self.active_note: Note | None = None
        self._autosave = AutosaveTask(autosave_delay, self.repository.persist)

    @property
    def autosave_pending(self) -> bool:
        return self._autosave.pending

    async def open(self) -> list[Note]:
        """Load notes and make the first one active."""
        notes = await self.repository.load()
        if notes:
            self.select(notes[0].id)
        return notes

    async def new_note(self) -> Note:
        """Create a note at the head of the list and make it active."""
        self._autosave.fire_now()
        note = self.repository.create()
        self._set_active(note)
        if self.repository.remote_enabled:
            await self.repository.persist(note)
        return note

    def select(self, note_id: str) -> Note | None:
        """
        Make the note with the given id active.

        Returns:
            The selected note, or None (and no change) for an unknown id
        """
        note = self.repository.get(note_id)
        if note is None:
            return None
        if self._autosave.pending and self._autosave.target is not note:
            self._autosave.fire_now()
        self._set_active(note)
        return note

    def edit(self, field: str, value: str) -> bool:
        """
        Change a field of the active note and schedule a debounced save.

        Returns:
            False when there is no active note, True otherwise

        Raises:
            ValidationError: If the field is not editable
        """
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Field {field!r} is not editable", details={"field": field})
        note = self.active_note
        if note is None:
            return False

        setattr(note, field, value)
        self._autosave.schedule(note)
        return True

    async def save(self) -> Note:
        """
        Persist the active note immediately, dropping any pending autosave.

        Raises:
            NoActiveNoteError: If no note is active
        """
        note = self.active_note
        if note is None:
            raise NoActiveNoteError()

        self._autosave.cancel()
        note.title = note.title.strip() or self.untitled_title
        await self.repository.persist(note)
        log_with_source(logger, "editor", "info", "Note saved", note_id=note.id, mode=self.repository.mode)
        return note

    async def delete(self, confirm: Confirm) -> bool:
        """
        Delete the active note after the caller confirms.

        Args:
            confirm: Called with the note; may be sync or async

        Returns:
            True when the note was deleted, False when confirmation was refused

        Raises:
            NoActiveNoteError: If no note is active
        """
        note = self.active_note
        if note is None:
            raise NoActiveNoteError("Select a note to delete")

        ok = confirm(note)
        if inspect.isawaitable(ok):
            ok = await ok
        if not ok:
            return False

        self._autosave.cancel()
        self._set_active(None)
        await self.repository.delete(note.id)
        log_with_source(logger, "editor", "info", "Note deleted", note_id=note.id)
        return True

    async def close(self) -> None:
        """Flush any pending autosave."""
        await self._autosave.flush()

    def _set_active(self, note: Note | None) -> None:
        self.active_note = note
        self.events.emit(ACTIVE_NOTE_CHANGED, note)
