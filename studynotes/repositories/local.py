"""
Durable Local Store.

Keeps the full note collection in a single slot. Every mutation rewrites
the whole collection in one write; there are no partial updates.

Malformed content in the slot is never an error for callers: it is
logged and read as an empty collection.
"""

from pydantic import ValidationError as PydanticValidationError

from studynotes.core.exceptions import MalformedLocalData
from studynotes.core.logging import get_logger, log_with_source
from studynotes.repositories.slots import SlotStore
from studynotes.schemas.note import Note

logger = get_logger(__name__)


class DurableLocalStore:
    """
    Local note collection backed by one slot.

    Usage:
        store = DurableLocalStore(SlotStore(data_dir))
        notes = store.list_all()
        notes = store.upsert(note)
        notes = store.remove(note.id)
    """

    def __init__(self, slots: SlotStore, slot: str = "notes") -> None:
        self._slots = slots
        self._slot = slot

    def list_all(self) -> list[Note]:
        """
        Read the stored collection.

        Returns:
            Stored notes in stored order; empty when nothing is stored or the
            slot content is malformed
        """
        notes, _ = self._read()
        return notes

    def _read(self) -> tuple[list[Note], int]:
        """Valid notes plus the number of stored records that failed validation."""
        try:
            raw = self._slots.read(self._slot)
        except MalformedLocalData as e:
            log_with_source(logger, "local", "warning", "Malformed note collection, treating as empty", error=str(e))
            return [], 0

        if raw is None:
            return [], 0
        if not isinstance(raw, list):
            log_with_source(
                logger,
                "local",
                "warning",
                "Note collection is not a list, treating as empty",
                found=type(raw).__name__,
            )
            return [], 0

        notes: list[Note] = []
        for index, record in enumerate(raw):
            try:
                notes.append(Note.model_validate(record))
            except PydanticValidationError as e:
                log_with_source(
                    logger,
                    "local",
                    "warning",
                    "Skipping malformed note record",
                    index=index,
                    error=str(e),
                )
        return notes, len(raw) - len(notes)

    def upsert(self, note: Note) -> list[Note]:
        """
        Replace the record with the same id, or append it.

        The passed object itself takes its place in the returned collection.

        Returns:
            The collection as written
        """
        notes, dropped = self._read()
        for index, existing in enumerate(notes):
            if existing.id == note.id:
                notes[index] = note
                break
        else:
            notes.append(note)

        self._warn_dropped(dropped)
        self.replace_all(notes)
        return notes

    def remove(self, note_id: str) -> list[Note]:
        """
        Drop the record with the given id and rewrite the collection.

        Returns:
            The collection as written
        """
        notes, dropped = self._read()
        notes = [n for n in notes if n.id != note_id]
        self._warn_dropped(dropped)
        self.replace_all(notes)
        return notes

    def replace_all(self, notes: list[Note]) -> None:
        """Write the given collection as the full stored collection."""
        self._slots.write(self._slot, [n.to_payload() for n in notes])
        log_with_source(logger, "local", "debug", "Note collection written", count=len(notes))

    @staticmethod
    def _warn_dropped(dropped: int) -> None:
        if dropped:
            log_with_source(
                logger,
                "local",
                "warning",
                "Rewriting note collection without malformed records",
                dropped=dropped,
            )
