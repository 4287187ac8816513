"""
Credential Store.

Holds the bearer credential for the notes API in its own session slot.
The note store never writes this slot; only login/logout do.
"""

from studynotes.core.exceptions import MalformedLocalData, ValidationError
from studynotes.core.logging import get_logger, log_with_source
from studynotes.repositories.slots import SlotStore

logger = get_logger(__name__)


class CredentialStore:
    """
    Reads and writes the session credential slot.

    A fallback token (from secrets) is used only when the slot is empty.
    """

    def __init__(self, slots: SlotStore, slot: str = "authToken", fallback: str | None = None) -> None:
        self._slots = slots
        self._slot = slot
        self._fallback = fallback

    def get_token(self) -> str | None:
        """Return the stored credential, or None when there is none."""
        try:
            value = self._slots.read(self._slot)
        except MalformedLocalData as e:
            log_with_source(logger, "local", "warning", "Credential slot unreadable", error=str(e))
            value = None

        if isinstance(value, str) and value.strip():
            return value.strip()
        if self._fallback and self._fallback.strip():
            return self._fallback.strip()
        return None

    def has_token(self) -> bool:
        return self.get_token() is not None

    def set_token(self, token: str) -> None:
        token = token.strip()
        if not token:
            raise ValidationError("Credential must not be empty")
        self._slots.write(self._slot, token)
        log_with_source(logger, "local", "info", "Credential stored")

    def clear(self) -> None:
        self._slots.clear(self._slot)
        log_with_source(logger, "local", "info", "Credential cleared")
