"""
Slot Store.

Profile-scoped key-value storage. Each slot is one JSON file under the
data directory, replaced atomically on every write so a reader never
sees a half-written value.

Usage:
    slots = SlotStore(get_data_dir())
    slots.write("notes", [...])
    slots.read("notes")            # -> decoded value, or None when absent
"""

import json
import os
import re
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from studynotes.core.exceptions import MalformedLocalData, ValidationError
from studynotes.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

_SLOT_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class SlotStore:
    """JSON file per slot key, written with temp file + os.replace."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        if not _SLOT_KEY.match(key) or key in (".", ".."):
            raise ValidationError(f"Invalid slot key: {key!r}")
        return self.root / f"{key}.json"

    def read(self, key: str) -> Any:
        """
        Read and decode a slot.

        Returns:
            The decoded JSON value, or None when the slot does not exist

        Raises:
            MalformedLocalData: If the slot exists but cannot be decoded
        """
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise MalformedLocalData(f"Slot {key!r} is not UTF-8 text") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedLocalData(f"Slot {key!r} holds invalid JSON: {e}") from e

    def write(self, key: str, value: Any) -> None:
        """Encode and write a slot in a single atomic replace."""
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        text = json.dumps(value, ensure_ascii=False)

        tmp = NamedTemporaryFile("w", encoding="utf-8", dir=str(path.parent), delete=False)
        try:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp.close()
            os.replace(tmp.name, path)
        finally:
            tmp.close()
            if os.path.exists(tmp.name):
                os.unlink(tmp.name)

        log_with_source(logger, "local", "debug", "Slot written", slot=key, bytes=len(text))

    def clear(self, key: str) -> None:
        """Remove a slot. Missing slots are ignored."""
        self.path_for(key).unlink(missing_ok=True)
