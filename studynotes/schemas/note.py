"""
Note Schemas.

Pydantic model for the durable note record shared by the notes API and
the local slot. Wire names follow the API (``userId``); Python code uses
``user_id``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

UNTITLED = "Untitled"


class Note(BaseModel):
    """
    A single note.

    Fields unknown to this model (timestamps and the like returned by the
    server) are kept so an update carries the full record back.

    The persisted marker is private: it is never part of the serialized
    payload and only decides between create and update on the next persist.
    """

    id: str = Field(description="Note identifier (client timestamp or server-assigned)")
    title: str = Field(default=UNTITLED, description="Note title")
    content: str = Field(default="", description="Free text content")
    user_id: str | None = Field(default=None, alias="userId", description="Owner reference set by the server")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    _persisted: bool = PrivateAttr(default=False)

    @model_validator(mode="before")
    @classmethod
    def _drop_private_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not str(k).startswith("_")}
        return data

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNTITLED
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _default_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def persisted(self) -> bool:
        """Whether the remote store has confirmed this note."""
        return self._persisted

    def mark_persisted(self, persisted: bool = True) -> "Note":
        self._persisted = persisted
        return self

    @property
    def display_title(self) -> str:
        return self.title.strip() or UNTITLED

    def to_payload(self, include_id: bool = True) -> dict[str, Any]:
        """Serialize for the API or the local slot, using wire field names."""
        exclude = None if include_id else {"id"}
        return self.model_dump(by_alias=True, exclude=exclude)

    def merge(self, data: dict[str, Any]) -> None:
        """
        Copy fields from a server response into this object in place.

        The identity of the object is kept so every holder of a reference
        (the editor's active note, for one) sees the server's values,
        including a newly assigned id.
        """
        merged = Note.model_validate({**self.to_payload(), **data})
        for name in Note.model_fields:
            setattr(self, name, getattr(merged, name))
        if merged.model_extra:
            for key, value in merged.model_extra.items():
                setattr(self, key, value)
