"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    NotesSchema        → notes.yaml
    LoggingSchema      → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApiSchema(_StrictBase):
    base_url: str
    notes_path: str
    health_path: str


class TimeoutsSchema(_StrictBase):
    external_api: float


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    api: ApiSchema
    timeouts: TimeoutsSchema


# =============================================================================
# notes.yaml
# =============================================================================


class StorageSchema(_StrictBase):
    data_dir: str
    notes_slot: str
    credential_slot: str


class EditorSchema(_StrictBase):
    autosave_delay_ms: int = Field(ge=0)
    new_note_title: str
    untitled_title: str


class SearchSchema(_StrictBase):
    snippet_length: int = Field(gt=0)


class NotesSchema(_StrictBase):
    storage: StorageSchema
    editor: EditorSchema
    search: SearchSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
