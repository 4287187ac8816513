"""
Configuration Management.

Settings live in config/settings/*.yaml and secrets in config/.env (or the
process environment). Nothing is hardcoded in code.

Secrets:
    STUDYNOTES_AUTH_TOKEN - fallback bearer credential for the notes API

Settings:
    application.yaml - App identity, notes API location, timeouts
    notes.yaml       - Local storage slots, editor behavior, search display
    logging.yaml     - Logging configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from studynotes.core.config_schema import (
    ApplicationSchema,
    LoggingSchema,
    NotesSchema,
)

PROJECT_MARKER = ".project_root"


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) to the directory holding .project_root."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / PROJECT_MARKER).exists():
            return candidate
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Return the project root or exit with a readable message.

    Entry points call this before any configuration is loaded.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """
    Parse one file from config/settings/.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML
    """
    config_path = find_project_root() / "config" / "settings" / filename
    if not config_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {filename}: {e}") from e
    return data or {}


class Settings(BaseSettings):
    """Secrets from config/.env or STUDYNOTES_* environment variables."""

    auth_token: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="STUDYNOTES_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type[BaseModel], filename: str) -> Any:
    raw = load_yaml_config(filename)
    try:
        return schema_cls.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


class AppConfig:
    """
    Typed view over the YAML settings.

    All files are validated when the object is built, so a typo in a key
    fails at startup rather than on first use.
    """

    def __init__(self) -> None:
        self._application: ApplicationSchema = _load_validated(ApplicationSchema, "application.yaml")
        self._notes: NotesSchema = _load_validated(NotesSchema, "notes.yaml")
        self._logging: LoggingSchema = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        return self._application

    @property
    def notes(self) -> NotesSchema:
        """Note storage, editor and search settings."""
        return self._notes

    @property
    def logging(self) -> LoggingSchema:
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Cached secrets. The .env path is resolved from the project root."""
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_api_base_url() -> tuple[str, float]:
    """
    Notes API location from application.yaml.

    Returns:
        Tuple of (base_url, timeout_seconds).
    """
    app = get_app_config().application
    return app.api.base_url.rstrip("/"), float(app.timeouts.external_api)


def get_data_dir() -> Path:
    """
    Local storage directory from notes.yaml.

    Relative paths are resolved against the project root.
    """
    data_dir = Path(get_app_config().notes.storage.data_dir).expanduser()
    if data_dir.is_absolute():
        return data_dir
    return find_project_root() / data_dir
