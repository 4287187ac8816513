"""
Unit Tests for Configuration Management.

Black box tests against the public interface of config.py.
Tests run against the real project files (YAML configs).
Failure scenarios use tmp_path to create controlled filesystems.
"""

import shutil
from pathlib import Path

import pytest

from studynotes.core.config import (
    AppConfig,
    Settings,
    find_project_root,
    get_api_base_url,
    get_app_config,
    get_data_dir,
    get_settings,
    load_yaml_config,
    validate_project_root,
)
from studynotes.core.config_schema import ApplicationSchema, LoggingSchema, NotesSchema


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Clear lru_cache between tests so each test gets a fresh load."""
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


@pytest.fixture
def project_copy(tmp_path, monkeypatch) -> Path:
    """A copy of the project's config tree under tmp_path, made current."""
    real_root = find_project_root()
    (tmp_path / ".project_root").touch()
    shutil.copytree(real_root / "config" / "settings", tmp_path / "config" / "settings")
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# find_project_root
# =============================================================================


class TestFindProjectRoot:
    """Tests for .project_root marker discovery."""

    def test_finds_root_from_project_directory(self):
        root = find_project_root()
        assert (root / ".project_root").exists()
        assert (root / "config" / "settings").is_dir()

    def test_finds_root_from_subdirectory(self, project_copy, monkeypatch):
        nested = project_copy / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert find_project_root() == project_copy

    def test_raises_when_no_marker_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()


class TestValidateProjectRoot:
    """Tests for the SystemExit wrapper around find_project_root."""

    def test_returns_path_when_marker_exists(self):
        assert (validate_project_root() / ".project_root").exists()

    def test_exits_when_marker_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            validate_project_root()


# =============================================================================
# load_yaml_config
# =============================================================================


class TestLoadYamlConfig:
    """Tests for YAML file loading from config/settings/."""

    def test_loads_all_config_files(self):
        for filename in ["application.yaml", "notes.yaml", "logging.yaml"]:
            data = load_yaml_config(filename)
            assert isinstance(data, dict), f"{filename} did not return a dict"
            assert len(data) > 0, f"{filename} returned empty dict"

    def test_raises_for_nonexistent_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_returns_empty_dict_for_empty_yaml(self, project_copy):
        (project_copy / "config" / "settings" / "empty.yaml").write_text("")
        assert load_yaml_config("empty.yaml") == {}

    def test_invalid_yaml_names_the_file(self, project_copy):
        (project_copy / "config" / "settings" / "broken.yaml").write_text("key: [unclosed\n")
        with pytest.raises(ValueError, match="broken.yaml"):
            load_yaml_config("broken.yaml")

    def test_search_starts_at_given_directory(self, project_copy, tmp_path, monkeypatch):
        nested = project_copy / "deep"
        nested.mkdir()
        monkeypatch.chdir(tmp_path.parent)
        assert find_project_root(nested) == project_copy


# =============================================================================
# Settings and AppConfig
# =============================================================================


class TestSettings:
    """Tests for secret loading."""

    def test_returns_settings(self):
        assert isinstance(get_settings(), Settings)

    def test_token_from_environment(self, monkeypatch):
        monkeypatch.setenv("STUDYNOTES_AUTH_TOKEN", "env-token")
        assert get_settings().auth_token == "env-token"

    def test_token_from_env_file(self, project_copy, monkeypatch):
        monkeypatch.delenv("STUDYNOTES_AUTH_TOKEN", raising=False)
        (project_copy / "config" / ".env").write_text("STUDYNOTES_AUTH_TOKEN=file-token\n")
        assert get_settings().auth_token == "file-token"


class TestAppConfig:
    """Tests for validated YAML configuration loading."""

    def test_sections_are_typed(self):
        config = AppConfig()
        assert isinstance(config.application, ApplicationSchema)
        assert isinstance(config.notes, NotesSchema)
        assert isinstance(config.logging, LoggingSchema)

    def test_editor_defaults(self):
        editor = get_app_config().notes.editor
        assert editor.autosave_delay_ms == 700
        assert editor.new_note_title == "Change Topic Here"
        assert editor.untitled_title == "Untitled"

    def test_storage_slots(self):
        storage = get_app_config().notes.storage
        assert storage.notes_slot == "notes"
        assert storage.credential_slot == "authToken"

    def test_get_app_config_is_cached(self):
        assert get_app_config() is get_app_config()

    def test_unknown_key_rejected(self, project_copy):
        path = project_copy / "config" / "settings" / "notes.yaml"
        path.write_text(path.read_text() + "\nsurprise: true\n")

        with pytest.raises(ValueError, match="notes.yaml"):
            AppConfig()

    def test_negative_delay_rejected(self, project_copy):
        path = project_copy / "config" / "settings" / "notes.yaml"
        path.write_text(path.read_text().replace("autosave_delay_ms: 700", "autosave_delay_ms: -1"))

        with pytest.raises(ValueError, match="notes.yaml"):
            AppConfig()


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Tests for derived configuration values."""

    def test_api_base_url(self):
        base_url, timeout = get_api_base_url()
        assert base_url == "http://localhost:5501"
        assert timeout == 10.0

    def test_relative_data_dir_resolves_against_root(self):
        assert get_data_dir() == find_project_root() / "data"

    def test_absolute_data_dir_kept(self, project_copy, tmp_path):
        target = tmp_path / "elsewhere"
        path = project_copy / "config" / "settings" / "notes.yaml"
        path.write_text(path.read_text().replace("data_dir: data", f"data_dir: {target}"))

        assert get_data_dir() == target
