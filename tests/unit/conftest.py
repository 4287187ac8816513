"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked or faked.
Unit tests should be fast and isolated, never touching the network or
the project's own data directory.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from studynotes.services.events import NoteEvents


# =============================================================================
# Repository Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_repository() -> MagicMock:
    """
    Mock NoteRepository for editor tests.

    persist/delete/load are AsyncMocks; get() looks notes up in .notes.

    Usage:
        def test_editor(mock_repository):
            mock_repository.notes = [note]
            session = EditorSession(mock_repository)
    """
    repository = MagicMock()
    repository.notes = []
    repository.events = NoteEvents()
    repository.remote_enabled = False
    repository.mode = "local"
    repository.persist = AsyncMock()
    repository.delete = AsyncMock()
    repository.load = AsyncMock(side_effect=lambda: repository.notes)
    repository.get = MagicMock(
        side_effect=lambda note_id: next((n for n in repository.notes if n.id == str(note_id)), None)
    )
    return repository


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.warning.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
