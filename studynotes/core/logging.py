"""
Centralized Logging Configuration.

Every module logs through structlog on top of stdlib logging. Settings come
from config/settings/logging.yaml, validated by LoggingSchema; keyword
arguments to setup_logging() override single values.

Structured fields in every JSON log record:
    timestamp   - ISO 8601 timestamp
    level       - debug, info, warning, error, critical
    logger      - Module path (e.g., studynotes.repositories.note)
    event       - Log message
    func_name   - Function that emitted the log
    lineno      - Line number in source file
    source      - Origin context, passed explicitly by the caller

Usage:
    from studynotes.core.logging import get_logger, log_with_source, setup_logging

    setup_logging()                                  # from logging.yaml
    setup_logging(level="DEBUG", format_type="console", enable_console=True)

    logger = get_logger(__name__)
    log_with_source(logger, "remote", "warning", "Remote call failed", status=500)

Log file:
    logs/system.jsonl holds every record; filter on the 'source' field.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from studynotes.core.config import find_project_root, load_yaml_config
from studynotes.core.config_schema import LoggingSchema

VALID_SOURCES = frozenset({
    "cli",
    "shell",
    "notes",
    "remote",
    "local",
    "editor",
    "internal",
    "unknown",
})
"""Known values for the 'source' field. Callers always pass one explicitly."""

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")

_logging_config: LoggingSchema | None = None


def _load_logging_config() -> LoggingSchema:
    """
    Read and validate logging.yaml once per process.

    Raises:
        FileNotFoundError: If logging.yaml does not exist
    """
    global _logging_config
    if _logging_config is None:
        _logging_config = LoggingSchema(**load_yaml_config("logging.yaml"))
    return _logging_config


def _resolve_log_path(configured_path: str) -> Path:
    """Resolve the log file path relative to project root."""
    return find_project_root() / configured_path


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _pick(override: Any, configured: Any) -> Any:
    return configured if override is None else override


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structured logging for the process.

    Args:
        level: Log level name. Overrides logging.yaml.
        format_type: Console output format, 'json' or 'console'. Overrides logging.yaml.
        enable_console: Log to stderr. Overrides logging.yaml.
        enable_file_logging: Log to the rotating JSONL file. Overrides logging.yaml.
    """
    config = _load_logging_config()
    handlers = config.handlers

    processors = _shared_processors()
    json_formatter = _formatter(structlog.processors.JSONRenderer(), processors)
    if _pick(format_type, config.format) == "console":
        console_formatter = _formatter(structlog.dev.ConsoleRenderer(colors=True), processors)
    else:
        console_formatter = json_formatter

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, _pick(level, config.level).upper()))
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    # stdout belongs to the CLI's own output
    if _pick(enable_console, handlers.console.enabled):
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(console_formatter)
        root.addHandler(stream_handler)

    if _pick(enable_file_logging, handlers.file.enabled):
        log_path = _resolve_log_path(handlers.file.path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=handlers.file.max_bytes,
            backupCount=handlers.file.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(json_formatter)
        root.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Structlog logger for a module, typically get_logger(__name__)."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message with an explicit source.

    Args:
        logger: The logger instance
        source: One of VALID_SOURCES
        level: debug, info, warning, error or critical
        message: Log message
        **kwargs: Additional context fields

    Raises:
        AttributeError: If level is not a valid log level
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
