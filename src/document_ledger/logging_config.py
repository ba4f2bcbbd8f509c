"""Structured logging for the engine, built on structlog.

The engine's modules only ever call get_logger(); how events are rendered is
decided once by configure_logging(), usually through
Container(configure_logs=True):

- ``console`` format: coloured key/value lines for development
- ``json`` format: one JSON object per event, stamped with the app name and
  environment (the default in production)
- ``log_file``: events are also written to that file through stdlib logging

Per-document context (``document_id``) is bound with LogContext by the
transaction generators.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from document_ledger.config import Settings, get_settings

_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _level_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["level"] = "WARNING" if method_name == "warn" else method_name.upper()
    return event_dict


class _EngineContext:
    """Stamps every JSON event with the app name and environment."""

    def __init__(self, settings: Settings) -> None:
        self._app = settings.app_name
        self._environment = settings.environment.value

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", self._app)
        event_dict.setdefault("environment", self._environment)
        return event_dict


def build_processors(settings: Settings) -> list[Processor]:
    """Get the processor chain for the settings' log format."""
    if settings.log_format == "json":
        return [
            _level_name,
            _EngineContext(settings),
            *_shared_processors(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.stdlib.add_log_level,
        *_shared_processors(),
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def configure_logging(settings: Settings | None = None) -> logging.Handler | None:
    """Configure structlog and stdlib logging from settings.

    Safe to call more than once: the file handler for a given path is only
    attached once. Loggers are cached on first use except in the testing
    environment, where tests swap the configuration.

    Returns:
        The file handler writing to settings.log_file, or None
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level.value)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=not settings.is_testing,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(level)

    handler = None
    if settings.log_file:
        handler = _attach_file_handler(Path(settings.log_file), level)
    return handler


def _attach_file_handler(log_file: Path, level: int) -> logging.Handler:
    root = logging.getLogger()
    target = str(log_file.resolve())
    for existing in root.handlers:
        if isinstance(existing, logging.FileHandler) and existing.baseFilename == target:
            existing.setLevel(level)
            return existing

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    root.addHandler(handler)
    return handler


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module.

    Example:
        logger = get_logger(__name__)
        logger.info("transaction_generated", document_id=str(doc.id), entries=3)
    """
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind log context for the duration of a with block.

    Example:
        with LogContext(document_id=str(document.id)):
            calculator.recompute()
    """

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self.kwargs)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self.kwargs.keys())
