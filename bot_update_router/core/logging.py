"""Structured logging helpers with update and chat metadata."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator, Optional

from pythonjsonlogger.json import JsonFormatter

from bot_update_router.core.config import settings

_update_id: ContextVar[Optional[str]] = ContextVar("update_id", default=None)
_chat_id: ContextVar[Optional[str]] = ContextVar("chat_id", default=None)

LEVEL_NAME = str(getattr(settings, "BOT_ROUTER_LOG_LEVEL", "info")).upper()
LOG_LEVEL = getattr(logging, LEVEL_NAME, logging.INFO)

PACKAGE_LOGGER_NAME = "bot_update_router"


def _resolve_logs_dir() -> Path:
    """Select a writable logs directory honoring configuration overrides."""

    configured_dir = getattr(settings, "BOT_ROUTER_LOG_DIR", None)
    candidates = []
    if configured_dir:
        candidates.append(Path(configured_dir))

    data_dir = Path(getattr(settings, "DATA_DIR", Path("/data")))
    # Precedence: explicit override → DATA_DIR/logs
    candidates.append(data_dir / "logs")

    for candidate in candidates:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            continue
        return candidate

    raise PermissionError("Unable to create a writable logs directory")


LOG_TO_FILE = bool(getattr(settings, "BOT_ROUTER_LOG_TO_FILE", False))
LOGS_DIR = _resolve_logs_dir() if LOG_TO_FILE else None
LOG_FILE_PATH = LOGS_DIR / "bot_update_router.log" if LOGS_DIR else None
LOG_SCHEMA_VERSION = str(getattr(settings, "BOT_ROUTER_LOG_SCHEMA_VERSION", "1.0.0"))
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5


class VersionedJsonFormatter(JsonFormatter):
    """Inject a schema version into each structured log entry."""

    def __init__(self, *args, schema_version: str, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._schema_version = schema_version

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("schema_version", self._schema_version)


class UpdateContextFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Attach the update and chat identifiers to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.update_id = get_update_id() or "-"
        record.chat_id = get_chat_id() or "-"
        return True


def bind_update_id(value: Optional[str]) -> Token[Optional[str]]:
    """Bind ``value`` to the update id context variable."""

    return _update_id.set(value)


def reset_update_id(token: Token[Optional[str]]) -> None:
    """Reset the update id context variable to a previous state."""

    _update_id.reset(token)


def get_update_id() -> Optional[str]:
    """Return the current update id if bound."""

    return _update_id.get()


def bind_chat_id(value: Optional[str]) -> Token[Optional[str]]:
    """Bind the chat identifier for downstream logging."""

    return _chat_id.set(value)


def reset_chat_id(token: Token[Optional[str]]) -> None:
    """Reset the chat identifier context variable."""

    _chat_id.reset(token)


def get_chat_id() -> Optional[str]:
    """Return the current chat identifier if bound."""

    return _chat_id.get()


@contextmanager
def update_context(update_id: Optional[str], chat_id: Optional[str] = None) -> Iterator[None]:
    """Context manager that temporarily binds update and chat identifiers."""

    update_token = bind_update_id(update_id)
    chat_token = bind_chat_id(chat_id)
    try:
        yield
    finally:
        reset_chat_id(chat_token)
        reset_update_id(update_token)


def _ensure_handlers(logger: logging.Logger) -> None:
    if logger.handlers:
        return

    formatter = VersionedJsonFormatter(
        " ".join(
            [
                "%(asctime)s",
                "%(levelname)s",
                "%(name)s",
                "%(message)s",
                "%(update_id)s",
                "%(chat_id)s",
            ]
        ),
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
            "update_id": "update",
            "chat_id": "chat",
        },
        datefmt="%Y-%m-%d %H:%M:%S",
        json_ensure_ascii=False,
        schema_version=LOG_SCHEMA_VERSION,
    )
    context_filter = UpdateContextFilter()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.addFilter(context_filter)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if LOG_FILE_PATH is not None:
        file_handler = RotatingFileHandler(
            LOG_FILE_PATH, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        )
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Return a logger that shares the package's structured handlers."""

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(LOG_LEVEL)
    _ensure_handlers(package_logger)

    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)
    return logger


__all__ = [
    "UpdateContextFilter",
    "VersionedJsonFormatter",
    "bind_update_id",
    "bind_chat_id",
    "reset_update_id",
    "reset_chat_id",
    "get_update_id",
    "get_chat_id",
    "update_context",
    "get_logger",
    "LOG_FILE_PATH",
    "LOG_SCHEMA_VERSION",
]
