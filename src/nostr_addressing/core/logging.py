# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Structured logging configuration for nostr-addressing.

Every verification runs inside a :func:`correlation_context` that carries
a correlation id and the domain being checked, so relay chatter from
concurrent queries can be tied back to one page visit.

Provides:
- JSON formatter for log files and non-terminal output
- Terminal formatter with level colours
- Correlation context (id + domain)
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_check_domain: ContextVar[str | None] = ContextVar("check_domain", default=None)

# Third-party loggers that are noisy at DEBUG
QUIET_LOGGERS = ("aiohttp", "asyncio")


def get_correlation_id() -> str | None:
    """Get the current correlation ID, or None outside a verification."""
    return _correlation_id.get()


def get_check_domain() -> str | None:
    """Get the domain under verification, or None."""
    return _check_domain.get()


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def correlation_context(
    correlation_id: str | None = None,
    domain: str | None = None,
) -> Generator[str, None, None]:
    """Scope log lines to one verification.

    Args:
        correlation_id: Optional correlation ID to use. If None, generates a new one.
        domain: Domain being verified, added to every log line in scope

    Yields:
        The correlation ID being used.

    Example:
        with correlation_context(domain=observation.domain) as cid:
            evaluation = await verifier.verify(observation)
    """
    cid = correlation_id or generate_correlation_id()
    cid_token = _correlation_id.set(cid)
    domain_token = _check_domain.set(domain)
    try:
        yield cid
    finally:
        _check_domain.reset(domain_token)
        _correlation_id.reset(cid_token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Adds the correlation ID and domain when in scope, the source location
    for warnings and above, and the ``extra_data`` mapping passed through
    ``logger.x(..., extra={"extra_data": {...}})``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id
        domain = get_check_domain()
        if domain:
            log_data["domain"] = domain

        if record.levelno >= logging.WARNING:
            log_data["location"] = f"{record.module}:{record.funcName}:{record.lineno}"

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = getattr(record, "extra_data", None)
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Terminal formatter: ``time LEVEL logger: [cid domain] message``."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    DIM = "\033[90m"

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def _scope_prefix(self) -> str:
        correlation_id = get_correlation_id()
        if not correlation_id:
            return ""
        parts = [correlation_id[:8]]
        domain = get_check_domain()
        if domain:
            parts.append(domain)
        prefix = f"[{' '.join(parts)}]"
        if self.use_colors:
            prefix = f"{self.DIM}{prefix}{self.RESET}"
        return prefix + " "

    def format(self, record: logging.LogRecord) -> str:
        # Copy so other handlers see the untouched record
        record = logging.makeLogRecord(record.__dict__)
        record.msg = self._scope_prefix() + str(record.msg)
        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelname, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _resolve_format(json_format: bool | None, setting: str) -> bool:
    if json_format is not None:
        return json_format
    setting = setting.lower()
    if setting in ("json", "text"):
        return setting == "json"
    # Auto: JSON unless a person is watching
    return not sys.stderr.isatty()


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure root logging for the CLI.

    Args:
        level: Log level; defaults to NOSTR_ADDRESSING_LOG_LEVEL
        json_format: Use JSON on stderr; defaults to NOSTR_ADDRESSING_LOG_FORMAT,
            auto-detected when that is unset
        log_file: Optional file receiving JSON lines; defaults to
            NOSTR_ADDRESSING_LOG_FILE
    """
    from .config import get_config

    config = get_config()

    level = config.log_level if level is None else level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    use_json = _resolve_format(json_format, config.log_format)
    log_file = config.log_file if log_file is None else log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(JSONFormatter() if use_json else StandardFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
