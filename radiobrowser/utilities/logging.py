"""Logging for the Radio Browser client.

The library logs through stdlib logging. Messages are grouped into
categories (network, mirrors, decode, api, general), each a child of the
client's base logger, e.g. "radiobrowser.mirrors". A LogConfiguration
decides which categories and levels are emitted; the check happens before
any message formatting.

Applications that want ready-made handlers can call setup_logging() once
at startup. The library itself never installs handlers.

Usage:
    from radiobrowser.utilities.logging import setup_logging
    setup_logging(log_level="DEBUG")

Environment variables (setup_logging only):
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    LOG_FORMAT: "text" or "json" (default: text)
"""

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Track if logging has been configured
_configured = False

ROOT_LOGGER_NAME = "radiobrowser"


class LogCategory(str, Enum):
    NETWORK = "network"
    MIRRORS = "mirrors"
    DECODE = "decode"
    API = "api"
    GENERAL = "general"


DEFAULT_CATEGORIES = frozenset({LogCategory.NETWORK, LogCategory.MIRRORS, LogCategory.API})


@dataclass(frozen=True)
class LogConfiguration:
    """Which client log messages are emitted.

    enabled: categories that may log at all
    min_level: stdlib level below which client messages are dropped
    redact_pii: hide geo coordinates in logged query strings
    emit_curl: log each outgoing request as a cURL command (DEBUG)
    """

    enabled: frozenset[LogCategory] = field(default=DEFAULT_CATEGORIES)
    min_level: int = logging.INFO
    redact_pii: bool = True
    emit_curl: bool = False


class CategoryLogger:
    """Logger handed to client components at construction.

    Wraps a base logging.Logger and gates each message on its category
    and level before the message is formatted. Arguments use the usual
    %-style deferred formatting.
    """

    def __init__(
        self,
        config: LogConfiguration | None = None,
        logger: logging.Logger | None = None,
    ):
        self._config = config or LogConfiguration()
        self._base = logger or logging.getLogger(ROOT_LOGGER_NAME)
        self._children = {category: self._base.getChild(category.value) for category in LogCategory}

    @property
    def config(self) -> LogConfiguration:
        return self._config

    def is_enabled(self, level: int, category: LogCategory) -> bool:
        if category not in self._config.enabled or level < self._config.min_level:
            return False
        return self._children[category].isEnabledFor(level)

    def log(self, level: int, category: LogCategory, msg: str, *args) -> None:
        if self.is_enabled(level, category):
            self._children[category].log(level, msg, *args)

    def debug(self, category: LogCategory, msg: str, *args) -> None:
        self.log(logging.DEBUG, category, msg, *args)

    def info(self, category: LogCategory, msg: str, *args) -> None:
        self.log(logging.INFO, category, msg, *args)

    def warning(self, category: LogCategory, msg: str, *args) -> None:
        self.log(logging.WARNING, category, msg, *args)

    def error(self, category: LogCategory, msg: str, *args) -> None:
        self.log(logging.ERROR, category, msg, *args)

    def redact_query(self, query: str) -> str:
        """Hide query strings that carry listener coordinates."""
        if self._config.redact_pii and ("geo_lat" in query or "geo_long" in query):
            return "[REDACTED]"
        return query

    def truncate_geo(self, value: float | None) -> str:
        if value is None:
            return "None"
        if self._config.redact_pii:
            return f"{value:.2f}"
        return str(value)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Useful for log aggregation systems (ELK, Loki, etc.)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _get_log_level() -> int:
    """Get log level from environment."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _get_formatter(use_json: bool = False) -> logging.Formatter:
    if use_json:
        return JSONFormatter()

    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    log_level: str | None = None,
    log_file: str | Path | None = None,
    use_json: bool | None = None,
) -> None:
    """Attach console (and optionally file) handlers to the client logger.

    Safe to call multiple times (subsequent calls are no-ops).

    Args:
        log_level: Override LOG_LEVEL env var
        log_file: Also write to this rotating log file
        use_json: Override LOG_FORMAT env var (True for JSON output)
    """
    global _configured
    if _configured:
        return

    level = getattr(logging, (log_level or "").upper(), None) or _get_log_level()

    if use_json is None:
        use_json = os.getenv("LOG_FORMAT", "text").lower() == "json"

    formatter = _get_formatter(use_json)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    client_logger = logging.getLogger(ROOT_LOGGER_NAME)
    client_logger.setLevel(level)
    client_logger.handlers.clear()
    client_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        client_logger.addHandler(file_handler)

    # === Quiet Noisy Loggers ===
    for name in ("httpx", "httpcore", "httpcore.connection", "httpcore.http11", "hpack"):
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True

    from radiobrowser.config import VERSION

    client_logger.info("[STARTUP] radiobrowser %s", VERSION)
    client_logger.info("[STARTUP] Log level: %s", logging.getLevelName(level))
    client_logger.info("[STARTUP] Log format: %s", "JSON" if use_json else "text")
