"""Tolerant field decoders for Radio Browser JSON.

Mirrors are run independently and do not agree on serialization:
booleans arrive as 0/1 or true/false, timestamps as numbers or strings,
and optional keys may be missing entirely. Each helper here decodes one
field and falls back to None instead of failing the whole record.

Only the require_* helpers raise, and only for fields a record cannot
exist without.

Fallbacks are logged in the decode category of the logger installed
with decode_logging(); outside of it the default LogConfiguration
applies, which leaves that category off.
"""

import math
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, TypeVar

from radiobrowser.core.errors import DecodingError
from radiobrowser.utilities.logging import CategoryLogger, LogCategory

DECODE = LogCategory.DECODE

T = TypeVar("T")

_default_log = CategoryLogger()
_active_log: ContextVar[CategoryLogger | None] = ContextVar("decode_log", default=None)


@contextmanager
def decode_logging(log: CategoryLogger) -> Iterator[None]:
    """Route decode fallbacks to log for the duration of the block."""
    token = _active_log.set(log)
    try:
        yield
    finally:
        _active_log.reset(token)


def _debug(msg: str, *args) -> None:
    (_active_log.get() or _default_log).debug(DECODE, msg, *args)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number on the wire
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def require_str(data: dict, key: str) -> str:
    """Decode a required string field or fail the record."""
    if key not in data:
        raise DecodingError(f"Missing required field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise DecodingError(f"Field '{key}' expected string, got {type(value).__name__}")
    return value


def require_int(data: dict, key: str) -> int:
    """Decode a required integer field or fail the record."""
    if key not in data:
        raise DecodingError(f"Missing required field '{key}'")
    value = data[key]
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise DecodingError(f"Field '{key}' expected integer, got {type(value).__name__}")
    return value


def optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    _debug("[DECODE] Ignoring non-string value for '%s': %r", key, value)
    return None


def optional_int(data: dict, key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if _is_number(value):
        if isinstance(value, int):
            return value
        if value.is_integer():
            return int(value)
    _debug("[DECODE] Ignoring non-integer value for '%s': %r", key, value)
    return None


def optional_float(data: dict, key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if _is_number(value):
        return float(value)
    _debug("[DECODE] Ignoring non-numeric value for '%s': %r", key, value)
    return None


def decode_tristate(data: dict, key: str) -> bool | None:
    """Decode a boolean that may be absent, 0/1, or true/false.

    Absent is not False. Attempts, in order: integer (nonzero is True),
    native boolean. Anything else decodes as absent.
    """
    if key not in data:
        return None
    value = data[key]
    if _is_number(value):
        if isinstance(value, int):
            return value != 0
        if value.is_integer():
            return value != 0
    if isinstance(value, bool):
        return value
    _debug("[DECODE] Unreadable boolean for '%s': %r", key, value)
    return None


def decode_timestamp(data: dict, key: str) -> datetime | None:
    """Decode epoch seconds given as a number or a numeric string.

    Returns a UTC-aware datetime, or None when the key is absent or the
    value cannot be read as epoch seconds.
    """
    if key not in data:
        return None
    value = data[key]

    seconds: float | None = None
    if _is_number(value):
        seconds = float(value)
    elif isinstance(value, str):
        try:
            seconds = float(value.strip())
        except ValueError:
            seconds = None

    if seconds is None or not math.isfinite(seconds):
        if value is not None:
            _debug("[DECODE] Unreadable timestamp for '%s': %r", key, value)
        return None

    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        _debug("[DECODE] Timestamp out of range for '%s': %r", key, value)
        return None


def require_object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise DecodingError(f"Expected JSON object for {what}, got {type(data).__name__}")
    return data


def decode_list(item_decoder: Callable[[dict], T]) -> Callable[[Any], list[T]]:
    """Wrap a per-item decoder so it accepts a JSON array payload."""

    def decode(payload: Any) -> list[T]:
        if not isinstance(payload, list):
            raise DecodingError(f"Expected JSON array, got {type(payload).__name__}")
        return [item_decoder(item) for item in payload]

    return decode
