"""Incremental decoding of ``key: value`` lines into objects."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from .errors import DecodeError
from .lines import split_line

_logger = logging.getLogger("mpdwire.decoding")


@runtime_checkable
class Decodable(Protocol):
    """Anything that can build itself from response lines.

    Implementations must be constructible with no arguments (the empty
    state) and accept one pair at a time. ``consume`` returns whether the
    key meant anything to the type; it raises DecodeError when the value
    is invalid. What to do with unknown keys is up to the implementation.
    """

    def consume(self, key: str, value: str) -> bool: ...


def feed(obj: Decodable, line: str) -> bool:
    """Split ``line`` and pass it to ``obj``. Keys are lowercased."""
    key, value = split_line(line)
    handled = obj.consume(key.lower(), value)
    if not handled:
        _logger.debug(f"{type(obj).__name__} ignored key '{key}'")
    return handled


def parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise DecodeError(f"Invalid integer for '{key}': '{value}'") from e


def parse_unsigned(key: str, value: str) -> int:
    number = parse_int(key, value)
    if number < 0:
        raise DecodeError(f"Negative value for '{key}': '{value}'")
    return number


def parse_float(key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise DecodeError(f"Invalid number for '{key}': '{value}'") from e


def parse_bool(key: str, value: str) -> bool:
    if value == "1":
        return True
    if value == "0":
        return False
    raise DecodeError(f"Invalid boolean for '{key}': '{value}'")


class MpdObject:
    """Mixin giving decodable types a ``feed`` method."""

    def consume(self, key: str, value: str) -> bool:
        raise NotImplementedError

    def feed(self, line: str) -> bool:
        return feed(self, line)
