"""Classification of single protocol lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from .errors import CommandError, ConnectionClosedError, DecodeError, FailureResponse

# Errors on the read side that mean the peer went away.
CLOSED_ERRORS = (BrokenPipeError, ConnectionResetError, ConnectionAbortedError)


@dataclass(frozen=True)
class Terminator:
    """An ``OK`` or ``list_OK`` line."""


@dataclass(frozen=True)
class Value:
    """Any other line, newline stripped."""

    text: str


Line = Terminator | Value

TERMINATOR = Terminator()


def read_line(stream: BinaryIO) -> Line:
    """Read one line from ``stream`` and classify it.

    Raises ConnectionClosedError on EOF or a broken connection, and
    CommandError when the server answers with an ACK line.
    """
    try:
        raw = stream.readline()
    except CLOSED_ERRORS as e:
        raise ConnectionClosedError() from e

    if not raw:
        raise ConnectionClosedError()

    line = raw.decode("utf-8", errors="replace")

    if line.startswith("OK") or line.startswith("list_OK"):
        return TERMINATOR
    if line.startswith("ACK"):
        raise CommandError(FailureResponse.from_line(line))

    if line.endswith("\n"):
        line = line[:-1]
    return Value(line)


def split_line(line: str) -> tuple[str, str]:
    """Split ``key: value`` into its two halves."""
    key, sep, value = line.partition(": ")
    if not sep:
        raise DecodeError(f"Invalid value line, expected 'key: value' but got '{line}'")
    return key, value
