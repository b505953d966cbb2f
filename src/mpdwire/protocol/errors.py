"""Error codes and exception types for the MPD protocol."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric error codes carried in ACK lines."""

    NOT_LIST = 1
    ARG = 2
    PASSWORD = 3
    PERMISSION = 4
    UNKNOWN = 5

    NO_EXIST = 50
    PLAYLIST_MAX = 51
    SYSTEM = 52
    PLAYLIST_LOAD = 53
    UPDATE_ALREADY = 54
    PLAYER_SYNC = 55
    EXIST = 56


_ACK_RE = re.compile(r"^ACK \[(?P<code>\d+)@(?P<index>\d+)\] \{(?P<command>[^}]*)\} ?(?P<message>.*)$")


class MpdError(Exception):
    """Base class for everything raised by mpdwire."""


class ConnectionClosedError(MpdError):
    """The server closed the connection (or the pipe broke)."""

    def __init__(self, message: str = "Connection closed by server"):
        super().__init__(message)


class RetryLimitError(ConnectionClosedError):
    """The connection kept closing after every reconnect attempt."""


class DecodeError(MpdError):
    """Malformed or unexpected data on the wire."""


class ValueExpectedError(MpdError):
    """The server ended a response where a value was required."""


class TransactionConsumedError(MpdError):
    """A transaction was read from after it had already completed."""


@dataclass(frozen=True)
class FailureResponse:
    """A parsed ``ACK [code@index] {command} message`` line."""

    code: ErrorCode
    command_list_index: int
    command: str
    message: str

    @classmethod
    def from_line(cls, line: str) -> FailureResponse:
        match = _ACK_RE.match(line.rstrip("\n"))
        if match is None:
            raise DecodeError(f"Malformed ACK line: '{line.rstrip()}'")

        try:
            code = ErrorCode(int(match["code"]))
        except ValueError as e:
            raise DecodeError(f"Unknown error code in ACK line: {match['code']}") from e

        return cls(
            code=code,
            command_list_index=int(match["index"]),
            command=match["command"],
            message=match["message"],
        )

    def __str__(self) -> str:
        return f"[{self.code.name}@{self.command_list_index}] {{{self.command}}} {self.message}"


class CommandError(MpdError):
    """The server rejected a command with an ACK line."""

    def __init__(self, failure: FailureResponse):
        super().__init__(str(failure))
        self.failure = failure

    @property
    def code(self) -> ErrorCode:
        return self.failure.code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandError):
            return NotImplemented
        return self.failure == other.failure

    def __hash__(self) -> int:
        return hash(self.failure)
