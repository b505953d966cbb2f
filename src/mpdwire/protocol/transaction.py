"""Request/response transactions over a single MPD connection."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import BinaryIO, Callable, Protocol, TypeVar

from .decoding import Decodable, feed, parse_unsigned
from .errors import (
    ConnectionClosedError,
    DecodeError,
    RetryLimitError,
    TransactionConsumedError,
    ValueExpectedError,
)
from .lines import CLOSED_ERRORS, Terminator, Value, read_line, split_line

_logger = logging.getLogger("mpdwire.transaction")

T = TypeVar("T")
D = TypeVar("D", bound=Decodable)


class SocketClient(Protocol):
    """The transport a transaction runs over.

    ``reconnect`` re-establishes the connection in place and must be safe
    to call repeatedly. ``read`` returns a buffered binary reader.
    """

    def reconnect(self) -> SocketClient: ...

    def write(self, data: bytes) -> None: ...

    def read(self) -> BinaryIO: ...


@dataclass
class RetryPolicy:
    """How often a closed connection is replayed before giving up."""

    max_retries: int = 3
    backoff: float = 0.0

    def wait(self, attempt: int) -> None:
        if self.backoff > 0:
            time.sleep(self.backoff * attempt)


@dataclass
class BinaryChunkHeader:
    """Preamble of one binary slice."""

    bytes_read: int = 0
    size_total: int = 0
    mime_type: str | None = None


class Transaction:
    """One command and the reading of its response.

    The command is written as soon as the transaction is created. Exactly
    one of the ``read_*`` methods may then be called; a second call raises
    TransactionConsumedError.

    When the server closes the connection mid-response the transaction
    reconnects, sends the command again and starts reading from scratch,
    up to ``retry.max_retries`` times.
    """

    def __init__(
        self,
        command: str,
        client: SocketClient,
        retry: RetryPolicy | None = None,
        offset: int | None = None,
    ):
        self.command = command
        self.client = client
        self.retry = retry or RetryPolicy()
        self._consumed = False
        self.execute(command if offset is None else f"{command} {offset}")

    def __repr__(self) -> str:
        return f"Transaction({self.command!r})"

    def execute(self, command: str) -> None:
        """Write ``command``, reconnecting once if the pipe is broken."""
        data = f"{command}\n".encode("utf-8")
        try:
            self.client.write(data)
        except (ConnectionClosedError, *CLOSED_ERRORS) as e:
            _logger.warning(f"Write of '{command}' failed ({e}), reconnecting")
            self.client.reconnect()
            try:
                self.client.write(data)
            except CLOSED_ERRORS as e2:
                raise ConnectionClosedError(f"Write of '{command}' failed after reconnect") from e2

    def _consume(self) -> None:
        if self._consumed:
            raise TransactionConsumedError(f"Response to '{self.command}' was already read")
        self._consumed = True

    def _recover(self, attempt: int, error: ConnectionClosedError) -> int:
        """Reconnect after ``error``; returns the new attempt count."""
        attempt += 1
        if attempt > self.retry.max_retries:
            raise RetryLimitError(
                f"Connection closed {attempt} times while running '{self.command}'"
            ) from error
        _logger.warning(f"Connection closed while reading '{self.command}', retry {attempt}")
        self.retry.wait(attempt)
        self.client.reconnect()
        return attempt

    def _run(self, read: Callable[[BinaryIO], T]) -> T:
        self._consume()
        _logger.debug(f"Reading response to '{self.command}'")
        attempt = 0
        replay = False
        while True:
            try:
                if replay:
                    self.execute(self.command)
                return read(self.client.read())
            except ConnectionClosedError as e:
                attempt = self._recover(attempt, e)
                replay = True

    def read_ok(self) -> None:
        """Expect a bare terminator."""

        def read(stream: BinaryIO) -> None:
            line = read_line(stream)
            if isinstance(line, Value):
                raise DecodeError(f"Expected 'OK' but got '{line.text}'")

        self._run(read)

    def read_response(self, factory: Callable[[], D]) -> D:
        """Decode every value line into a fresh ``factory()`` object."""

        def read(stream: BinaryIO) -> D:
            result = factory()
            while True:
                line = read_line(stream)
                if isinstance(line, Terminator):
                    return result
                feed(result, line.text)

        return self._run(read)

    def read_opt_response(self, factory: Callable[[], D]) -> D | None:
        """Like read_response, but None when the response has no lines."""

        def read(stream: BinaryIO) -> D | None:
            result = factory()
            found_any = False
            while True:
                line = read_line(stream)
                if isinstance(line, Terminator):
                    return result if found_any else None
                found_any = True
                feed(result, line.text)

        return self._run(read)

    def read_binary(self) -> bytes | None:
        """Assemble a binary object served in slices.

        Each further slice is requested by sending the command again with
        the number of bytes received so far appended. Returns None when
        the server has no binary data at all.
        """
        self._consume()
        _logger.debug(f"Reading binary response to '{self.command}'")
        buffer = bytearray()
        received_any = False
        resend = False
        attempt = 0
        while True:
            mark = len(buffer)
            try:
                if resend:
                    self.execute(f"{self.command} {len(buffer)}")
                header = self._read_chunk(buffer)
            except ConnectionClosedError as e:
                # a partially read slice is requested again from its start
                del buffer[mark:]
                attempt = self._recover(attempt, e)
                resend = True
                continue

            if header is None:
                if not received_any:
                    return None
                raise ValueExpectedError("Expected binary data but got none")
            received_any = True
            # the retry budget covers consecutive closures only
            attempt = 0

            if len(buffer) >= header.size_total or header.bytes_read == 0:
                _logger.debug(f"Finished reading binary response, {len(buffer)} bytes")
                return bytes(buffer)
            resend = True

    def _read_chunk(self, buffer: bytearray) -> BinaryChunkHeader | None:
        """Read one slice into ``buffer``; None if the server sent only OK."""
        header = BinaryChunkHeader()
        stream = self.client.read()
        while True:
            line = read_line(stream)
            if isinstance(line, Terminator):
                _logger.debug(f"Expected binary data for '{self.command}' but got 'OK'")
                return None
            key, value = split_line(line.text)
            key = key.lower()
            if key == "size":
                header.size_total = parse_unsigned(key, value)
            elif key == "type":
                header.mime_type = value
            elif key == "binary":
                header.bytes_read = parse_unsigned(key, value)
                break
            else:
                raise DecodeError(f"Unexpected key when parsing binary response: '{key}'")

        buffer += _read_exact(stream, header.bytes_read)
        # the server prints an empty line after the binary data
        _read_raw_line(stream)
        line = read_line(stream)
        if isinstance(line, Value):
            raise DecodeError(f"Expected 'OK' but got '{line.text}'")
        return header


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        try:
            chunk = stream.read(remaining)
        except CLOSED_ERRORS as e:
            raise ConnectionClosedError() from e
        if not chunk:
            raise ConnectionClosedError(f"Connection closed with {remaining} binary bytes outstanding")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _read_raw_line(stream: BinaryIO) -> bytes:
    try:
        return stream.readline()
    except CLOSED_ERRORS as e:
        raise ConnectionClosedError() from e


def send(client: SocketClient, command: str, retry: RetryPolicy | None = None) -> Transaction:
    """Send ``command`` and return the transaction reading its response."""
    return Transaction(command, client, retry)


def quote(argument: str) -> str:
    """Quote a command argument, escaping backslashes and double quotes."""
    escaped = argument.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
