"""Socket connections to an MPD server."""

from __future__ import annotations

import logging
import os
import socket
from typing import BinaryIO

from .errors import ConnectionClosedError, DecodeError
from .lines import CLOSED_ERRORS, Value, read_line
from .transaction import quote

_logger = logging.getLogger("mpdwire.connection")

DEFAULT_PORT = 6600
GREETING_PREFIX = "OK MPD "


def parse_address(address: str) -> tuple[str, str | tuple[str, int]]:
    """Split an address into ``("unix", path)`` or ``("tcp", (host, port))``.

    Paths start with ``/`` or ``~``; ``@name`` is a Linux abstract socket.
    TCP addresses are ``host``, ``host:port`` or ``[ipv6]:port``.
    """
    if address.startswith(("/", "~")):
        return "unix", os.path.expanduser(address)
    if address.startswith("@"):
        return "unix", "\0" + address[1:]

    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        port = rest.lstrip(":")
    elif address.count(":") == 1:
        host, _, port = address.partition(":")
    else:
        host, port = address, ""

    try:
        return "tcp", (host or "localhost", int(port) if port else DEFAULT_PORT)
    except ValueError as e:
        raise ValueError(f"Invalid port in address: {address}") from e


def parse_greeting(line: bytes) -> tuple[int, ...]:
    """Parse ``OK MPD 0.23.5`` into its version tuple."""
    text = line.decode("utf-8", errors="replace").strip()
    if not text.startswith(GREETING_PREFIX):
        raise DecodeError(f"Unexpected greeting from server: '{text}'")
    try:
        return tuple(int(part) for part in text[len(GREETING_PREFIX):].split("."))
    except ValueError as e:
        raise DecodeError(f"Invalid protocol version in greeting: '{text}'") from e


class Connection:
    """A reconnectable MPD socket.

    The same object stays valid across reconnects, so transactions keep
    working on it after the server drops the connection.
    """

    def __init__(
        self,
        address: str,
        name: str = "client",
        read_timeout: float | None = 10.0,
        password: str = "",
    ):
        self.address = address
        self.name = name
        self.password = password
        self.version: tuple[int, ...] = ()
        self._read_timeout = read_timeout
        self._sock: socket.socket | None = None
        self._reader: BinaryIO | None = None

    @classmethod
    def open(
        cls,
        address: str,
        name: str = "client",
        read_timeout: float | None = 10.0,
        password: str = "",
    ) -> Connection:
        """Create a connection and connect it."""
        conn = cls(address, name=name, read_timeout=read_timeout, password=password)
        conn.connect()
        return conn

    def connect(self) -> None:
        kind, target = parse_address(self.address)
        if kind == "unix":
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            sock.settimeout(self._read_timeout)
            try:
                sock.connect(target)
            except BaseException:
                sock.close()
                raise
        else:
            sock = socket.create_connection(target, timeout=self._read_timeout)

        try:
            reader = sock.makefile("rb")
            greeting = reader.readline()
            if not greeting:
                raise ConnectionClosedError(f"Server at {self.address} closed the connection before greeting")
            self.version = parse_greeting(greeting)
        except BaseException:
            sock.close()
            raise

        self._sock = sock
        self._reader = reader
        _logger.info(f"[{self.name}] connected to {self.address}, protocol {'.'.join(map(str, self.version))}")

        if self.password:
            try:
                self._authenticate()
            except BaseException:
                self.close()
                raise

    def _authenticate(self) -> None:
        # sent on the raw socket, a Transaction would reconnect into connect() again
        try:
            self.write(f"password {quote(self.password)}\n".encode("utf-8"))
        except CLOSED_ERRORS as e:
            raise ConnectionClosedError(f"[{self.name}] connection closed while authenticating") from e
        line = read_line(self.read())
        if isinstance(line, Value):
            raise DecodeError(f"Expected 'OK' but got '{line.text}'")

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as e:
                _logger.debug(f"[{self.name}] error while closing socket: {e}")
            self._sock = None

    def reconnect(self) -> Connection:
        _logger.warning(f"[{self.name}] reconnecting to {self.address}")
        self.close()
        self.connect()
        return self

    def set_read_timeout(self, timeout: float | None) -> None:
        """Set the socket timeout; None blocks forever."""
        self._read_timeout = timeout
        if self._sock is not None:
            self._sock.settimeout(timeout)

    @property
    def read_timeout(self) -> float | None:
        return self._read_timeout

    def write(self, data: bytes) -> None:
        if self._sock is None:
            raise ConnectionClosedError(f"[{self.name}] not connected")
        self._sock.sendall(data)

    def read(self) -> BinaryIO:
        if self._reader is None:
            raise ConnectionClosedError(f"[{self.name}] not connected")
        return self._reader

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Connection({self.address!r}, name={self.name!r})"

