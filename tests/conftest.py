"""Pytest configuration and fixtures for mpdwire tests."""

from __future__ import annotations

import io
import logging
from typing import Generator

import pytest


class FakeSocket:
    """In-memory SocketClient.

    Each positional argument is everything the server sends on one
    connection; ``reconnect`` moves on to the next one (or to an empty
    stream once they run out). ``fail_writes`` makes that many writes
    raise BrokenPipeError.
    """

    def __init__(self, *responses: bytes, fail_writes: int = 0):
        self._responses = list(responses)
        self.fail_writes = fail_writes
        self.writes: list[bytes] = []
        self.reconnects = 0
        self.closed = False
        self._stream = self._next_stream()

    def _next_stream(self) -> io.BytesIO:
        data = self._responses.pop(0) if self._responses else b""
        return io.BytesIO(data)

    def reconnect(self) -> FakeSocket:
        self.reconnects += 1
        self._stream = self._next_stream()
        return self

    def write(self, data: bytes) -> None:
        if self.fail_writes:
            self.fail_writes -= 1
            raise BrokenPipeError("broken pipe")
        self.writes.append(data)

    def read(self) -> io.BytesIO:
        return self._stream

    def close(self) -> None:
        self.closed = True

    @property
    def commands(self) -> list[str]:
        return [w.decode("utf-8").rstrip("\n") for w in self.writes]


class BrokenStream:
    """A reader whose every call fails with the given error."""

    def __init__(self, error: Exception):
        self.error = error

    def readline(self) -> bytes:
        raise self.error

    def read(self, size: int = -1) -> bytes:
        raise self.error


def binary_chunk(payload: bytes, size_total: int, mime_type: str | None = None) -> bytes:
    """Server output for one binary slice."""
    head = f"size: {size_total}\n"
    if mime_type:
        head += f"type: {mime_type}\n"
    head += f"binary: {len(payload)}\n"
    return head.encode() + payload + b"\nOK\n"


@pytest.fixture
def fake_socket():
    """Factory for FakeSocket instances."""
    return FakeSocket


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers the CLI installs so they don't outlive a test."""
    yield
    logger = logging.getLogger("mpdwire")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temporary directory with no MPD_* variables."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv("MPD_HOST", raising=False)
    monkeypatch.delenv("MPD_PORT", raising=False)
    config_dir = tmp_path / "mpdwire"
    config_dir.mkdir()
    return config_dir
