"""High level MPD client built on transactions."""

from __future__ import annotations

import logging

from .connection import Connection
from .errors import CommandError, ErrorCode
from .transaction import RetryPolicy, SocketClient, Transaction, quote
from .types import IdleEvent, IdleEvents, Song, Songs, Status, TagValues, Volume

_logger = logging.getLogger("mpdwire.client")


class MpdClient:
    """Commands an application needs, each mapped to a read strategy.

    Any SocketClient works; use ``MpdClient.connect`` for a real server.
    """

    def __init__(self, socket: SocketClient, retry: RetryPolicy | None = None):
        self.socket = socket
        self.retry = retry or RetryPolicy()

    @classmethod
    def connect(
        cls,
        address: str,
        name: str = "client",
        read_timeout: float | None = 10.0,
        password: str = "",
        retry: RetryPolicy | None = None,
    ) -> MpdClient:
        """Open a Connection to ``address`` and wrap it."""
        conn = Connection.open(address, name=name, read_timeout=read_timeout, password=password)
        return cls(conn, retry)

    def send(self, command: str, offset: int | None = None) -> Transaction:
        return Transaction(command, self.socket, self.retry, offset=offset)

    def close(self) -> None:
        close = getattr(self.socket, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> MpdClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Status

    def ping(self) -> None:
        self.send("ping").read_ok()

    def status(self) -> Status:
        return self.send("status").read_response(Status)

    def current_song(self) -> Song | None:
        return self.send("currentsong").read_opt_response(Song)

    def playlist_info(self) -> list[Song] | None:
        songs = self.send("playlistinfo").read_opt_response(Songs)
        return songs.songs if songs is not None else None

    def get_volume(self) -> int:
        return self.send("getvol").read_response(Volume).volume

    def set_volume(self, volume: int) -> None:
        volume = max(0, min(100, volume))
        self.send(f"setvol {volume}").read_ok()

    def list_tag(self, tag: str) -> list[str]:
        return self.send(f"list {tag}").read_response(TagValues).values

    def idle(self, *subsystems: IdleEvent | str) -> list[IdleEvent]:
        """Block until one of ``subsystems`` (default: any) changes."""
        names = [s.value if isinstance(s, IdleEvent) else s for s in subsystems]
        command = " ".join(["idle", *names])
        return self.send(command).read_response(IdleEvents).events

    # Binary data

    def album_art(self, uri: str) -> bytes | None:
        """Cover file from the song's directory, or None."""
        return self.send(f"albumart {quote(uri)}", offset=0).read_binary()

    def read_picture(self, uri: str) -> bytes | None:
        """Picture embedded in the song file, or None."""
        return self.send(f"readpicture {quote(uri)}", offset=0).read_binary()

    def find_album_art(self, uri: str) -> bytes | None:
        """Try the directory cover first, then the embedded picture."""
        try:
            data = self.album_art(uri)
        except CommandError as e:
            if e.code != ErrorCode.NO_EXIST:
                raise
            _logger.debug(f"No cover file for '{uri}': {e}")
            data = None

        if data is None:
            data = self.read_picture(uri)
        return data
