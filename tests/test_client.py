"""Tests for MpdClient."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import FakeSocket, binary_chunk
from mpdwire.protocol.client import MpdClient
from mpdwire.protocol.errors import CommandError, ErrorCode, RetryLimitError
from mpdwire.protocol.transaction import RetryPolicy
from mpdwire.protocol.types import IdleEvent, State


class TestCommands:
    """Tests for the command helpers."""

    def test_ping(self):
        sock = FakeSocket(b"OK\n")
        MpdClient(sock).ping()

        assert sock.commands == ["ping"]

    def test_status(self):
        sock = FakeSocket(b"state: pause\nvolume: 10\nOK\n")

        status = MpdClient(sock).status()

        assert status.state == State.PAUSE
        assert status.volume == 10

    def test_current_song_none(self):
        assert MpdClient(FakeSocket(b"OK\n")).current_song() is None

    def test_current_song(self):
        song = MpdClient(FakeSocket(b"file: a.flac\nOK\n")).current_song()

        assert song.file == "a.flac"

    def test_playlist_info(self):
        songs = MpdClient(FakeSocket(b"file: a\nfile: b\nOK\n")).playlist_info()

        assert [s.file for s in songs] == ["a", "b"]

    def test_playlist_info_empty(self):
        assert MpdClient(FakeSocket(b"OK\n")).playlist_info() is None

    def test_volume(self):
        sock = FakeSocket(b"volume: 30\nOK\nOK\n")
        client = MpdClient(sock)

        assert client.get_volume() == 30
        client.set_volume(130)

        assert sock.commands == ["getvol", "setvol 100"]

    def test_list_tag(self):
        sock = FakeSocket(b"Album: X\nAlbum: Y\nOK\n")

        assert MpdClient(sock).list_tag("album") == ["X", "Y"]
        assert sock.commands == ["list album"]

    def test_idle(self):
        sock = FakeSocket(b"changed: playlist\nOK\n")

        events = MpdClient(sock).idle(IdleEvent.PLAYLIST, "player")

        assert events == [IdleEvent.PLAYLIST]
        assert sock.commands == ["idle playlist player"]

    def test_retry_policy_is_used(self):
        sock = FakeSocket(b"", b"", b"OK\n")

        with pytest.raises(RetryLimitError):
            MpdClient(sock, RetryPolicy(max_retries=1)).ping()

        assert sock.reconnects == 1

    def test_close(self):
        sock = FakeSocket()
        with MpdClient(sock):
            pass

        assert sock.closed is True

    def test_connect(self):
        with patch("mpdwire.protocol.client.Connection.open") as open_mock:
            client = MpdClient.connect("host:6601", name="idle", read_timeout=None)

        open_mock.assert_called_once_with("host:6601", name="idle", read_timeout=None, password="")
        assert client.socket is open_mock.return_value


class TestAlbumArt:
    """Tests for album art helpers."""

    def test_album_art(self):
        sock = FakeSocket(binary_chunk(b"png!", 4, "image/png"))

        assert MpdClient(sock).album_art('dir/"a".flac') == b"png!"
        assert sock.commands == ['albumart "dir/\\"a\\".flac" 0']

    def test_read_picture(self):
        sock = FakeSocket(binary_chunk(b"jpg", 3, "image/jpeg"))

        assert MpdClient(sock).read_picture("a.flac") == b"jpg"
        assert sock.commands == ['readpicture "a.flac" 0']

    def test_find_album_art_prefers_cover_file(self):
        sock = FakeSocket(binary_chunk(b"cover", 5))

        assert MpdClient(sock).find_album_art("a.flac") == b"cover"
        assert len(sock.commands) == 1

    def test_find_album_art_falls_back_on_no_exist(self):
        sock = FakeSocket(b"ACK [50@0] {albumart} No file exists\n" + binary_chunk(b"emb", 3))

        assert MpdClient(sock).find_album_art("a.flac") == b"emb"
        assert sock.commands == ['albumart "a.flac" 0', 'readpicture "a.flac" 0']

    def test_find_album_art_falls_back_on_nothing(self):
        sock = FakeSocket(b"OK\n" + binary_chunk(b"emb", 3))

        assert MpdClient(sock).find_album_art("a.flac") == b"emb"

    def test_find_album_art_none(self):
        assert MpdClient(FakeSocket(b"OK\nOK\n")).find_album_art("a.flac") is None

    def test_find_album_art_other_errors_propagate(self):
        sock = FakeSocket(b"ACK [4@0] {albumart} you don't have permission\n")

        with pytest.raises(CommandError) as exc_info:
            MpdClient(sock).find_album_art("a.flac")

        assert exc_info.value.code == ErrorCode.PERMISSION
