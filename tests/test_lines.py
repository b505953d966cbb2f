"""Tests for line classification."""

from __future__ import annotations

import io

import pytest

from conftest import BrokenStream
from mpdwire.protocol.errors import (
    CommandError,
    ConnectionClosedError,
    DecodeError,
    ErrorCode,
    FailureResponse,
)
from mpdwire.protocol.lines import TERMINATOR, Terminator, Value, read_line, split_line


class TestReadLine:
    """Tests for read_line."""

    @pytest.mark.parametrize("data", [b"OK\n", b"OK enenene", b"OK MPD 0.23.5\n", b"list_OK enenene"])
    def test_terminator(self, data):
        assert read_line(io.BytesIO(data)) == TERMINATOR
        assert isinstance(read_line(io.BytesIO(data)), Terminator)

    def test_value_strips_newline(self):
        assert read_line(io.BytesIO(b"volume: 50\n")) == Value("volume: 50")

    def test_value_without_newline(self):
        assert read_line(io.BytesIO(b"volume: 50")) == Value("volume: 50")

    def test_value_keeps_inner_whitespace(self):
        assert read_line(io.BytesIO(b"Title:  spaced  \n")) == Value("Title:  spaced  ")

    def test_reads_one_line_at_a_time(self):
        stream = io.BytesIO(b"a: 1\nb: 2\nOK\n")

        assert read_line(stream) == Value("a: 1")
        assert read_line(stream) == Value("b: 2")
        assert read_line(stream) == TERMINATOR

    def test_invalid_utf8_is_replaced(self):
        line = read_line(io.BytesIO(b"Title: \xff\n"))
        assert line == Value("Title: \ufffd")

    def test_ack_raises_command_error(self):
        with pytest.raises(CommandError) as exc_info:
            read_line(io.BytesIO(b"ACK [55@2] {some_cmd} error message boi"))

        assert exc_info.value.failure == FailureResponse(
            code=ErrorCode.PLAYER_SYNC,
            command_list_index=2,
            command="some_cmd",
            message="error message boi",
        )

    def test_malformed_ack_is_decode_error(self):
        with pytest.raises(DecodeError):
            read_line(io.BytesIO(b"ACK something went wrong\n"))

    def test_empty_read_is_connection_closed(self):
        with pytest.raises(ConnectionClosedError):
            read_line(io.BytesIO(b""))

    @pytest.mark.parametrize("error", [BrokenPipeError(), ConnectionResetError(), ConnectionAbortedError()])
    def test_broken_pipe_is_connection_closed(self, error):
        with pytest.raises(ConnectionClosedError) as exc_info:
            read_line(BrokenStream(error))

        assert type(exc_info.value) is ConnectionClosedError

    def test_eof_and_broken_pipe_are_the_same_error(self):
        with pytest.raises(ConnectionClosedError) as eof:
            read_line(io.BytesIO(b""))
        with pytest.raises(ConnectionClosedError) as broken:
            read_line(BrokenStream(BrokenPipeError()))

        assert type(eof.value) is type(broken.value)

    def test_timeout_propagates(self):
        with pytest.raises(TimeoutError):
            read_line(BrokenStream(TimeoutError("timed out")))


class TestSplitLine:
    """Tests for split_line."""

    def test_split(self):
        assert split_line("file: music/a.flac") == ("file", "music/a.flac")

    def test_value_may_contain_separator(self):
        assert split_line("Title: a: b") == ("Title", "a: b")

    def test_empty_value(self):
        assert split_line("Album: ") == ("Album", "")

    def test_missing_separator(self):
        with pytest.raises(DecodeError, match="idc"):
            split_line("idc")
