"""mpdwire protocol - line based client protocol for MPD."""

from .client import MpdClient
from .connection import Connection, parse_address, parse_greeting
from .decoding import Decodable, MpdObject, feed
from .errors import (
    CommandError,
    ConnectionClosedError,
    DecodeError,
    ErrorCode,
    FailureResponse,
    MpdError,
    RetryLimitError,
    TransactionConsumedError,
    ValueExpectedError,
)
from .lines import TERMINATOR, Terminator, Value, read_line, split_line
from .transaction import BinaryChunkHeader, RetryPolicy, SocketClient, Transaction, quote, send
from .types import (
    IdleEvent,
    IdleEvents,
    OnOffOneshot,
    Pairs,
    Song,
    Songs,
    State,
    Status,
    TagValues,
    Volume,
)

__all__ = [
    "MpdClient",
    "Connection",
    "parse_address",
    "parse_greeting",
    "Decodable",
    "MpdObject",
    "feed",
    "MpdError",
    "ConnectionClosedError",
    "RetryLimitError",
    "CommandError",
    "DecodeError",
    "ValueExpectedError",
    "TransactionConsumedError",
    "ErrorCode",
    "FailureResponse",
    "Terminator",
    "Value",
    "TERMINATOR",
    "read_line",
    "split_line",
    "SocketClient",
    "Transaction",
    "RetryPolicy",
    "BinaryChunkHeader",
    "quote",
    "send",
    "State",
    "OnOffOneshot",
    "IdleEvent",
    "Status",
    "Song",
    "Songs",
    "Volume",
    "IdleEvents",
    "TagValues",
    "Pairs",
]
