"""Response types decoded from MPD key/value lines."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .decoding import MpdObject, parse_bool, parse_float, parse_int
from .errors import DecodeError


class State(str, Enum):
    """Player state."""

    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"


class OnOffOneshot(str, Enum):
    """Value of the ``single`` and ``consume`` flags."""

    OFF = "0"
    ON = "1"
    ONESHOT = "oneshot"


class IdleEvent(str, Enum):
    """Subsystems reported by the ``idle`` command."""

    DATABASE = "database"
    UPDATE = "update"
    STORED_PLAYLIST = "stored_playlist"
    PLAYLIST = "playlist"
    PLAYER = "player"
    MIXER = "mixer"
    OUTPUT = "output"
    OPTIONS = "options"
    PARTITION = "partition"
    STICKER = "sticker"
    SUBSCRIPTION = "subscription"
    MESSAGE = "message"
    NEIGHBOR = "neighbor"
    MOUNT = "mount"


def _enum_value(enum: type[Enum], key: str, value: str) -> Any:
    try:
        return enum(value)
    except ValueError as e:
        raise DecodeError(f"Invalid value for '{key}': '{value}'") from e


@dataclass
class Status(MpdObject):
    """Output of the ``status`` command.

    The ``consume`` flag is stored as ``consume_mode``.
    """

    volume: int = -1
    repeat: bool = False
    random: bool = False
    single: OnOffOneshot = OnOffOneshot.OFF
    consume_mode: OnOffOneshot = OnOffOneshot.OFF
    playlist: int = 0
    playlistlength: int = 0
    state: State = State.STOP
    song: int | None = None
    songid: int | None = None
    nextsong: int | None = None
    nextsongid: int | None = None
    elapsed: float = 0.0
    duration: float = 0.0
    bitrate: int | None = None
    xfade: int = 0
    audio: str | None = None
    updating_db: int | None = None
    error: str | None = None

    _INTS = (
        "volume", "playlist", "playlistlength", "xfade",
        "song", "songid", "nextsong", "nextsongid", "bitrate", "updating_db",
    )

    def consume(self, key: str, value: str) -> bool:
        if key in self._INTS:
            setattr(self, key, parse_int(key, value))
        elif key in ("repeat", "random"):
            setattr(self, key, parse_bool(key, value))
        elif key == "single":
            self.single = _enum_value(OnOffOneshot, key, value)
        elif key == "consume":
            self.consume_mode = _enum_value(OnOffOneshot, key, value)
        elif key == "state":
            self.state = _enum_value(State, key, value)
        elif key in ("elapsed", "duration"):
            setattr(self, key, parse_float(key, value))
        elif key in ("audio", "error"):
            setattr(self, key, value)
        else:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.value
        data["single"] = self.single.value
        data["consume_mode"] = self.consume_mode.value
        return data


@dataclass
class Song(MpdObject):
    """One song as printed by ``currentsong`` or ``playlistinfo``."""

    file: str = ""
    id: int | None = None
    pos: int | None = None
    duration: float | None = None
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def consume(self, key: str, value: str) -> bool:
        if key == "file":
            self.file = value
        elif key in ("id", "pos"):
            setattr(self, key, parse_int(key, value))
        elif key == "duration":
            self.duration = parse_float(key, value)
        elif key in ("title", "artist", "album"):
            setattr(self, key, value)
        else:
            # tags not modelled above; repeated tags keep the first value
            self.metadata.setdefault(key, value)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None and v != {}}


@dataclass
class Songs(MpdObject):
    """A list of songs; every ``file`` key starts a new one."""

    songs: list[Song] = field(default_factory=list)

    def consume(self, key: str, value: str) -> bool:
        if key == "file":
            self.songs.append(Song())
        elif not self.songs:
            raise DecodeError(f"Song list must start with 'file', got '{key}'")
        return self.songs[-1].consume(key, value)

    def __iter__(self):
        return iter(self.songs)

    def __len__(self) -> int:
        return len(self.songs)


@dataclass
class Volume(MpdObject):
    """Output of ``getvol``."""

    volume: int = 0

    def consume(self, key: str, value: str) -> bool:
        if key != "volume":
            raise DecodeError(f"Unexpected key in volume response: '{key}'")
        self.volume = parse_int(key, value)
        return True


@dataclass
class IdleEvents(MpdObject):
    """Subsystems that changed, as reported by ``idle``."""

    events: list[IdleEvent] = field(default_factory=list)

    def consume(self, key: str, value: str) -> bool:
        if key != "changed":
            return False
        self.events.append(_enum_value(IdleEvent, key, value))
        return True


@dataclass
class TagValues(MpdObject):
    """Values of ``list <tag>``, in server order."""

    values: list[str] = field(default_factory=list)

    def consume(self, key: str, value: str) -> bool:
        self.values.append(value)
        return True


@dataclass
class Pairs(MpdObject):
    """Every pair of a response, for commands without a dedicated type."""

    pairs: list[tuple[str, str]] = field(default_factory=list)

    def consume(self, key: str, value: str) -> bool:
        self.pairs.append((key, value))
        return True
