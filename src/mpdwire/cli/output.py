"""Output formatting for CLI."""

from __future__ import annotations

from ..protocol.types import Song, State, Status


def format_time(seconds: float) -> str:
    """Format seconds as MM:SS or HH:MM:SS."""
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_song(song: Song | None, include_duration: bool = True) -> str:
    """Format song info for display."""
    if song is None:
        return "(no song)"

    parts = []

    if song.artist:
        parts.append(song.artist)

    if song.title:
        parts.append(song.title)
    elif song.file:
        # Use filename from URI
        parts.append(song.file.split("/")[-1])

    text = " - ".join(parts) if parts else "(unknown)"

    if include_duration and song.duration:
        text += f" [{format_time(song.duration)}]"

    return text


def format_status(status: Status, song: Song | None = None) -> str:
    """Format status for display."""
    lines = []

    state_icon = {State.PLAY: "▶", State.PAUSE: "⏸", State.STOP: "⏹"}[status.state]
    lines.append(f"{state_icon} {format_song(song, include_duration=False)}")

    # Progress bar
    if status.state != State.STOP and status.duration > 0:
        progress = min(status.elapsed / status.duration, 1.0)
        bar_width = 40
        filled = int(bar_width * progress)
        bar = "▓" * filled + "░" * (bar_width - filled)
        lines.append(f"  {bar} {format_time(status.elapsed)} / {format_time(status.duration)}")

    volume = f"{status.volume}%" if status.volume >= 0 else "n/a"
    flags = []
    if status.repeat:
        flags.append("repeat")
    if status.random:
        flags.append("random")
    if status.single.value != "0":
        flags.append(f"single:{status.single.value}")
    if status.consume_mode.value != "0":
        flags.append(f"consume:{status.consume_mode.value}")
    lines.append(f"  Volume: {volume}  {' '.join(flags)}".rstrip())

    if status.playlistlength > 0 and status.song is not None:
        lines.append(f"  Queue: {status.song + 1}/{status.playlistlength}")

    if status.error:
        lines.append(f"  Error: {status.error}")

    return "\n".join(lines)


def format_queue(songs: list[Song] | None, current: int | None = None) -> str:
    """Format the queue for display."""
    if not songs:
        return "(empty queue)"

    lines = []
    for i, song in enumerate(songs):
        prefix = "▶ " if song.id is not None and song.id == current else "  "
        lines.append(f"{prefix}{i + 1}. {format_song(song)}")

    return "\n".join(lines)
