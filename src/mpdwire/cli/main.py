"""mpdwire CLI main entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from ..config import Config, get_config_dir, load_config
from ..protocol.client import MpdClient
from ..protocol.errors import MpdError
from ..protocol.types import Pairs
from .output import format_queue, format_song, format_status

_logger = logging.getLogger("mpdwire.cli")


def setup_logging(config: Config, verbose: int = 0) -> None:
    """Set up logging to stderr and optionally a file."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, config.logging.level.upper(), logging.WARNING)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger("mpdwire")
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler
    if config.logging.file:
        log_file = Path(config.logging.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def get_client(ctx: click.Context, name: str = "command", blocking: bool = False) -> MpdClient:
    """Connect using the loaded config; exits with status 2 if that fails.

    A ``blocking`` client has no read timeout.
    """
    config: Config = ctx.obj["config"]
    conn = config.connection
    read_timeout = None if blocking else conn.read_timeout
    try:
        client = MpdClient.connect(
            conn.address,
            name=name,
            read_timeout=read_timeout,
            password=conn.password,
            retry=conn.retry_policy(),
        )
    except (OSError, MpdError) as e:
        _logger.error(f"Failed to connect to {conn.address}: {e}")
        click.echo(f"Failed to connect to {conn.address}: {e}", err=True)
        sys.exit(2)
    ctx.call_on_close(client.close)
    return client


def fail(error: MpdError | OSError) -> None:
    """Report an unrecoverable error and exit with status 1."""
    _logger.error(f"Command failed: {error!r}")
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def emit(ctx: click.Context, data, text: str) -> None:
    if ctx.obj["json"]:
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(text)


@click.group()
@click.option("--json", "json_output", is_flag=True, help="Output JSON")
@click.option("--address", "-a", help="Server address (host:port or socket path)")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file")
@click.option("--verbose", "-v", count=True, help="More logging (repeatable)")
@click.pass_context
def cli(ctx, json_output: bool, address: str | None, config_path: Path | None, verbose: int):
    """mpdwire - talk to an MPD server.

    Reads settings from ~/.config/mpdwire/config.toml and MPD_HOST/MPD_PORT.
    """
    ctx.ensure_object(dict)
    config = load_config(config_path)
    if address:
        config.connection.address = address
    setup_logging(config, verbose)

    ctx.obj["json"] = json_output
    ctx.obj["config"] = config


@cli.command("ping")
@click.pass_context
def ping(ctx):
    """Check the server answers."""
    client = get_client(ctx)
    try:
        client.ping()
    except (MpdError, OSError) as e:
        fail(e)
    click.echo("OK")


@cli.command("status")
@click.pass_context
def status(ctx):
    """Show current playback status."""
    client = get_client(ctx)
    try:
        current = client.status()
        song = client.current_song()
    except (MpdError, OSError) as e:
        fail(e)
    data = current.to_dict()
    data["song"] = song.to_dict() if song else None
    emit(ctx, data, format_status(current, song))


@cli.command("current")
@click.pass_context
def current(ctx):
    """Show the current song."""
    client = get_client(ctx)
    try:
        song = client.current_song()
    except (MpdError, OSError) as e:
        fail(e)
    emit(ctx, song.to_dict() if song else None, format_song(song))


@cli.command("queue")
@click.pass_context
def queue(ctx):
    """Show queue contents."""
    client = get_client(ctx)
    try:
        songs = client.playlist_info()
        current = client.status().songid
    except (MpdError, OSError) as e:
        fail(e)
    emit(ctx, [s.to_dict() for s in songs or []], format_queue(songs, current))


@cli.command("idle")
@click.argument("subsystems", nargs=-1)
@click.option("--once", is_flag=True, help="Exit after the first change")
@click.pass_context
def idle(ctx, subsystems: tuple[str, ...], once: bool):
    """Print subsystems as they change."""
    client = get_client(ctx, name="idle", blocking=True)
    try:
        while True:
            events = client.idle(*subsystems)
            for event in events:
                click.echo(json.dumps({"changed": event.value}) if ctx.obj["json"] else event.value)
            if once:
                break
    except (MpdError, OSError) as e:
        fail(e)
    except KeyboardInterrupt:
        pass


@cli.command("albumart")
@click.argument("uri")
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True, help="File to write")
@click.option("--embedded", is_flag=True, help="Only read the picture embedded in the file")
@click.pass_context
def albumart(ctx, uri: str, output: Path, embedded: bool):
    """Save the cover art of URI."""
    client = get_client(ctx)
    try:
        data = client.read_picture(uri) if embedded else client.find_album_art(uri)
    except (MpdError, OSError) as e:
        fail(e)
    if data is None:
        click.echo(f"No album art for {uri}", err=True)
        sys.exit(1)
    output.write_bytes(data)
    emit(ctx, {"file": str(output), "size": len(data)}, f"Wrote {len(data)} bytes to {output}")


@cli.command("raw")
@click.argument("command", nargs=-1, required=True)
@click.pass_context
def raw(ctx, command: tuple[str, ...]):
    """Send COMMAND as is and print the response lines."""
    client = get_client(ctx)
    try:
        result = client.send(" ".join(command)).read_opt_response(Pairs)
    except (MpdError, OSError) as e:
        fail(e)
    pairs = result.pairs if result else []
    text = "\n".join(f"{k}: {v}" for k, v in pairs) if pairs else "OK"
    emit(ctx, [list(p) for p in pairs], text)


@cli.command("config-path")
def show_config_path():
    """Print where the config file is read from."""
    click.echo(get_config_dir() / "config.toml")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
