"""Configuration management for mpdwire."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .protocol.transaction import RetryPolicy


@dataclass
class ConnectionConfig:
    """Where and how to connect."""

    address: str = "127.0.0.1:6600"
    password: str = ""
    read_timeout: float = 10.0
    max_retries: int = 3
    retry_backoff: float = 0.0

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.max_retries, backoff=self.retry_backoff)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "warning"
    file: str = ""


@dataclass
class Config:
    """Full mpdwire configuration."""

    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the mpdwire config directory."""
    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "mpdwire"
    return Path.home() / ".config" / "mpdwire"


def apply_environment(config: Config) -> Config:
    """Apply ``MPD_HOST`` / ``MPD_PORT`` overrides.

    ``MPD_HOST`` may carry a password as ``password@host``.
    """
    host = os.environ.get("MPD_HOST")
    port = os.environ.get("MPD_PORT")

    if host:
        if "@" in host and not host.startswith("@"):
            password, _, host = host.rpartition("@")
            config.connection.password = password
        if host.startswith(("/", "~", "@")):
            config.connection.address = host
            return config
        config.connection.address = f"{host}:{port}" if port else host
    elif port:
        current = config.connection.address
        base = current.rsplit(":", 1)[0] if current.count(":") == 1 else current
        config.connection.address = f"{base}:{port}"

    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file, then apply environment overrides."""
    config_file = path or get_config_dir() / "config.toml"

    if not config_file.exists():
        return apply_environment(Config())

    with open(config_file, "rb") as f:
        data = tomllib.load(f)

    config = Config(
        connection=ConnectionConfig(**data.get("connection", {})),
        logging=LoggingConfig(**data.get("logging", {})),
    )
    return apply_environment(config)
