"""Configuration for the guidance daemon."""

from __future__ import annotations

import dataclasses
import pathlib
import typing

import tenet.config


@tenet.config.configurable("server")
@dataclasses.dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8742
    # uvicorn log level
    log_level: str = "info"
    # Seconds to wait for in-flight requests on shutdown.
    shutdown_timeout: int = 5


def load_config(
    root: pathlib.Path | None = None, **overrides: typing.Any
) -> ServerConfig:
    """Load ``[server]`` for *root*, then apply non-None CLI overrides."""
    cfg = tenet.config.load("server", root)
    return dataclasses.replace(
        cfg, **{k: v for k, v in overrides.items() if v is not None}
    )
