"""Configuration for tenet hooks."""

from __future__ import annotations

import dataclasses

import tenet.config


@tenet.config.configurable("hooks")
@dataclasses.dataclass
class HooksConfig:
    # Tools whose target file gets guidance injected before they run.
    enabled_tools: list[str] = dataclasses.field(
        default_factory=lambda: ["Edit", "MultiEdit", "Write", "Read"]
    )

    # Guidance daemon
    daemon_host: str = "127.0.0.1"
    daemon_port: int = 8742
    daemon_timeout: float = 1.0

    # Compose in-process when the daemon is not reachable.
    fallback_local: bool = True
