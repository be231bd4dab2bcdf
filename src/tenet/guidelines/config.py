"""Configuration for guideline loading and composition."""

from __future__ import annotations

import dataclasses
import pathlib

import tenet.config


@tenet.config.configurable("guidelines")
@dataclasses.dataclass
class GuidelinesConfig:
    # Directories scanned for *.md guideline files, relative to the project
    # root unless absolute. Later directories may not reuse earlier ids.
    directories: list[str] = dataclasses.field(
        default_factory=lambda: [".tenet/guidelines", ".github/instructions"]
    )
    # Leave out documents with malformed patterns instead of failing the load.
    skip_invalid: bool = False
    # Upper bound on rendered hook context (0 = unlimited).
    max_context_chars: int = 8000


def load_config(root: pathlib.Path | None = None) -> GuidelinesConfig:
    return tenet.config.load("guidelines", root)


def resolve_directories(
    cfg: GuidelinesConfig, root: pathlib.Path | None = None
) -> list[pathlib.Path]:
    """Return configured directories as absolute paths under *root*."""
    base = tenet.config.find_root(root)
    return [base / d for d in cfg.directories]
