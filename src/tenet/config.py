"""Layered TOML configuration for tenet subsystems.

Each subsystem declares a dataclass and registers it under a section name
with ``@configurable``. Values are resolved from three layers, last wins::

    default     dataclass field defaults
    global      ~/.config/tenet/config.toml
    local       <project root>/.tenet/config.toml

The project root is the nearest ancestor holding ``.git``, or the cwd.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib
import tomllib
from typing import Any, NamedTuple, TypeVar

logger = logging.getLogger("tenet.config")

T = TypeVar("T")

_REGISTRY: dict[str, type] = {}

_SCALAR_TYPES = {"int": int, "float": float, "bool": bool, "str": str}
_TRUTHY = ("true", "1", "yes", "on")

SCOPES = ("global", "local")


class Origin(NamedTuple):
    """Where an effective value came from."""

    layer: str  # "default", "global" or "local"
    path: pathlib.Path | None


def configurable(section: str):
    """Register a dataclass as config *section*."""

    def decorator(cls: type[T]) -> type[T]:
        _REGISTRY[section] = cls
        return cls

    return decorator


def list_sections() -> dict[str, type]:
    return dict(_REGISTRY)


def _section_cls(section: str) -> type:
    try:
        return _REGISTRY[section]
    except KeyError:
        raise KeyError(f"Unknown config section: {section}") from None


# -- locations ---------------------------------------------------------------

def _global_path() -> pathlib.Path:
    return pathlib.Path.home() / ".config" / "tenet" / "config.toml"


def _local_path(root: pathlib.Path) -> pathlib.Path:
    return root / ".tenet" / "config.toml"


def find_repo_root(cwd: pathlib.Path) -> pathlib.Path | None:
    """Return the nearest ancestor of *cwd* (inclusive) containing ``.git``."""
    start = cwd.resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").is_dir():
            return candidate
    return None


def find_root(root: pathlib.Path | None = None) -> pathlib.Path:
    """Return *root* if given, else the repo root or the cwd."""
    if root is not None:
        return root
    cwd = pathlib.Path.cwd()
    return find_repo_root(cwd) or cwd


def _layer_paths(root: pathlib.Path) -> list[tuple[str, pathlib.Path]]:
    return [("global", _global_path()), ("local", _local_path(root))]


def _scope_path(scope: str, root: pathlib.Path | None) -> pathlib.Path:
    if scope not in SCOPES:
        raise ValueError(f"Unknown scope: {scope!r} (expected global or local)")
    return _global_path() if scope == "global" else _local_path(find_root(root))


# -- TOML files --------------------------------------------------------------

def _read(path: pathlib.Path) -> dict[str, Any]:
    """Parse *path*; a missing or unreadable file counts as empty."""
    try:
        text = path.read_text()
    except FileNotFoundError:
        return {}
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return {}
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Ignoring malformed config %s: %s", path, exc)
        return {}


def _write(path: pathlib.Path, data: dict[str, Any]) -> None:
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomli_w.dumps(data))


# -- typing ------------------------------------------------------------------

def _field_type(cls: type, field_name: str) -> type:
    """Concrete type of *field_name*, resolving string annotations."""
    for f in dataclasses.fields(cls):
        if f.name != field_name:
            continue
        if not isinstance(f.type, str):
            return f.type
        if f.type.startswith(("list", "tuple")):
            return list
        return _SCALAR_TYPES.get(f.type, str)
    raise KeyError(field_name)


def _coerce(value: str, target_type: type) -> Any:
    """Convert a command-line string; lists are comma separated."""
    if target_type is bool:
        return value.strip().lower() in _TRUTHY
    if target_type is list:
        return [item.strip() for item in value.split(",") if item.strip()]
    if target_type in (int, float):
        return target_type(value)
    return value


def _accepts(value: Any, target_type: type) -> bool:
    if target_type is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if target_type is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, target_type)


# -- resolution --------------------------------------------------------------

def _resolve(
    section: str, root: pathlib.Path | None
) -> tuple[type, dict[str, Any], dict[str, Origin]]:
    cls = _section_cls(section)
    values: dict[str, Any] = {}
    origins: dict[str, Origin] = {}
    for layer, path in _layer_paths(find_root(root)):
        table = _read(path).get(section, {})
        if not isinstance(table, dict):
            logger.warning("[%s] in %s is not a table, ignored", section, path)
            continue
        for key, value in table.items():
            try:
                expected = _field_type(cls, key)
            except KeyError:
                logger.debug("Unknown key %s.%s in %s", section, key, path)
                continue
            if not _accepts(value, expected):
                logger.warning(
                    "%s.%s in %s should be %s, got %r",
                    section, key, path, expected.__name__, value,
                )
                continue
            values[key] = value
            origins[key] = Origin(layer, path)
    return cls, values, origins


def load(section: str, root: pathlib.Path | None = None) -> Any:
    """Return the effective config instance for *section*."""
    cls, values, _ = _resolve(section, root)
    return cls(**values)


def get_effective(
    section: str,
    key: str,
    root: pathlib.Path | None = None,
) -> Any:
    return getattr(load(section, root), key)


def origin(section: str, key: str, root: pathlib.Path | None = None) -> Origin:
    """Report which layer supplies *section.key*."""
    cls, _, origins = _resolve(section, root)
    _field_type(cls, key)
    return origins.get(key, Origin("default", None))


def set_value(
    section: str,
    key: str,
    value: Any,
    *,
    scope: str = "local",
    root: pathlib.Path | None = None,
) -> None:
    """Persist *section.key* = *value* in the *scope* file.

    String values are converted to the field's type first.
    """
    cls = _section_cls(section)
    try:
        expected = _field_type(cls, key)
    except KeyError:
        raise KeyError(f"Unknown key: {section}.{key}") from None
    if isinstance(value, str):
        value = _coerce(value, expected)

    path = _scope_path(scope, root)
    data = _read(path)
    data.setdefault(section, {})[key] = value
    _write(path, data)


def reset_value(
    section: str,
    key: str,
    *,
    scope: str = "local",
    root: pathlib.Path | None = None,
) -> bool:
    """Drop *section.key* from the *scope* file. Returns False if unset."""
    path = _scope_path(scope, root)
    data = _read(path)
    table = data.get(section)
    if not isinstance(table, dict) or key not in table:
        return False
    del table[key]
    if not table:
        del data[section]
    _write(path, data)
    return True
