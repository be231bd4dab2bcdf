"""CLI for tenet configuration.

Usage:
    tenet config list                         Sections, keys, and defaults
    tenet config get <section.key> [--origin] Effective value (and its layer)
    tenet config set [--global] <key> <value> Write an override
    tenet config reset [--global] <key>       Remove an override
    tenet config show                         Effective config with origins
    tenet config edit [--global]              Open config.toml in $EDITOR
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import subprocess
import sys
from pathlib import Path

import tenet.config


def _register_sections() -> None:
    import tenet.guidelines.config
    import tenet.hooks.config
    import tenet.server.config  # noqa: F401


def _parse_key(key: str) -> tuple[str, str]:
    section, dot, field = key.partition(".")
    if not dot or not section or not field:
        raise ValueError(f"Invalid key format: {key!r} (expected section.key)")
    return section, field


def _default_of(f: dataclasses.Field) -> object:
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return f.default


def _type_name(f: dataclasses.Field) -> str:
    return f.type if isinstance(f.type, str) else f.type.__name__


def cmd_list(args: argparse.Namespace) -> int:
    sections = tenet.config.list_sections()
    for name in sorted(sections):
        print(f"[{name}]")
        for f in dataclasses.fields(sections[name]):
            print(f"  {f.name}: {_type_name(f)} = {_default_of(f)!r}")
        print()
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    section, field = _parse_key(args.key)
    value = tenet.config.get_effective(section, field, args.path)
    if args.origin:
        where = tenet.config.origin(section, field, args.path)
        print(f"{value}  ({where.layer}{f': {where.path}' if where.path else ''})")
    else:
        print(value)
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    section, field = _parse_key(args.key)
    scope = "global" if args.global_flag else "local"
    tenet.config.set_value(section, field, args.value, scope=scope, root=args.path)
    print(f"Set {args.key} = {args.value} ({scope})")
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    section, field = _parse_key(args.key)
    scope = "global" if args.global_flag else "local"
    if tenet.config.reset_value(section, field, scope=scope, root=args.path):
        print(f"Reset {args.key} ({scope})")
    else:
        print(f"{args.key} has no {scope} override")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    for name in sorted(tenet.config.list_sections()):
        instance = tenet.config.load(name, args.path)
        print(f"[{name}]")
        for f in dataclasses.fields(instance):
            layer = tenet.config.origin(name, f.name, args.path).layer
            value = getattr(instance, f.name)
            suffix = "" if layer == "default" else f"  # {layer}"
            print(f"  {f.name} = {value!r}{suffix}")
        print()
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    if args.global_flag:
        path = tenet.config._global_path()
    else:
        path = tenet.config._local_path(tenet.config.find_root(args.path))
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("# tenet configuration (see: tenet config list)\n")
    return subprocess.call([os.environ.get("EDITOR", "vi"), str(path)])


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tenet config", description="Tenet configuration."
    )
    sub = parser.add_subparsers(dest="subcmd")

    def add(name: str, handler, help_text: str, *, scoped: bool = False):
        p = sub.add_parser(name, help=help_text)
        p.set_defaults(handler=handler)
        p.add_argument("--path", type=Path, default=None, help="Project root")
        if scoped:
            p.add_argument("--global", dest="global_flag", action="store_true")
        return p

    add("list", cmd_list, "Show all configurable sections")
    p_get = add("get", cmd_get, "Print effective value")
    p_get.add_argument("key", help="section.key")
    p_get.add_argument("--origin", action="store_true", help="Show source layer")
    p_set = add("set", cmd_set, "Write an override", scoped=True)
    p_set.add_argument("key", help="section.key")
    p_set.add_argument("value", help="New value (lists: comma separated)")
    p_reset = add("reset", cmd_reset, "Remove an override", scoped=True)
    p_reset.add_argument("key", help="section.key")
    add("show", cmd_show, "Dump effective config")
    add("edit", cmd_edit, "Open config.toml in $EDITOR", scoped=True)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``tenet config``."""
    _register_sections()
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.subcmd is None:
        parser.print_help()
        return 1
    try:
        return args.handler(args)
    except (KeyError, ValueError, AttributeError) as exc:
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        print(message, file=sys.stderr)
        return 1
