"""Tenet CLI — per-file coding guidelines for assistant tools.

Usage:
    tenet install          Register hooks in current project
    tenet install --global Register hooks globally (~/.claude/settings.json)
    tenet install --remove Remove hooks (add --global for global)
    tenet server [opts]    Start the guidance daemon
    tenet guidelines <cmd> List, check, and query guideline documents
    tenet config <cmd>     Configuration (get/set/list/show)
    tenet hook <event>     Run a hook (called by the assistant, not users)
"""

from __future__ import annotations

import importlib
import json
import pathlib
import sys
from typing import NamedTuple


class _Hook(NamedTuple):
    module: str
    matcher: str
    timeout_ms: int


_HOOKS = {
    "PreToolUse": _Hook(
        "tenet.hooks.pre_tool_use", "Edit|MultiEdit|Write|Read", 3000
    ),
}

_COMMAND_PREFIX = "tenet hook "

_GLOBAL_SETTINGS = pathlib.Path.home() / ".claude" / "settings.json"


def _settings_path(is_global: bool) -> pathlib.Path:
    if is_global:
        return _GLOBAL_SETTINGS
    return pathlib.Path.cwd() / ".claude" / "settings.local.json"


def _hook_entry(event: str) -> dict:
    hook = _HOOKS[event]
    return {
        "matcher": hook.matcher,
        "hooks": [
            {
                "type": "command",
                "command": f"{_COMMAND_PREFIX}{event}",
                "timeout": hook.timeout_ms,
            }
        ],
    }


def _owned(entry: object) -> bool:
    """True if a settings hook entry runs one of our commands."""
    if not isinstance(entry, dict):
        return False
    return any(
        isinstance(h, dict) and str(h.get("command", "")).startswith(_COMMAND_PREFIX)
        for h in entry.get("hooks", [])
    )


def _without_tenet(hooks: dict) -> dict:
    """Copy of a settings ``hooks`` table with our entries removed."""
    kept: dict = {}
    for event, entries in hooks.items():
        others = [e for e in entries if not _owned(e)]
        if others:
            kept[event] = others
    return kept


def _cmd_install(args: list[str]) -> int:
    """Register or remove tenet hooks.

    Writes .claude/settings.local.json in the current project, or
    ~/.claude/settings.json with ``--global``. Entries that belong to
    other tools are left alone; re-running replaces our own entries.
    """
    is_global = "--global" in args
    path = _settings_path(is_global)

    settings: dict = {}
    if path.exists():
        try:
            settings = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            print(f"Cannot parse {path}: {exc}", file=sys.stderr)
            return 1

    hooks = _without_tenet(settings.get("hooks", {}))
    if "--remove" not in args:
        for event in _HOOKS:
            hooks.setdefault(event, []).append(_hook_entry(event))

    if hooks:
        settings["hooks"] = hooks
    else:
        settings.pop("hooks", None)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings, indent=2) + "\n")

    if "--remove" in args:
        print("Tenet hooks removed from", path)
    else:
        scope = "global" if is_global else "project"
        print(f"Tenet hooks registered ({scope}) in {path}")
        print(f"  {len(_HOOKS)} hook(s): {', '.join(_HOOKS)}")
    return 0


def _read_stdin_json() -> dict:
    raw = sys.stdin.read()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _cmd_hook(args: list[str]) -> int:
    """Run one hook event with the JSON payload on stdin."""
    hook = _HOOKS.get(args[0]) if args else None
    if hook is None:
        if args:
            print(f"Unknown hook event: {args[0]}", file=sys.stderr)
        print(f"Usage: tenet hook <{'|'.join(_HOOKS)}>", file=sys.stderr)
        return 1
    module = importlib.import_module(hook.module)
    print(module.main(_read_stdin_json()))
    return 0


def _cmd_server(args: list[str]) -> int:
    import tenet.server.server

    tenet.server.server.main(args)
    return 0


def _cmd_guidelines(args: list[str]) -> int:
    import tenet.guidelines_cli

    return tenet.guidelines_cli.main(args)


def _cmd_config(args: list[str]) -> int:
    import tenet.config_cli

    return tenet.config_cli.main(args)


_COMMANDS = {
    "install": "_cmd_install",
    "hook": "_cmd_hook",
    "server": "_cmd_server",
    "guidelines": "_cmd_guidelines",
    "config": "_cmd_config",
}


def main() -> None:
    args = sys.argv[1:]
    handler_name = _COMMANDS.get(args[0]) if args else None
    if handler_name is None:
        print(__doc__)
        sys.exit(1)
    # Looked up at call time so tests can patch individual commands.
    sys.exit(globals()[handler_name](args[1:]))


if __name__ == "__main__":
    main()
