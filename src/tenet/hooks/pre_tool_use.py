"""PreToolUse hook — inject the guidelines for the file a tool is about to touch.

Reads stdin JSON with tool_name, tool_input, and cwd. For file tools listed
in ``hooks.enabled_tools`` it composes the guidance for
``tool_input.file_path`` and returns it as additional context.
"""

from __future__ import annotations

import json
import pathlib
import sys

import tenet.guidelines.config
import tenet.guidelines.render
import tenet.hooks._guidance_client

_PATH_KEYS = ("file_path", "notebook_path", "path")


def _target_path(tool_input: dict) -> str:
    for key in _PATH_KEYS:
        value = tool_input.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def main(hook_input: dict) -> str:
    """Run the PreToolUse hook. Returns JSON output string."""
    tool_name = hook_input.get("tool_name", "")
    tool_input = hook_input.get("tool_input") or {}
    cwd_str = hook_input.get("cwd")
    cwd = pathlib.Path(cwd_str) if cwd_str else pathlib.Path.cwd()
    root = tenet.hooks._guidance_client.project_root(cwd)

    empty = json.dumps({"hookSpecificOutput": {}})
    if tool_name not in tenet.hooks._guidance_client.hooks_cfg(root).enabled_tools:
        return empty

    file_path = _target_path(tool_input) if isinstance(tool_input, dict) else ""
    if not file_path:
        return empty

    result = tenet.hooks._guidance_client.guidance_for(file_path, cwd)
    if result is None:
        return empty

    max_chars = tenet.guidelines.config.load_config(root).max_context_chars
    context = tenet.guidelines.render.as_context(result, max_chars=max_chars)
    if not context:
        return empty

    tokens = len(context) // 4
    context += f"\n[tenet: ~{tokens} tokens injected]"
    return json.dumps({
        "hookSpecificOutput": {
            "hookEventName": "PreToolUse",
            "additionalContext": context,
        }
    })


if __name__ == "__main__":
    hook_data: dict = {}
    try:
        raw = sys.stdin.read()
        if raw:
            hook_data = json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        pass

    print(main(hook_data))
