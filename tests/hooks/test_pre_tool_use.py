"""Tests for the PreToolUse hook module."""

from __future__ import annotations

import json
import unittest.mock

import pytest

import tenet.guidelines.models
import tenet.hooks.pre_tool_use


@pytest.fixture
def project(tmp_path, guidelines_dir):
    (tmp_path / ".git").mkdir()
    guidelines_dir(
        "angular.instructions.md",
        "---\napplyTo: '**/*.component.ts'\n---\n## Signals\nPrefer signals.\n",
    )
    return tmp_path


def _run(payload: dict) -> dict:
    return json.loads(tenet.hooks.pre_tool_use.main(payload))


class TestPreToolUseHook:
    def test_skips_tools_not_enabled(self, project):
        result = _run(
            {
                "tool_name": "Bash",
                "tool_input": {"command": "ls"},
                "cwd": str(project),
            }
        )
        assert result["hookSpecificOutput"] == {}

    def test_skips_missing_file_path(self, project):
        result = _run({"tool_name": "Edit", "tool_input": {}, "cwd": str(project)})
        assert result["hookSpecificOutput"] == {}

    def test_injects_guidance_for_matching_file(self, project):
        with unittest.mock.patch(
            "tenet.hooks._guidance_client.fetch_guidance", return_value=None
        ):
            result = _run(
                {
                    "tool_name": "Edit",
                    "tool_input": {"file_path": "src/app/user.component.ts"},
                    "cwd": str(project),
                }
            )
        out = result["hookSpecificOutput"]
        assert out["hookEventName"] == "PreToolUse"
        ctx = out["additionalContext"]
        assert "Prefer signals." in ctx
        assert 'source="angular"' in ctx
        assert "[tenet: ~" in ctx

    def test_no_matching_guidelines(self, project):
        with unittest.mock.patch(
            "tenet.hooks._guidance_client.fetch_guidance", return_value=None
        ):
            result = _run(
                {
                    "tool_name": "Write",
                    "tool_input": {"file_path": "README.md"},
                    "cwd": str(project),
                }
            )
        assert result["hookSpecificOutput"] == {}

    def test_uses_daemon_result_when_available(self, project):
        daemon_result = tenet.guidelines.models.CompositionResult(
            file_path="a.py",
            applied_documents=("python",),
            merged_sections=(
                tenet.guidelines.models.MergedSection("python", "Typing", "annotate"),
            ),
        )
        with unittest.mock.patch(
            "tenet.hooks._guidance_client.fetch_guidance",
            return_value=daemon_result,
        ):
            result = _run(
                {
                    "tool_name": "Read",
                    "tool_input": {"file_path": "a.py"},
                    "cwd": str(project),
                }
            )
        assert "annotate" in result["hookSpecificOutput"]["additionalContext"]

    def test_notebook_path_is_used(self, project):
        with unittest.mock.patch(
            "tenet.hooks._guidance_client.guidance_for", return_value=None
        ) as mock_guidance:
            _run(
                {
                    "tool_name": "Edit",
                    "tool_input": {"notebook_path": "nb/analysis.ipynb"},
                    "cwd": str(project),
                }
            )
        assert mock_guidance.call_args.args[0] == "nb/analysis.ipynb"

    def test_enabled_tools_come_from_config(self, project):
        (project / ".tenet" / "config.toml").write_text(
            '[hooks]\nenabled_tools = ["Write"]\n'
        )
        with unittest.mock.patch(
            "tenet.hooks._guidance_client.fetch_guidance", return_value=None
        ):
            edit = _run(
                {
                    "tool_name": "Edit",
                    "tool_input": {"file_path": "src/x.component.ts"},
                    "cwd": str(project),
                }
            )
            write = _run(
                {
                    "tool_name": "Write",
                    "tool_input": {"file_path": "src/x.component.ts"},
                    "cwd": str(project),
                }
            )
        assert edit["hookSpecificOutput"] == {}
        assert "Prefer signals." in write["hookSpecificOutput"]["additionalContext"]
