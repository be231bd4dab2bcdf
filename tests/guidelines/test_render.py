"""Tests for tenet.guidelines.render."""

from __future__ import annotations

import json

import tenet.guidelines.models
import tenet.guidelines.render

MergedSection = tenet.guidelines.models.MergedSection


def _result() -> tenet.guidelines.models.CompositionResult:
    return tenet.guidelines.models.CompositionResult(
        file_path="app/user.component.html",
        applied_documents=("angular", "html"),
        merged_sections=(
            MergedSection("angular", "Accessibility", "A"),
            MergedSection("html", "Accessibility", "B", "angular"),
            MergedSection("html", None, "plain note"),
        ),
    )


class TestAsDict:
    def test_camel_case_shape(self) -> None:
        data = tenet.guidelines.render.as_dict(_result())
        assert data["filePath"] == "app/user.component.html"
        assert data["appliedDocuments"] == ["angular", "html"]
        assert data["mergedSections"][1] == {
            "sourceDocumentId": "html",
            "title": "Accessibility",
            "body": "B",
            "conflictsWith": "angular",
        }
        json.dumps(data)

    def test_from_dict_restores_result(self) -> None:
        result = _result()
        data = json.loads(json.dumps(tenet.guidelines.render.as_dict(result)))
        assert tenet.guidelines.render.from_dict(data) == result


class TestAsContext:
    def test_empty_result(self) -> None:
        empty = tenet.guidelines.models.CompositionResult(file_path="a.ts")
        assert tenet.guidelines.render.as_context(empty) == ""

    def test_block_layout(self) -> None:
        text = tenet.guidelines.render.as_context(_result())
        lines = text.split("\n")
        assert lines[0] == (
            "[Guidelines for app/user.component.html | 2 document(s): angular, html]"
        )
        assert lines[1] == '<guidelines file="app/user.component.html">'
        assert '  <section source="angular" title="Accessibility">' in lines
        assert (
            '  <section source="html" title="Accessibility" conflicts-with="angular">'
            in lines
        )
        assert '  <section source="html">' in lines
        assert lines[-1] == "</guidelines>"

    def test_truncates_trailing_sections(self) -> None:
        full = tenet.guidelines.render.as_context(_result())
        limit = len(full) - 5
        text = tenet.guidelines.render.as_context(_result(), max_chars=limit)
        assert "plain note" not in text
        assert "<!-- 1 section(s) omitted for length -->" in text
        assert text.endswith("</guidelines>")

    def test_zero_means_unlimited(self) -> None:
        text = tenet.guidelines.render.as_context(_result(), max_chars=0)
        assert "omitted" not in text
