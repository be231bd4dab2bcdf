"""Turn a :class:`CompositionResult` into JSON-able data or hook context."""

from __future__ import annotations

from typing import Any

import tenet.guidelines.models


def as_dict(result: tenet.guidelines.models.CompositionResult) -> dict[str, Any]:
    """Return a JSON-serializable form with camelCase keys."""
    return {
        "filePath": result.file_path,
        "appliedDocuments": list(result.applied_documents),
        "mergedSections": [
            {
                "sourceDocumentId": s.source_document_id,
                "title": s.title,
                "body": s.body,
                "conflictsWith": s.conflicts_with,
            }
            for s in result.merged_sections
        ],
    }


def from_dict(data: dict[str, Any]) -> tenet.guidelines.models.CompositionResult:
    """Inverse of :func:`as_dict`, used by daemon clients."""
    return tenet.guidelines.models.CompositionResult(
        file_path=data.get("filePath", ""),
        applied_documents=tuple(data.get("appliedDocuments", [])),
        merged_sections=tuple(
            tenet.guidelines.models.MergedSection(
                s["sourceDocumentId"],
                s.get("title"),
                s.get("body", ""),
                s.get("conflictsWith"),
            )
            for s in data.get("mergedSections", [])
        ),
    )


def as_context(
    result: tenet.guidelines.models.CompositionResult,
    max_chars: int = 0,
) -> str:
    """Format the result as a ``<guidelines>`` block for assistant context.

    Sections are dropped from the end once *max_chars* (if positive) would
    be exceeded; a trailing note says how many were left out.
    """
    if not result.merged_sections:
        return ""

    header = [
        f"[Guidelines for {result.file_path} | "
        f"{len(result.applied_documents)} document(s): "
        f"{', '.join(result.applied_documents)}]",
        f'<guidelines file="{result.file_path}">',
    ]
    footer = ["</guidelines>"]
    body: list[str] = []
    used = sum(len(line) + 1 for line in header + footer)
    omitted = 0

    for section in result.merged_sections:
        attrs = f'source="{section.source_document_id}"'
        if section.title:
            attrs += f' title="{section.title}"'
        if section.conflicts_with:
            attrs += f' conflicts-with="{section.conflicts_with}"'
        block = [f"  <section {attrs}>", section.body, "  </section>"]
        size = sum(len(line) + 1 for line in block)
        if omitted or (max_chars > 0 and used + size > max_chars):
            omitted += 1
            continue
        body.extend(block)
        used += size

    if omitted:
        body.append(f"  <!-- {omitted} section(s) omitted for length -->")
    return "\n".join(header + body + footer)
