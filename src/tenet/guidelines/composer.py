"""Order matching documents and merge their sections into one result.

Ranking is by the specificity of each document's best matching pattern,
then by precedence, then by id so output is stable. Byte-identical
``(title, body)`` sections are emitted once; same-titled sections with
different text are all kept, the later ones marked with the id of the
document they disagree with.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import tenet.guidelines.errors
import tenet.guidelines.index
import tenet.guidelines.matcher
import tenet.guidelines.models

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger("tenet.guidelines.composer")


def best_match(
    document: tenet.guidelines.models.GuidelineDocument,
    parts: tuple[str, ...],
) -> tenet.guidelines.models.ScopeMatch | None:
    """Return the highest-specificity pattern of *document* matching *parts*."""
    best: tenet.guidelines.models.ScopeMatch | None = None
    for compiled in tenet.guidelines.index.compile_scope(document):
        score = compiled.match_specificity(parts)
        if score is None:
            continue
        if best is None or score > best.specificity:
            best = tenet.guidelines.models.ScopeMatch(
                document, compiled.source, score
            )
    return best


def rank(
    file_path: str,
    candidates: Iterable[tenet.guidelines.models.GuidelineDocument],
) -> list[tenet.guidelines.models.ScopeMatch]:
    """Match and sort *candidates*, highest ranked first."""
    parts = tenet.guidelines.matcher.split_path(file_path)
    scored: list[tuple[tenet.guidelines.models.ScopeMatch, int]] = []
    for doc in candidates:
        try:
            match = best_match(doc, parts)
            precedence = tenet.guidelines.index.effective_precedence(doc)
        except Exception as exc:
            err = tenet.guidelines.errors.MatchError(doc.id, file_path)
            logger.warning("%s: %s", err, exc)
            continue
        if match is not None:
            scored.append((match, precedence))

    scored.sort(key=lambda item: (-item[0].specificity, -item[1], item[0].document.id))
    return [match for match, _ in scored]


def merge(
    matches: Iterable[tenet.guidelines.models.ScopeMatch],
) -> list[tenet.guidelines.models.MergedSection]:
    """Concatenate sections of ranked documents, deduplicating and flagging."""
    merged: list[tenet.guidelines.models.MergedSection] = []
    seen: set[tuple[str | None, str]] = set()
    first_owner: dict[str, str] = {}

    for match in matches:
        doc_id = match.document.id
        for section in match.document.body:
            key = (section.title, section.body)
            if key in seen:
                continue
            seen.add(key)

            conflicts_with = None
            if section.title is not None:
                owner = first_owner.setdefault(section.title, doc_id)
                if owner != doc_id:
                    conflicts_with = owner

            merged.append(
                tenet.guidelines.models.MergedSection(
                    doc_id, section.title, section.body, conflicts_with
                )
            )
    return merged


def compose(
    file_path: str,
    candidates: Iterable[tenet.guidelines.models.GuidelineDocument],
) -> tenet.guidelines.models.CompositionResult:
    """Build the guidance for *file_path* from candidate documents.

    Documents whose patterns do not match are dropped. No candidates gives
    an empty result.
    """
    matches = rank(file_path, candidates)
    return tenet.guidelines.models.CompositionResult(
        file_path=file_path,
        applied_documents=tuple(m.document.id for m in matches),
        merged_sections=tuple(merge(matches)),
    )
