"""Records passed between the store, index, composer, and callers."""

from __future__ import annotations

import dataclasses
from typing import NamedTuple


class Section(NamedTuple):
    """One block of guidance text, optionally titled."""

    title: str | None
    body: str


@dataclasses.dataclass(frozen=True)
class GuidelineDocument:
    """A unit of guidance scoped to certain files by glob patterns.

    ``precedence`` of ``None`` means the value is derived from pattern
    specificity when the document is indexed; an integer overrides it.
    """

    id: str
    scope_patterns: tuple[str, ...] = ()
    body: tuple[Section, ...] = ()
    precedence: int | None = None
    languages: tuple[str, ...] = ()
    source: str | None = None

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so documents stay hashable.
        object.__setattr__(self, "scope_patterns", tuple(self.scope_patterns))
        object.__setattr__(
            self, "body", tuple(Section(*s) for s in self.body)
        )
        object.__setattr__(
            self, "languages", tuple(lang.lower() for lang in self.languages)
        )

    @property
    def selectable(self) -> bool:
        """True when the document can be picked by automatic selection."""
        return bool(self.scope_patterns)


class ScopeMatch(NamedTuple):
    """A candidate document with the pattern that selected it."""

    document: GuidelineDocument
    matched_pattern: str
    specificity: int


class MergedSection(NamedTuple):
    """A section in composed output, tagged with where it came from.

    ``conflicts_with`` names the earlier document that contributed a
    section with the same title but different text.
    """

    source_document_id: str
    title: str | None
    body: str
    conflicts_with: str | None = None


@dataclasses.dataclass(frozen=True)
class CompositionResult:
    file_path: str
    applied_documents: tuple[str, ...] = ()
    merged_sections: tuple[MergedSection, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.applied_documents

    @property
    def conflicts(self) -> list[MergedSection]:
        return [s for s in self.merged_sections if s.conflicts_with is not None]
