"""Immutable index of guideline documents.

Build one with :meth:`GuidelineIndex.load`; it validates ids and compiles
every scope pattern up front so queries never see a malformed pattern.
"""

from __future__ import annotations

import logging
import types
from typing import TYPE_CHECKING

import tenet.guidelines.errors
import tenet.guidelines.matcher

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from tenet.guidelines.models import GuidelineDocument

logger = logging.getLogger("tenet.guidelines.index")

_Compiled = tuple[tenet.guidelines.matcher.CompiledPattern, ...]


def compile_scope(doc: GuidelineDocument) -> _Compiled:
    """Compile every scope pattern of *doc*, attributing failures to it."""
    out = []
    for pattern in doc.scope_patterns:
        if not isinstance(pattern, str):
            raise tenet.guidelines.errors.InvalidPatternError(
                repr(pattern), "pattern must be a string", doc.id
            )
        try:
            out.append(tenet.guidelines.matcher.compile_pattern(pattern))
        except tenet.guidelines.errors.InvalidPatternError as exc:
            raise exc.for_document(doc.id) from exc
    return tuple(out)


def effective_precedence(doc: GuidelineDocument) -> int:
    """Explicit precedence if set, else the highest pattern specificity."""
    if doc.precedence is not None:
        return doc.precedence
    return max((p.specificity for p in compile_scope(doc)), default=0)


class GuidelineIndex:
    """Read-only set of documents with their compiled scope patterns."""

    __slots__ = ("_documents", "_compiled", "rejected")

    def __init__(
        self,
        documents: Mapping[str, GuidelineDocument],
        compiled: Mapping[str, _Compiled],
        rejected: Mapping[str, tenet.guidelines.errors.InvalidPatternError]
        | None = None,
    ) -> None:
        self._documents = types.MappingProxyType(dict(documents))
        self._compiled = types.MappingProxyType(dict(compiled))
        self.rejected = types.MappingProxyType(dict(rejected or {}))

    @classmethod
    def empty(cls) -> GuidelineIndex:
        return cls({}, {})

    @classmethod
    def load(
        cls,
        documents: Iterable[GuidelineDocument],
        *,
        skip_invalid: bool = False,
    ) -> GuidelineIndex:
        """Validate *documents* and build an index.

        Raises :class:`DuplicateIdError` if two documents share an id and
        :class:`InvalidPatternError` if any pattern fails to compile. With
        *skip_invalid* the documents carrying bad patterns are left out and
        recorded in ``rejected`` instead. Nothing is built on failure.
        """
        accepted: dict[str, GuidelineDocument] = {}
        compiled: dict[str, _Compiled] = {}
        rejected: dict[str, tenet.guidelines.errors.InvalidPatternError] = {}
        seen: set[str] = set()

        for doc in documents:
            if doc.id in seen:
                raise tenet.guidelines.errors.DuplicateIdError(doc.id)
            seen.add(doc.id)
            try:
                compiled[doc.id] = compile_scope(doc)
            except tenet.guidelines.errors.InvalidPatternError as exc:
                rejected[doc.id] = exc
                continue
            accepted[doc.id] = doc

        if rejected and not skip_invalid:
            failures = list(rejected.values())
            first = failures[0]
            raise tenet.guidelines.errors.InvalidPatternError(
                first.pattern, first.reason, first.document_id, errors=failures
            )
        for doc_id, exc in rejected.items():
            logger.warning("Skipping guideline %s: %s", doc_id, exc)

        unscoped = sum(1 for d in accepted.values() if not d.selectable)
        logger.info(
            "Loaded %d guideline document(s) (%d unscoped, %d rejected)",
            len(accepted),
            unscoped,
            len(rejected),
        )
        return cls(accepted, compiled, rejected)

    # -- lookup ------------------------------------------------------------

    @property
    def documents(self) -> list[GuidelineDocument]:
        return list(self._documents.values())

    def get(self, document_id: str) -> GuidelineDocument | None:
        return self._documents.get(document_id)

    def candidates_for(self, file_path: str) -> list[GuidelineDocument]:
        """Return documents with at least one pattern matching *file_path*.

        Order carries no meaning; ranking is the composer's job. A document
        whose matching fails unexpectedly is logged and left out.
        """
        parts = tenet.guidelines.matcher.split_path(file_path)
        found: list[GuidelineDocument] = []
        for doc_id, doc in self._documents.items():
            try:
                hit = any(p.matches_parts(parts) for p in self._compiled[doc_id])
            except Exception as exc:
                err = tenet.guidelines.errors.MatchError(doc_id, file_path)
                logger.warning("%s: %s", err, exc)
                continue
            if hit:
                found.append(doc)
        return found

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[GuidelineDocument]:
        return iter(self._documents.values())

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    def __repr__(self) -> str:
        return f"GuidelineIndex({len(self)} documents)"
