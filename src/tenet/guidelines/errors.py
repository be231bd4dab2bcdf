"""Exception hierarchy for guideline loading and composition."""

from __future__ import annotations


class GuidelineError(Exception):
    """Base class for all guideline engine errors."""


class InvalidPatternError(GuidelineError):
    """A scope pattern failed to compile.

    Raised while loading an index, never while answering a query. When the
    index collects several failures they are available on ``errors``.
    """

    def __init__(
        self,
        pattern: str,
        reason: str,
        document_id: str | None = None,
        errors: list[InvalidPatternError] | None = None,
    ) -> None:
        self.pattern = pattern
        self.reason = reason
        self.document_id = document_id
        self.errors = errors or [self]
        super().__init__(self._describe())

    def _describe(self) -> str:
        if len(self.errors) > 1:
            ids = ", ".join(sorted({e.document_id or "?" for e in self.errors}))
            return f"{len(self.errors)} invalid scope patterns (documents: {ids})"
        owner = f" in document {self.document_id!r}" if self.document_id else ""
        return f"invalid scope pattern {self.pattern!r}{owner}: {self.reason}"

    def for_document(self, document_id: str) -> InvalidPatternError:
        """Return a copy attributed to *document_id*."""
        return InvalidPatternError(self.pattern, self.reason, document_id)

    @property
    def document_ids(self) -> list[str]:
        return [e.document_id for e in self.errors if e.document_id]


class DuplicateIdError(GuidelineError):
    """Two documents share an id in one load call."""

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(f"duplicate guideline document id: {document_id!r}")


class MatchError(GuidelineError):
    """The matcher failed unexpectedly for one candidate document."""

    def __init__(self, document_id: str, file_path: object) -> None:
        self.document_id = document_id
        self.file_path = file_path
        super().__init__(
            f"matching {file_path!r} against document {document_id!r} failed"
        )


class GuidelineLoadError(GuidelineError):
    """A guideline file could not be parsed into a document."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
