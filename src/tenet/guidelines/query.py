"""Query interface — the entry point a host tool calls per file.

A :class:`GuidanceQuery` holds a reference to the current
:class:`GuidelineIndex`. Queries read that reference once and work on the
snapshot; :meth:`GuidanceQuery.reload` builds a complete new index before
swapping the reference, so concurrent readers see either the old or the new
index, never a partial one.
"""

from __future__ import annotations

import logging
import os
import pathlib
import threading
from typing import TYPE_CHECKING

import tenet.guidelines.composer
import tenet.guidelines.index
import tenet.guidelines.models
import tenet.guidelines.store

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger("tenet.guidelines.query")


class GuidanceQuery:
    def __init__(
        self,
        index: tenet.guidelines.index.GuidelineIndex | None = None,
        *,
        root: pathlib.Path | str | None = None,
    ) -> None:
        self._index = index if index is not None else (
            tenet.guidelines.index.GuidelineIndex.empty()
        )
        self._root = pathlib.Path(root) if root is not None else None
        self._reload_lock = threading.Lock()

    @classmethod
    def from_directories(
        cls,
        directories: Iterable[pathlib.Path | str],
        *,
        root: pathlib.Path | str | None = None,
        skip_invalid: bool = False,
    ) -> GuidanceQuery:
        """Load guideline files from *directories* into a ready query object."""
        documents = tenet.guidelines.store.load_directories(directories)
        index = tenet.guidelines.index.GuidelineIndex.load(
            documents, skip_invalid=skip_invalid
        )
        return cls(index, root=root)

    @property
    def index(self) -> tenet.guidelines.index.GuidelineIndex:
        """The currently published index snapshot."""
        return self._index

    def relative_path(self, file_path: str) -> str:
        """Make an absolute *file_path* under ``root`` relative to it."""
        if self._root is None or not os.path.isabs(file_path):
            return file_path
        try:
            return pathlib.PurePath(file_path).relative_to(self._root).as_posix()
        except ValueError:
            return file_path

    def query(
        self,
        file_path: str,
        *,
        language: str | None = None,
    ) -> tenet.guidelines.models.CompositionResult:
        """Compose the guidance that applies to *file_path*.

        *language* narrows selection to documents that either declare no
        languages or list this one. Never raises; failures give an empty
        result.
        """
        index = self._index
        try:
            key = self.relative_path(file_path)
            candidates = index.candidates_for(key)
            if language:
                lang = language.lower()
                candidates = [
                    doc
                    for doc in candidates
                    if not doc.languages or lang in doc.languages
                ]
            result = tenet.guidelines.composer.compose(key, candidates)
        except Exception:
            logger.error("Guideline query failed for %r", file_path, exc_info=True)
            return tenet.guidelines.models.CompositionResult(file_path=str(file_path))
        if result.file_path != file_path:
            result = tenet.guidelines.models.CompositionResult(
                file_path=file_path,
                applied_documents=result.applied_documents,
                merged_sections=result.merged_sections,
            )
        return result

    def reload(
        self,
        documents: Iterable[tenet.guidelines.models.GuidelineDocument],
        *,
        skip_invalid: bool = False,
    ) -> tenet.guidelines.index.GuidelineIndex:
        """Build a new index from *documents* and publish it.

        Load errors propagate and leave the previous index in place.
        """
        with self._reload_lock:
            index = tenet.guidelines.index.GuidelineIndex.load(
                documents, skip_invalid=skip_invalid
            )
            self._index = index
        logger.info("Published guideline index with %d document(s)", len(index))
        return index

    def reload_from(
        self,
        directories: Iterable[pathlib.Path | str],
        *,
        skip_invalid: bool = False,
    ) -> tenet.guidelines.index.GuidelineIndex:
        """Re-read guideline files from *directories* and publish them."""
        documents = tenet.guidelines.store.load_directories(directories)
        return self.reload(documents, skip_invalid=skip_invalid)
