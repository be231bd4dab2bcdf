"""Guideline content store — read guideline markdown files into documents.

Each file is markdown with optional YAML front matter::

    ---
    applyTo: "**/*.component.ts, **/*.component.html"
    precedence: 5
    languages: [typescript]
    ---
    # Angular
    ## Best Practices
    - Prefer standalone components
    ...

The body is split into sections at level 1-3 headings; fenced code blocks
are never split. Scope keys accepted: ``applyTo``, ``globs``, ``patterns``,
``paths``.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib
from typing import TYPE_CHECKING, Any

import yaml

import tenet.guidelines.errors
import tenet.guidelines.models

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger("tenet.guidelines.store")

_SCOPE_KEYS = ("applyTo", "globs", "patterns", "paths")
_ID_SUFFIXES = (".instructions.md", ".md")
_FENCES = ("```", "~~~")


def parse_front_matter(text: str, source: str = "<string>") -> tuple[dict, str]:
    """Split YAML front matter from *text*.

    Returns ``({}, text)`` when there is no front matter block.
    """
    if not text.startswith("---"):
        return {}, text
    lines = text.split("\n")
    if lines[0].strip() != "---":
        return {}, text
    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            break
    else:
        return {}, text

    raw = "\n".join(lines[1:end])
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as exc:
        raise tenet.guidelines.errors.GuidelineLoadError(
            source, f"invalid front matter: {exc}"
        ) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise tenet.guidelines.errors.GuidelineLoadError(
            source, "front matter must be a YAML mapping"
        )
    return data, "\n".join(lines[end + 1 :])


def _split_patterns(value: str) -> list[str]:
    """Split a comma separated pattern list, keeping ``{a,b}`` groups whole."""
    out: list[str] = []
    current: list[str] = []
    depth = 0
    for c in value:
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
        if c == "," and depth <= 0:
            out.append("".join(current))
            current = []
        else:
            current.append(c)
    out.append("".join(current))
    return [p.strip() for p in out if p.strip()]


def _as_list(value: Any, key: str, source: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return _split_patterns(value) if key in _SCOPE_KEYS else [
            v.strip() for v in value.split(",") if v.strip()
        ]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return [v.strip() for v in value if v.strip()]
    raise tenet.guidelines.errors.GuidelineLoadError(
        source, f"{key!r} must be a string or a list of strings"
    )


def _heading(line: str) -> str | None:
    stripped = line.lstrip()
    if len(line) - len(stripped) > 3:
        return None
    level = len(stripped) - len(stripped.lstrip("#"))
    if not 1 <= level <= 3:
        return None
    rest = stripped[level:]
    if rest and not rest[0].isspace():
        return None
    title = rest.strip().rstrip("#").strip()
    return title or None


def split_sections(body: str) -> list[tenet.guidelines.models.Section]:
    """Split markdown *body* into titled sections."""
    sections: list[tenet.guidelines.models.Section] = []
    title: str | None = None
    buf: list[str] = []
    fence: str | None = None

    def flush() -> None:
        text = "\n".join(buf).strip("\n").rstrip()
        if text.strip():
            sections.append(tenet.guidelines.models.Section(title, text))

    for line in body.split("\n"):
        marker = line.lstrip()[:3]
        if fence is None and marker in _FENCES:
            fence = marker
        elif fence is not None and marker == fence:
            fence = None
        elif fence is None:
            heading = _heading(line)
            if heading is not None:
                flush()
                title, buf = heading, []
                continue
        buf.append(line)
    flush()
    return sections


def parse_document(
    text: str,
    doc_id: str,
    source: str | None = None,
) -> tenet.guidelines.models.GuidelineDocument:
    """Parse guideline markdown *text* into a document named *doc_id*."""
    where = source or doc_id
    meta, body = parse_front_matter(text, where)

    patterns: list[str] = []
    for key in _SCOPE_KEYS:
        patterns.extend(_as_list(meta.get(key), key, where))

    precedence = meta.get("precedence")
    if precedence is not None and (
        isinstance(precedence, bool) or not isinstance(precedence, int)
    ):
        raise tenet.guidelines.errors.GuidelineLoadError(
            where, "'precedence' must be an integer"
        )

    explicit_id = meta.get("id")
    if explicit_id is not None and not isinstance(explicit_id, str):
        raise tenet.guidelines.errors.GuidelineLoadError(where, "'id' must be a string")

    return tenet.guidelines.models.GuidelineDocument(
        id=explicit_id or doc_id,
        scope_patterns=tuple(patterns),
        body=tuple(split_sections(body)),
        precedence=precedence,
        languages=tuple(_as_list(meta.get("languages"), "languages", where)),
        source=source,
    )


def document_id(path: pathlib.Path, base: pathlib.Path) -> str:
    """Derive a stable id from *path* relative to *base*."""
    rel = path.relative_to(base).as_posix()
    for suffix in _ID_SUFFIXES:
        if rel.endswith(suffix):
            return rel[: -len(suffix)]
    return rel


def load_file(
    path: pathlib.Path, base: pathlib.Path
) -> tenet.guidelines.models.GuidelineDocument:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise tenet.guidelines.errors.GuidelineLoadError(str(path), str(exc)) from exc
    return parse_document(text, document_id(path, base), source=str(path))


def load_directory(
    directory: pathlib.Path | str,
) -> list[tenet.guidelines.models.GuidelineDocument]:
    """Load every ``*.md`` file under *directory*, sorted by path.

    A missing directory yields no documents.
    """
    base = pathlib.Path(directory)
    if not base.is_dir():
        logger.debug("Guideline directory %s not found, skipping", base)
        return []
    docs = [
        load_file(path, base)
        for path in sorted(base.rglob("*.md"))
        if path.is_file()
    ]
    logger.debug("Read %d guideline file(s) from %s", len(docs), base)
    return docs


def _qualifier(directory: pathlib.Path) -> str:
    """Short name for *directory*: its last two parts, leading dots dropped."""
    parts = [p.lstrip(".") for p in directory.parts[-2:] if p != directory.anchor]
    return "/".join(p for p in parts if p)


def _disambiguate(
    doc: tenet.guidelines.models.GuidelineDocument,
    base: pathlib.Path,
    taken: set[str],
) -> tenet.guidelines.models.GuidelineDocument:
    """Give a file-derived id that is already *taken* a directory prefix.

    Ids set in front matter are left alone so real duplicates still fail
    at index load.
    """
    path = pathlib.Path(doc.source)
    if doc.id not in taken or doc.id != document_id(path, base):
        return doc
    prefix = _qualifier(base)
    for name in (doc.id, path.relative_to(base).as_posix()):
        candidate = f"{prefix}:{name}"
        if candidate not in taken:
            logger.info(
                "Guideline id %r already used, loading %s as %r",
                doc.id, path, candidate,
            )
            return dataclasses.replace(doc, id=candidate)
    return doc


def load_directories(
    directories: Iterable[pathlib.Path | str],
) -> list[tenet.guidelines.models.GuidelineDocument]:
    """Load several directories in order.

    A file whose derived id repeats one loaded earlier (``angular.md`` next
    to ``angular.instructions.md``, or the same name in two directories)
    is renamed ``<dir>:<id>``, e.g. ``github/instructions:angular``.
    """
    docs: list[tenet.guidelines.models.GuidelineDocument] = []
    taken: set[str] = set()
    for directory in directories:
        base = pathlib.Path(directory)
        for doc in load_directory(base):
            doc = _disambiguate(doc, base, taken)
            taken.add(doc.id)
            docs.append(doc)
    return docs
