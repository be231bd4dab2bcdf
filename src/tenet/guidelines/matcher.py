"""Scope matcher — glob patterns that decide which files a document covers.

Grammar (matched against the whole normalized path, case-sensitive)::

    *        any run of characters except ``/``
    **       as a whole segment: zero or more path segments
    ?        exactly one character except ``/``
    [abc]    one character from the set; ranges (``a-z``) and negation
             (``[!x]`` / ``[^x]``) are supported
    {a,b}    alternation, expanded before matching (not nested)
    \\x       the literal character ``x``

Malformed patterns raise :class:`InvalidPatternError` from
:func:`compile_pattern`; matching itself never validates.
"""

from __future__ import annotations

import functools

import tenet.guidelines.errors

SEPARATOR = "/"

# Token kinds within a single path segment.
_LIT = 0
_STAR = 1
_ONE = 2
_CLASS = 3

# Sentinel segment for ``**``.
GLOBSTAR = ("**",)

_WILDCARD_KINDS = frozenset({_STAR, _ONE, _CLASS})


def normalize_path(path: str) -> str:
    """Return *path* with ``/`` separators and no empty or ``.`` segments.

    ``..`` removes the segment before it; a leading ``..`` is kept.
    """
    parts: list[str] = []
    for part in path.replace("\\", SEPARATOR).split(SEPARATOR):
        if not part or part == ".":
            continue
        if part == ".." and parts and parts[-1] != "..":
            parts.pop()
        else:
            parts.append(part)
    return SEPARATOR.join(parts)


def split_path(path: str) -> tuple[str, ...]:
    """Split a path into normalized segments."""
    normalized = normalize_path(path)
    return tuple(normalized.split(SEPARATOR)) if normalized else ()


# ---------------------------------------------------------------------------
# Brace expansion
# ---------------------------------------------------------------------------

def _expand_braces(pattern: str) -> list[str]:
    """Expand the first top-level ``{a,b}`` group, recursing on the rest."""
    i = 0
    in_class = False
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if in_class:
            if c == "]":
                in_class = False
        elif c == "[":
            in_class = True
            # A ``]`` right after ``[`` or ``[!`` is a literal member.
            if pattern[i + 1 : i + 2] in ("!", "^"):
                i += 1
            if pattern[i + 1 : i + 2] == "]":
                i += 1
        elif c == "}":
            raise tenet.guidelines.errors.InvalidPatternError(
                pattern, "unbalanced '}'"
            )
        elif c == "{":
            close, options = _scan_brace_group(pattern, i)
            prefix, suffix = pattern[:i], pattern[close + 1 :]
            return [
                prefix + option + rest
                for option in options
                for rest in _expand_braces(suffix)
            ]
        i += 1
    return [pattern]


def _scan_brace_group(pattern: str, start: int) -> tuple[int, list[str]]:
    options: list[str] = []
    current: list[str] = []
    i = start + 1
    while i < len(pattern):
        c = pattern[i]
        if c == "\\" and i + 1 < len(pattern):
            current.append(pattern[i : i + 2])
            i += 2
            continue
        if c == "{":
            raise tenet.guidelines.errors.InvalidPatternError(
                pattern, "nested '{' is not supported"
            )
        if c == ",":
            options.append("".join(current))
            current = []
        elif c == "}":
            options.append("".join(current))
            return i, options
        else:
            current.append(c)
        i += 1
    raise tenet.guidelines.errors.InvalidPatternError(
        pattern, "unbalanced '{'"
    )


# ---------------------------------------------------------------------------
# Segment compilation
# ---------------------------------------------------------------------------

def _split_segments(pattern: str) -> list[str]:
    """Split on unescaped separators, dropping empty and ``.`` segments."""
    segments: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\" and i + 1 < len(pattern):
            current.append(pattern[i : i + 2])
            i += 2
            continue
        if c == SEPARATOR:
            segments.append("".join(current))
            current = []
        else:
            current.append(c)
        i += 1
    segments.append("".join(current))
    return [s for s in segments if s and s != "."]


def _parse_class(pattern: str, seg: str, start: int) -> tuple[int, tuple]:
    """Parse ``[...]`` starting at *start*; return (next index, token)."""
    i = start + 1
    negate = False
    if i < len(seg) and seg[i] in ("!", "^"):
        negate = True
        i += 1
    ranges: list[tuple[str, str]] = []
    first = True
    while i < len(seg):
        c = seg[i]
        if c == "]" and not first:
            return i + 1, (_CLASS, (negate, tuple(ranges)))
        first = False
        if c == "\\":
            if i + 1 >= len(seg):
                raise tenet.guidelines.errors.InvalidPatternError(
                    pattern, "trailing escape in character class"
                )
            c = seg[i + 1]
            i += 1
        lo = c
        if seg[i + 1 : i + 2] == "-" and i + 2 < len(seg) and seg[i + 2] != "]":
            hi = seg[i + 2]
            if hi == "\\":
                if i + 3 >= len(seg):
                    raise tenet.guidelines.errors.InvalidPatternError(
                        pattern, "trailing escape in character class"
                    )
                hi = seg[i + 3]
                i += 1
            if hi < lo:
                raise tenet.guidelines.errors.InvalidPatternError(
                    pattern, f"invalid range {lo}-{hi}"
                )
            ranges.append((lo, hi))
            i += 3
        else:
            ranges.append((lo, lo))
            i += 1
    raise tenet.guidelines.errors.InvalidPatternError(
        pattern, "unbalanced '['"
    )


def _compile_segment(pattern: str, seg: str) -> tuple:
    if seg == "**":
        return GLOBSTAR
    tokens: list[tuple] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            tokens.append((_LIT, "".join(literal)))
            literal.clear()

    i = 0
    while i < len(seg):
        c = seg[i]
        if c == "\\":
            if i + 1 >= len(seg):
                raise tenet.guidelines.errors.InvalidPatternError(
                    pattern, "trailing escape character"
                )
            literal.append(seg[i + 1])
            i += 2
        elif c == "*":
            if seg[i + 1 : i + 2] == "*":
                raise tenet.guidelines.errors.InvalidPatternError(
                    pattern, "'**' must be a whole path segment"
                )
            flush()
            tokens.append((_STAR, None))
            i += 1
        elif c == "?":
            flush()
            tokens.append((_ONE, None))
            i += 1
        elif c == "[":
            flush()
            i, token = _parse_class(pattern, seg, i)
            tokens.append(token)
        elif c == "]":
            raise tenet.guidelines.errors.InvalidPatternError(
                pattern, "unbalanced ']'"
            )
        else:
            literal.append(c)
            i += 1
    flush()
    return tuple(tokens)


def _segment_specificity(segments: tuple[tuple, ...]) -> int:
    """Literal segments, plus one per extra dot-qualifier in the suffix."""
    score = 0
    for seg in segments:
        if seg is GLOBSTAR:
            continue
        if not any(kind in _WILDCARD_KINDS for kind, _ in seg):
            score += 1
    if segments and segments[-1] is not GLOBSTAR:
        last = segments[-1]
        has_wildcard = any(kind in _WILDCARD_KINDS for kind, _ in last)
        if has_wildcard and last[-1][0] == _LIT and "." in last[-1][1]:
            score += last[-1][1].count(".") - 1
    return score


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def _class_hit(members: tuple, ch: str) -> bool:
    negate, ranges = members
    hit = any(lo <= ch <= hi for lo, hi in ranges)
    return hit != negate


def _match_segment(tokens: tuple, text: str) -> bool:
    ti = 0
    pi = 0
    star_pi = -1
    star_ti = 0
    n = len(text)
    while ti < n:
        if pi < len(tokens):
            kind, arg = tokens[pi]
            if kind == _STAR:
                star_pi, star_ti = pi, ti
                pi += 1
                continue
            if kind == _LIT and text.startswith(arg, ti):
                ti += len(arg)
                pi += 1
                continue
            if kind == _ONE or (kind == _CLASS and _class_hit(arg, text[ti])):
                ti += 1
                pi += 1
                continue
        if star_pi < 0:
            return False
        star_ti += 1
        ti = star_ti
        pi = star_pi + 1
    while pi < len(tokens) and tokens[pi][0] == _STAR:
        pi += 1
    return pi == len(tokens)


def _match_segments(segments: tuple[tuple, ...], parts: tuple[str, ...]) -> bool:
    # (segment index, path index) pairs already known not to match, so each
    # ``**`` resumption point is tried at most once.
    failed: set[tuple[int, int]] = set()

    def walk(pi: int, si: int) -> bool:
        while pi < len(segments):
            seg = segments[pi]
            if seg is GLOBSTAR:
                while pi + 1 < len(segments) and segments[pi + 1] is GLOBSTAR:
                    pi += 1
                if pi + 1 == len(segments):
                    return True
                for k in range(si, len(parts) + 1):
                    if (pi + 1, k) in failed:
                        continue
                    if walk(pi + 1, k):
                        return True
                    failed.add((pi + 1, k))
                return False
            if si >= len(parts) or not _match_segment(seg, parts[si]):
                return False
            pi += 1
            si += 1
        return si == len(parts)

    return walk(0, 0)


class CompiledPattern:
    """A validated scope pattern ready for repeated matching."""

    __slots__ = ("source", "alternatives", "scores", "specificity")

    def __init__(
        self, source: str, alternatives: tuple[tuple[tuple, ...], ...]
    ) -> None:
        self.source = source
        self.alternatives = alternatives
        self.scores = tuple(_segment_specificity(alt) for alt in alternatives)
        self.specificity = min(self.scores, default=0)

    def matches_parts(self, parts: tuple[str, ...]) -> bool:
        """Match already-split path segments (see :func:`split_path`)."""
        return any(_match_segments(alt, parts) for alt in self.alternatives)

    def match_specificity(self, parts: tuple[str, ...]) -> int | None:
        """Score of the narrowest alternative matching *parts*, else None."""
        hits = [
            score
            for alt, score in zip(self.alternatives, self.scores)
            if _match_segments(alt, parts)
        ]
        return max(hits, default=None)

    def matches(self, file_path: str) -> bool:
        return self.matches_parts(split_path(file_path))

    def __repr__(self) -> str:
        return f"CompiledPattern({self.source!r}, specificity={self.specificity})"


@functools.lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> CompiledPattern:
    """Validate and compile *pattern*.

    An empty (or blank) pattern compiles to a pattern that matches nothing.
    """
    if not pattern.strip():
        return CompiledPattern(pattern, ())
    alternatives = []
    for expanded in _expand_braces(pattern):
        segments = tuple(
            _compile_segment(pattern, seg) for seg in _split_segments(expanded)
        )
        if segments:
            alternatives.append(segments)
    return CompiledPattern(pattern, tuple(alternatives))


def matches(pattern: str, file_path: str) -> bool:
    """Return True if *file_path* is covered by *pattern*."""
    return compile_pattern(pattern).matches(file_path)


def specificity(pattern: str) -> int:
    """Return the ordering score of *pattern* (higher is narrower)."""
    return compile_pattern(pattern).specificity
