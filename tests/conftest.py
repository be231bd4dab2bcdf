"""Shared test fixtures for tenet tests."""

from __future__ import annotations

import pathlib

import pytest

import tenet.config
import tenet.guidelines.models


@pytest.fixture(autouse=True)
def isolated_global_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> pathlib.Path:
    """Point the global config file away from the real home directory."""
    path = tmp_path_factory.mktemp("global_config") / "config.toml"
    monkeypatch.setattr(tenet.config, "_global_path", lambda: path)
    return path


@pytest.fixture
def make_doc():
    """Factory for GuidelineDocument records."""

    def _create(
        doc_id: str,
        patterns: tuple[str, ...] | list[str] = (),
        sections: list[tuple[str | None, str]] | None = None,
        *,
        precedence: int | None = None,
        languages: tuple[str, ...] = (),
    ) -> tenet.guidelines.models.GuidelineDocument:
        if sections is None:
            sections = [(None, f"{doc_id} guidance")]
        return tenet.guidelines.models.GuidelineDocument(
            id=doc_id,
            scope_patterns=tuple(patterns),
            body=tuple(tenet.guidelines.models.Section(t, b) for t, b in sections),
            precedence=precedence,
            languages=languages,
        )

    return _create


@pytest.fixture
def guidelines_dir(tmp_path: pathlib.Path):
    """Factory that writes guideline markdown under .tenet/guidelines."""
    base = tmp_path / ".tenet" / "guidelines"

    def _write(name: str, content: str) -> pathlib.Path:
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    _write.base = base  # type: ignore[attr-defined]
    return _write


@pytest.fixture
def persona_corpus(guidelines_dir) -> pathlib.Path:
    """A small corpus shaped like real framework/language persona files."""
    guidelines_dir(
        "typescript.instructions.md",
        """\
---
applyTo: "**/*.ts"
languages: [typescript]
---
# TypeScript

## Best Practices
- Enable strict mode
- Prefer `unknown` over `any`

## Error Handling
- Never swallow rejected promises
""",
    )
    guidelines_dir(
        "angular.instructions.md",
        """\
---
applyTo: "**/*.component.ts, **/*.component.html"
---
# Angular

## Best Practices
- Use standalone components
- Prefer signals for local state

## Accessibility
- Every interactive element needs an accessible name
""",
    )
    guidelines_dir(
        "html.md",
        """\
---
globs: ["**/*.html"]
---
## Accessibility
- Use semantic elements before ARIA roles
""",
    )
    guidelines_dir(
        "notes.md",
        "# Scratch notes\n\nNot scoped to any file.\n",
    )
    return guidelines_dir.base
