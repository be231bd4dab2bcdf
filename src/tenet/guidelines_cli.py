"""CLI for inspecting guideline documents and their composition.

Usage:
    tenet guidelines list [--path DIR]           List loaded documents and scopes
    tenet guidelines check [--path DIR]          Validate ids and scope patterns
    tenet guidelines query <file> [--json]       Show composed guidance for a file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import tenet.guidelines.config
import tenet.guidelines.errors
import tenet.guidelines.index
import tenet.guidelines.query
import tenet.guidelines.render
import tenet.guidelines.store


def _load(root: Path, *, skip_invalid: bool | None = None):
    cfg = tenet.guidelines.config.load_config(root)
    directories = tenet.guidelines.config.resolve_directories(cfg, root)
    documents = tenet.guidelines.store.load_directories(directories)
    if skip_invalid is None:
        skip_invalid = cfg.skip_invalid
    return tenet.guidelines.index.GuidelineIndex.load(
        documents, skip_invalid=skip_invalid
    ), cfg


def cmd_list(root: Path) -> int:
    """Print a table of loaded documents."""
    try:
        index, cfg = _load(root)
    except tenet.guidelines.errors.GuidelineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not len(index):
        print("No guideline documents found.")
        print(f"Scanned: {', '.join(cfg.directories)}")
        return 0

    print(f"{'Document':<40s} {'Prec':>4s} {'Secs':>4s}  Scope")
    print(f"{'─' * 40} {'─' * 4} {'─' * 4}  {'─' * 30}")
    for doc in sorted(index, key=lambda d: d.id):
        precedence = tenet.guidelines.index.effective_precedence(doc)
        scope = ", ".join(doc.scope_patterns) or "(unscoped)"
        print(f"{doc.id:<40s} {precedence:>4d} {len(doc.body):>4d}  {scope}")
    print(f"\n{len(index)} document(s).")
    return 0


def cmd_check(root: Path) -> int:
    """Load every document and report the ones that cannot be used."""
    try:
        index, _ = _load(root, skip_invalid=True)
    except tenet.guidelines.errors.GuidelineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    issues = 0
    for doc_id, exc in sorted(index.rejected.items()):
        print(f"  invalid: {doc_id}: {exc.pattern!r} ({exc.reason})")
        issues += 1
    for doc in sorted(index, key=lambda d: d.id):
        if not doc.selectable:
            print(f"  unscoped: {doc.id} (never selected automatically)")

    if issues:
        print(f"{issues} issue(s) found.")
        return 1
    print(f"All good. {len(index)} document(s) valid.")
    return 0


def cmd_query(
    file_path: str,
    root: Path,
    *,
    language: str | None = None,
    as_json: bool = False,
) -> int:
    """Print the composed guidance for *file_path*."""
    try:
        index, _ = _load(root)
    except tenet.guidelines.errors.GuidelineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    query = tenet.guidelines.query.GuidanceQuery(index, root=root)
    result = query.query(file_path, language=language)

    if as_json:
        print(json.dumps(tenet.guidelines.render.as_dict(result), indent=2))
        return 0

    if result.empty:
        print(f"No guidelines apply to {file_path}.")
        return 0
    print(tenet.guidelines.render.as_context(result))
    for section in result.conflicts:
        print(
            f"warning: {section.source_document_id} section "
            f"{section.title!r} conflicts with {section.conflicts_with}",
            file=sys.stderr,
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``tenet guidelines``."""
    parser = argparse.ArgumentParser(
        prog="tenet guidelines",
        description="Inspect guideline documents and composed guidance.",
    )
    sub = parser.add_subparsers(dest="subcmd")

    p_list = sub.add_parser("list", help="List loaded documents")
    p_list.add_argument("--path", type=Path, default=Path.cwd(), help="Project root")

    p_check = sub.add_parser("check", help="Validate documents and patterns")
    p_check.add_argument("--path", type=Path, default=Path.cwd(), help="Project root")

    p_query = sub.add_parser("query", help="Show guidance for a file")
    p_query.add_argument("file", help="File path (need not exist)")
    p_query.add_argument("--language", default=None, help="Language hint")
    p_query.add_argument("--json", action="store_true", help="Print JSON")
    p_query.add_argument("--path", type=Path, default=Path.cwd(), help="Project root")
    p_query.add_argument("--verbose", action="store_true", help="Log selection details")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if args.subcmd is None:
        parser.print_help()
        return 1

    if args.subcmd == "list":
        return cmd_list(args.path)
    elif args.subcmd == "check":
        return cmd_check(args.path)
    elif args.subcmd == "query":
        return cmd_query(
            args.file, args.path, language=args.language, as_json=args.json
        )
    else:
        parser.print_help()
        return 1
