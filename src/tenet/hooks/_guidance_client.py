"""Guidance lookup for hooks — daemon first, in-process fallback.

Used by the PreToolUse hook. Every function here swallows failures and
returns ``None``: a hook must never break the tool call it decorates.
"""

from __future__ import annotations

import logging
import pathlib

import httpx

import tenet.config
import tenet.guidelines.config
import tenet.guidelines.errors
import tenet.guidelines.models
import tenet.guidelines.query
import tenet.guidelines.render
import tenet.hooks.config

logger = logging.getLogger("tenet.hooks")


def hooks_cfg(root: pathlib.Path | None = None) -> tenet.hooks.config.HooksConfig:
    return tenet.config.load("hooks", root)


def project_root(cwd: pathlib.Path) -> pathlib.Path:
    found = tenet.config.find_repo_root(cwd)
    return found if found is not None else cwd


def daemon_url(root: pathlib.Path | None = None) -> str:
    """Return the guidance daemon base URL."""
    cfg = hooks_cfg(root)
    return f"http://{cfg.daemon_host}:{cfg.daemon_port}"


def fetch_guidance(
    file_path: str,
    *,
    root: pathlib.Path | None = None,
    language: str | None = None,
) -> tenet.guidelines.models.CompositionResult | None:
    """Ask the daemon for the guidance of *file_path*."""
    cfg = hooks_cfg(root)
    payload: dict = {"filePath": file_path}
    if language:
        payload["language"] = language
    try:
        resp = httpx.post(
            f"{daemon_url(root)}/query", json=payload, timeout=cfg.daemon_timeout
        )
        if resp.status_code == 200:
            return tenet.guidelines.render.from_dict(resp.json())
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError):
        logger.debug("Guidance daemon unavailable", exc_info=True)
    return None


def local_guidance(
    file_path: str,
    *,
    root: pathlib.Path,
    language: str | None = None,
) -> tenet.guidelines.models.CompositionResult | None:
    """Load the project's guidelines in-process and compose for *file_path*."""
    cfg = tenet.guidelines.config.load_config(root)
    directories = tenet.guidelines.config.resolve_directories(cfg, root)
    try:
        query = tenet.guidelines.query.GuidanceQuery.from_directories(
            directories, root=root, skip_invalid=cfg.skip_invalid
        )
    except tenet.guidelines.errors.GuidelineError as exc:
        logger.debug("Local guideline load failed: %s", exc)
        return None
    return query.query(file_path, language=language)


def guidance_for(
    file_path: str,
    cwd: pathlib.Path,
    *,
    language: str | None = None,
) -> tenet.guidelines.models.CompositionResult | None:
    """Resolve guidance for *file_path*, via daemon or local fallback."""
    root = project_root(cwd)
    result = fetch_guidance(file_path, root=root, language=language)
    if result is None and hooks_cfg(root).fallback_local:
        result = local_guidance(file_path, root=root, language=language)
    return result
