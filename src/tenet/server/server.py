"""FastAPI guidance daemon.

Loads the configured guideline directories once at startup and answers
per-file guidance queries for hooks and other host tools.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import pathlib
import time
from typing import TYPE_CHECKING

import fastapi
import uvicorn

import tenet.config
import tenet.guidelines.config
import tenet.guidelines.query
import tenet.server.config
import tenet.server.routes

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
    """Load guidelines before serving requests."""
    init_guidelines(app)
    yield


def create_app(
    config: tenet.server.config.ServerConfig | None = None,
    *,
    root: pathlib.Path | None = None,
    use_lifespan: bool = False,
) -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    if config is None:
        config = tenet.server.config.load_config(root)

    app = fastapi.FastAPI(
        title="Guidance Daemon",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )
    app.include_router(tenet.server.routes.router)

    guidelines_cfg = tenet.guidelines.config.load_config(root)
    app.state.config = config
    app.state.root = tenet.config.find_root(root)
    app.state.start_time = time.time()
    app.state.query = None
    app.state.directories = tenet.guidelines.config.resolve_directories(
        guidelines_cfg, app.state.root
    )
    app.state.skip_invalid = guidelines_cfg.skip_invalid
    return app


def init_guidelines(app: fastapi.FastAPI) -> tenet.guidelines.query.GuidanceQuery:
    """Load guideline directories and attach the query object to app state.

    Load errors propagate so the daemon refuses to start on a bad corpus.
    """
    logger = logging.getLogger("tenet.server")
    for directory in app.state.directories:
        logger.info("[guidelines] Reading %s", directory)
    query = tenet.guidelines.query.GuidanceQuery.from_directories(
        app.state.directories,
        root=app.state.root,
        skip_invalid=app.state.skip_invalid,
    )
    app.state.query = query
    logger.info("[guidelines] Ready (%d documents)", len(query.index))
    return query


def main(argv: list[str] | None = None) -> None:
    """Start the guidance daemon."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
    )
    parser = argparse.ArgumentParser(
        prog="tenet server", description="Tenet guidance daemon"
    )
    parser.add_argument(
        "--host", default=None, help="Interface to bind (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", type=int, default=None, help="Port to listen on (default: 8742)"
    )
    parser.add_argument(
        "--root",
        type=pathlib.Path,
        default=None,
        help="Project root (default: repository root or cwd)",
    )
    parser.add_argument("--log-level", default=None, help="uvicorn log level")
    args = parser.parse_args(argv)

    config = tenet.server.config.load_config(
        args.root, host=args.host, port=args.port, log_level=args.log_level
    )
    app = create_app(config, root=args.root, use_lifespan=True)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level,
        timeout_graceful_shutdown=config.shutdown_timeout,
    )


if __name__ == "__main__":
    main()
