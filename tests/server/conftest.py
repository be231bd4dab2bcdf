"""Shared fixtures for guidance daemon tests."""

from __future__ import annotations

import fastapi.testclient
import httpx
import pytest
import pytest_asyncio

import tenet.server.config
import tenet.server.server


@pytest.fixture
def server_config() -> tenet.server.config.ServerConfig:
    """Standard test config for the guidance daemon."""
    return tenet.server.config.ServerConfig(port=0)


@pytest.fixture
def app(server_config, persona_corpus, tmp_path):
    """Daemon app with the persona corpus loaded."""
    app = tenet.server.server.create_app(server_config, root=tmp_path)
    tenet.server.server.init_guidelines(app)
    return app


@pytest.fixture
def client(app) -> fastapi.testclient.TestClient:
    return fastapi.testclient.TestClient(app)


@pytest_asyncio.fixture
async def async_client(app):
    """Async HTTP client driving the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
