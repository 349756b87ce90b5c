"""
Pytest configuration and fixtures for the editing API tests.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ.setdefault("SITEBUILDER_DEFAULT_TIER", "free")
os.environ.setdefault("SITEBUILDER_MAX_SESSIONS", "50")

import httpx  # noqa: E402
import pytest_asyncio  # noqa: E402

from sitebuilder.api.main import create_app  # noqa: E402


@pytest_asyncio.fixture(loop_scope="session")
async def app():
    """Fresh app per test: its own session registry and MemoryStorage."""
    return create_app()


@pytest_asyncio.fixture(loop_scope="session")
async def async_client(app):
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture(loop_scope="session")
async def session_id(async_client):
    """An open session on a page with navbar, one text element and footer."""
    res = await async_client.post(
        "/api/sessions",
        json={
            "elements": [
                {"id": "nav", "type": "navbar"},
                {"id": "A", "type": "text", "content": "Hello"},
                {"id": "box", "type": "container", "children": [{"id": "B", "type": "text"}]},
                {"id": "foot", "type": "footer"},
            ],
        },
    )
    assert res.status_code == 201
    return res.json()["session_id"]
