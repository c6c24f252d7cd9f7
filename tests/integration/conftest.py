"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Requires a migrated Postgres and a Redis (``alembic upgrade head``); set
``SC_INTEGRATION=1`` to run.
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-prod")

from src.main import app  # noqa: E402

def pytest_collection_modifyitems(config, items):
    if os.environ.get("SC_INTEGRATION"):
        return
    skip = pytest.mark.skip(reason="set SC_INTEGRATION=1 with Postgres and Redis running")
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
