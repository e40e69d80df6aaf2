"""API test fixtures.

Provides an async HTTP client wired to the FastAPI app with the DI container
overridden to use fakes. Available to all colocated API tests under api/.

Pattern:
    1. Override get_container -> returns test_container (all fakes)
    2. Test hits the endpoint, asserts on HTTP response + fake state
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dirsync.api.deps import get_container


@pytest_asyncio.fixture
async def client(test_container):
    """Async HTTP client with faked DI container."""
    from dirsync.main import app

    app.dependency_overrides[get_container] = lambda: test_container

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
