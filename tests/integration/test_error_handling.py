"""Integration tests for the JSON error payloads of unexpected failures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from storefront.dependencies import get_cache
from storefront.main import app


@pytest_asyncio.fixture
async def tolerant_client(client: AsyncClient) -> AsyncClient:
    """API client that returns the 500 response instead of re-raising the server error."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.integration
class TestUnexpectedErrors:
    """Test suite for failures outside the domain error hierarchy."""

    @pytest.mark.asyncio
    async def test_unhandled_exception_is_json(self, tolerant_client: AsyncClient) -> None:
        """Test an arbitrary exception becomes a structured 500."""

        def broken_cache():
            raise RuntimeError("cache factory exploded")

        app.dependency_overrides[get_cache] = broken_cache

        response = await tolerant_client.get("/menu")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    @pytest.mark.asyncio
    async def test_database_error_is_json(self, tolerant_client: AsyncClient) -> None:
        """Test a database failure becomes a structured 500."""

        def broken_cache():
            raise OperationalError("SELECT 1", {}, Exception("connection reset"))

        app.dependency_overrides[get_cache] = broken_cache

        response = await tolerant_client.get("/menu/categories/all")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
