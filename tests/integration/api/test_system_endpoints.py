"""
Integration Tests for System Endpoints
Root, health, metrics and error envelopes
"""

import pytest
from httpx import AsyncClient


@pytest.mark.integration
class TestSystemEndpoints:

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"].startswith("DocVault")
        assert "version" in data

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "API is running"
        assert body["data"]["status"] == "healthy"
        assert body["data"]["services"]["database"] == "healthy"

    @pytest.mark.asyncio
    async def test_metrics_exposition(self, client: AsyncClient, editor, upload_document):
        _, headers = editor
        await upload_document(headers)
        await client.get("/api/health")

        response = await client.get("/api/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text
        assert 'documents_uploaded_total{kind="document"}' in response.text
        assert 'endpoint="/api/health"' in response.text


@pytest.mark.integration
class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/nothing-here")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Not Found"
        assert body["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_wrong_method(self, client: AsyncClient):
        response = await client.patch("/api/health")
        assert response.status_code == 405
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_malformed_json(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/login",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"
