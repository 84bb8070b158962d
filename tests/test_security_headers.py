"""Tests for the security headers middleware and the debug HTTP server."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from conftest import ALPHA_ID

from dealflow.dev.debug_server import app
from dealflow.middleware.security import (
    SECURITY_HEADERS,
    SecurityHeadersMiddleware,
    parse_cors_origins,
)


def _client(target=app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=target), base_url="http://test")


class TestSecurityHeadersMiddleware:
    """Security headers are added to every debug-server response."""

    @pytest.mark.asyncio
    async def test_all_configured_headers_present(self):
        async with _client() as client:
            response = await client.get("/health")

        assert response.status_code == 200
        for name, value in SECURITY_HEADERS.items():
            assert response.headers[name.lower()] == value

    @pytest.mark.asyncio
    async def test_api_csp_blocks_everything(self):
        async with _client() as client:
            response = await client.get("/health")
        csp = response.headers["content-security-policy"]
        assert "default-src 'none'" in csp
        assert "frame-ancestors 'none'" in csp

    @pytest.mark.asyncio
    async def test_docs_get_a_relaxed_csp(self):
        async with _client() as client:
            response = await client.get("/docs")
        assert "cdn.jsdelivr.net" in response.headers["content-security-policy"]

    @pytest.mark.asyncio
    async def test_request_id_header(self):
        """X-Request-ID is present and is a UUID."""
        async with _client() as client:
            response = await client.get("/health")
        request_id = response.headers["x-request-id"]
        assert len(request_id) == 36
        assert request_id.count("-") == 4

    @pytest.mark.asyncio
    async def test_request_id_is_unique(self):
        async with _client() as client:
            id1 = (await client.get("/health")).headers["x-request-id"]
            id2 = (await client.get("/health")).headers["x-request-id"]
        assert id1 != id2

    @pytest.mark.asyncio
    async def test_incoming_request_id_is_echoed(self):
        async with _client() as client:
            response = await client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["x-request-id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_disabled_middleware_only_sets_request_id(self):
        bare = FastAPI()
        bare.add_middleware(SecurityHeadersMiddleware, enabled=False)

        @bare.get("/ping")
        async def ping():
            return {"pong": True}

        async with _client(bare) as client:
            response = await client.get("/ping")
        assert "x-request-id" in response.headers
        assert "x-frame-options" not in response.headers


class TestCORSMiddleware:
    @pytest.mark.asyncio
    async def test_preflight_has_cors_headers(self):
        async with _client() as client:
            response = await client.options(
                "/health",
                headers={
                    "Origin": "http://localhost:3000",
                    "Access-Control-Request-Method": "GET",
                },
            )
        assert "access-control-allow-origin" in response.headers


class TestParseCorsOrigins:
    def test_parse_wildcard(self):
        assert parse_cors_origins("*") == ["*"]

    def test_parse_multiple_origins(self):
        result = parse_cors_origins("  https://app1.com  ,  https://app2.com  ")
        assert result == ["https://app1.com", "https://app2.com"]

    def test_parse_empty_string(self):
        assert parse_cors_origins("") == []

    def test_parse_with_empty_items(self):
        assert parse_cors_origins("https://app1.com,,https://app2.com") == [
            "https://app1.com",
            "https://app2.com",
        ]


class TestDebugRoutes:
    @pytest.mark.asyncio
    async def test_health(self):
        async with _client() as client:
            response = await client.get("/health")
        assert response.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_list_companies_route_accepts_camel_case(self, seeded_session, patched_store):
        async with _client() as client:
            response = await client.get(
                "/debug/list_companies", params={"approvalStatus": "Approved"}
            )
        body = response.json()
        assert body["ok"] is True
        assert [c["name"] for c in body["data"]["companies"]] == ["Alpha Corp"]

    @pytest.mark.asyncio
    async def test_call_route_dispatches_writes(self, seeded_session, patched_store):
        async with _client() as client:
            response = await client.post(
                "/debug/call/add_comment",
                json={"company_id": str(ALPHA_ID), "content": "Posted over HTTP"},
            )
        assert response.status_code == 200
        assert response.json()["data"]["content"] == "Posted over HTTP"

    @pytest.mark.asyncio
    async def test_call_route_unknown_tool(self):
        async with _client() as client:
            response = await client.post("/debug/call/drop_tables", json={})
        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "UNKNOWN_TOOL"
