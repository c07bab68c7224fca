"""End-to-end tests for the supply endpoints through the FastAPI app.

Real resolver, fetcher, RPC client and cache are wired together; only the
Solana endpoints are replaced by an httpx.MockTransport and the cache by an
in-memory store.
"""

import json

import httpx
import pytest

from src.cs_supply.api.dependencies import get_supply_service
from src.cs_supply.application.service import SupplyApplicationService
from src.cs_supply.domain.models import SupplyParams
from src.cs_supply.infrastructure.balance_fetcher import BalanceFetcher
from src.cs_supply.infrastructure.cache_store import InMemoryCacheStore
from src.cs_supply.infrastructure.config_resolver import ConfigResolver
from src.cs_supply.infrastructure.result_cache import ResultCache
from src.cs_supply.infrastructure.rpc_client import RpcClient
from src.main import app
from tests.rpc_fixtures import MINT, POOL, rpc_ok, token_accounts_result

TOTAL = 21_000_000_000_000


class _Upstream:
    """Scripted Solana endpoints keyed by host; records every attempt."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.seen: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.seen.append(request.url.host)
        return self.routes[request.url.host](request)


def _down(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


class _BrokenService:
    def __init__(self, error: Exception) -> None:
        self._error = error

    async def get_supply(self):
        raise self._error


@pytest.fixture
def wire(write_config, tmp_path):
    """Install a service built from the given upstream into the app."""
    clients: list[httpx.AsyncClient] = []

    def _wire(upstream: _Upstream, config_path=None) -> SupplyApplicationService:
        if config_path is None:
            config_path = write_config(
                {
                    "rpcUrl": "https://a.example",
                    "fallbackRpcUrls": ["https://b.example", "https://c.example"],
                    "provider": "chainstack",
                }
            )
        http = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        clients.append(http)
        service = SupplyApplicationService(
            params=SupplyParams(
                pool_address=POOL,
                token_mint=MINT,
                decimals=2,
                total_supply=TOTAL,
                cache_key="supply",
                cache_ttl=300,
            ),
            cache=ResultCache(InMemoryCacheStore(), fallback_ttl=60),
            resolver=ConfigResolver.from_paths([tmp_path / "missing.json", config_path]),
            fetcher=BalanceFetcher(RpcClient(timeout=15, http_client=http)),
        )
        app.dependency_overrides[get_supply_service] = lambda: service
        return service

    yield _wire
    app.dependency_overrides.clear()


class TestPlainFormat:
    @pytest.mark.asyncio
    async def test_bare_number(self, client, wire) -> None:
        wire(_Upstream({"a.example": lambda r: rpc_ok(token_accounts_result("500"))}))

        resp = await client.get("/circulating-supply")

        assert resp.status_code == 200
        assert resp.text == "20999999999995"
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["access-control-allow-methods"] == "GET"

    @pytest.mark.asyncio
    async def test_legacy_path(self, client, wire) -> None:
        wire(_Upstream({"a.example": lambda r: rpc_ok(token_accounts_result("500"))}))

        resp = await client.get("/api/circulating-supply")

        assert resp.text == "20999999999995"

    @pytest.mark.asyncio
    async def test_unknown_format_is_plain(self, client, wire) -> None:
        wire(_Upstream({"a.example": lambda r: rpc_ok({"value": []})}))

        resp = await client.get("/circulating-supply", params={"format": "xml"})

        assert resp.text == str(TOTAL)

    @pytest.mark.asyncio
    async def test_all_upstreams_down_returns_zero(self, client, wire) -> None:
        upstream = _Upstream({"a.example": _down, "b.example": _down, "c.example": _down})
        wire(upstream)

        resp = await client.get("/circulating-supply")

        assert resp.status_code == 200
        assert resp.text == "0"
        assert upstream.seen == ["a.example", "b.example", "c.example"]


class TestJsonFormat:
    @pytest.mark.asyncio
    async def test_full_result(self, client, wire) -> None:
        wire(_Upstream({"a.example": lambda r: rpc_ok(token_accounts_result("500"))}))

        resp = await client.get("/circulating-supply", params={"format": "json"})

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/json"
        body = resp.json()
        assert body["circulating_supply"] == 20_999_999_999_995
        assert body["total_supply"] == TOTAL
        assert body["locked_in_pool"] == 5
        assert body["pool_address"] == POOL
        assert body["tsat_token"] == MINT
        assert body["rpc_provider"] == "chainstack"
        assert isinstance(body["timestamp"], int)
        assert "last_updated" in body
        assert "error" not in body
        assert "fallback" not in body

    @pytest.mark.asyncio
    async def test_format_full_alias(self, client, wire) -> None:
        wire(_Upstream({"a.example": lambda r: rpc_ok(token_accounts_result("500"))}))

        resp = await client.get("/circulating-supply", params={"format": "full"})

        assert resp.json()["locked_in_pool"] == 5

    @pytest.mark.asyncio
    async def test_fallback_order_and_result(self, client, wire) -> None:
        upstream = _Upstream(
            {
                "a.example": _down,
                "b.example": lambda r: httpx.Response(429),
                "c.example": lambda r: rpc_ok(token_accounts_result("700")),
            }
        )
        wire(upstream)

        resp = await client.get("/circulating-supply", params={"format": "json"})

        assert upstream.seen == ["a.example", "b.example", "c.example"]
        assert resp.json()["locked_in_pool"] == 7

    @pytest.mark.asyncio
    async def test_total_failure_is_degraded_200(self, client, wire) -> None:
        wire(_Upstream({"a.example": _down, "b.example": _down, "c.example": _down}))

        resp = await client.get("/circulating-supply", params={"format": "json"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["circulating_supply"] == 0
        assert body["locked_in_pool"] == TOTAL
        assert body["fallback"] is True
        assert "connection refused" in body["error"]

    @pytest.mark.asyncio
    async def test_missing_config_is_degraded_200(self, client, wire, tmp_path) -> None:
        upstream = _Upstream({})
        wire(upstream, config_path=tmp_path / "also-missing.json")

        resp = await client.get("/circulating-supply", params={"format": "json"})

        assert resp.status_code == 200
        assert resp.json()["error"] == "Config file not found"
        assert upstream.seen == []

    @pytest.mark.asyncio
    async def test_second_request_served_from_cache(self, client, wire) -> None:
        upstream = _Upstream({"a.example": lambda r: rpc_ok(token_accounts_result("500"))})
        wire(upstream)

        first = await client.get("/circulating-supply", params={"format": "json"})
        second = await client.get("/circulating-supply", params={"format": "json"})

        assert second.json() == first.json()
        assert upstream.seen == ["a.example"]


class TestMethodNotAllowed:
    @pytest.mark.asyncio
    async def test_post_json(self, client, wire) -> None:
        upstream = _Upstream({})
        wire(upstream)

        resp = await client.post("/circulating-supply", params={"format": "json"})

        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed"}
        assert upstream.seen == []

    @pytest.mark.asyncio
    async def test_post_plain(self, client, wire) -> None:
        wire(_Upstream({}))

        resp = await client.post("/circulating-supply")

        assert resp.status_code == 405
        assert resp.text == "Method not allowed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["PUT", "DELETE", "PATCH"])
    async def test_other_methods(self, client, wire, method: str) -> None:
        wire(_Upstream({}))

        resp = await client.request(method, "/api/circulating-supply")

        assert resp.status_code == 405

    @pytest.mark.asyncio
    async def test_unregistered_method_json(self, client, wire) -> None:
        upstream = _Upstream({})
        wire(upstream)

        resp = await client.request("TRACE", "/circulating-supply", params={"format": "json"})

        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed"}
        assert resp.headers["access-control-allow-origin"] == "*"
        assert upstream.seen == []

    @pytest.mark.asyncio
    async def test_unregistered_method_plain(self, client, wire) -> None:
        wire(_Upstream({}))

        resp = await client.request("TRACE", "/api/circulating-supply")

        assert resp.status_code == 405
        assert resp.text == "Method not allowed"
        assert resp.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_unregistered_method_debug(self, client, wire) -> None:
        wire(_Upstream({}))

        resp = await client.request("TRACE", "/circulating-supply/debug")

        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed"}

    @pytest.mark.asyncio
    async def test_unknown_path_keeps_default_404(self, client) -> None:
        resp = await client.get("/no-such-path")

        assert resp.status_code == 404
        assert resp.json() == {"detail": "Not Found"}


class TestInternalFailure:
    @pytest.mark.asyncio
    async def test_plain_returns_zero(self, client) -> None:
        broken = _BrokenService(RuntimeError("disk on fire"))
        app.dependency_overrides[get_supply_service] = lambda: broken
        try:
            resp = await client.get("/circulating-supply")
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 500
        assert resp.text == "0"

    @pytest.mark.asyncio
    async def test_json_returns_error(self, client) -> None:
        broken = _BrokenService(RuntimeError("disk on fire"))
        app.dependency_overrides[get_supply_service] = lambda: broken
        try:
            resp = await client.get("/circulating-supply", params={"format": "json"})
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error", "message": "disk on fire"}


class TestDebugEndpoint:
    @pytest.mark.asyncio
    async def test_success_trace(self, client, wire) -> None:
        wire(_Upstream({"a.example": lambda r: rpc_ok(token_accounts_result("500"))}))

        resp = await client.get("/circulating-supply/debug")

        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["circulating_supply"] == 20_999_999_999_995
        assert "Raw amount: 500" in body["debug"]
        assert "RPC call successful" in body["debug"]

    @pytest.mark.asyncio
    async def test_never_cached(self, client, wire) -> None:
        upstream = _Upstream({"a.example": lambda r: rpc_ok(token_accounts_result("500"))})
        wire(upstream)

        await client.get("/circulating-supply/debug")
        await client.get("/circulating-supply/debug")

        assert upstream.seen == ["a.example", "a.example"]

    @pytest.mark.asyncio
    async def test_failure_report(self, client, wire) -> None:
        wire(_Upstream({"a.example": _down, "b.example": _down, "c.example": _down}))

        body = (await client.get("/circulating-supply/debug")).json()

        assert body["success"] is False
        assert body["circulating_supply"] == 0
        assert body["debug"][-1].startswith("Exception caught:")

    @pytest.mark.asyncio
    async def test_post_rejected(self, client, wire) -> None:
        wire(_Upstream({}))

        resp = await client.post("/circulating-supply/debug")

        assert resp.status_code == 405
        assert json.loads(resp.text) == {"error": "Method not allowed"}


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client) -> None:
        resp = await client.get("/health")
        assert resp.json() == {"status": "ok", "version": "0.1.0"}


class TestRequestLog:
    @pytest.mark.asyncio
    async def test_request_id_header(self, client) -> None:
        resp = await client.get("/health")
        assert resp.headers["x-request-id"].startswith("req_")
