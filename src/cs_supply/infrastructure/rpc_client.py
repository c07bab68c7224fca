"""Solana JSON-RPC client with sequential endpoint fallback.

Endpoints are tried one at a time: primary first, then each fallback in
listed order. A failing endpoint is never retried; the first success stops
the iteration. Only the most recent failure is reported when every
endpoint has failed.
"""

import logging
from typing import Any

import httpx

from src.cs_common.errors import (
    AppError,
    RpcExhaustedError,
    RpcProtocolError,
    RpcTransportError,
)
from src.cs_supply.domain.models import Configuration, DebugTrace

logger = logging.getLogger(__name__)

REQUEST_ID = 1
DEFAULT_TIMEOUT_SECONDS = 15.0


def build_envelope(method: str, params: list[Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": REQUEST_ID,
        "method": method,
        "params": params,
    }


class RpcClient:
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._http = http_client

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout, verify=True)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def call(
        self,
        method: str,
        params: list[Any],
        config: Configuration,
        trace: DebugTrace | None = None,
    ) -> Any:
        envelope = build_envelope(method, params)
        last_error: AppError | None = None

        for url in config.endpoints:
            if trace is not None:
                trace.add(f"Calling {method} on {url}")
            try:
                result = await self._call_endpoint(url, envelope)
            except (RpcTransportError, RpcProtocolError) as exc:
                logger.warning("RPC %s failed on %s: %s", method, url, exc.message)
                if trace is not None:
                    trace.add(f"Failed: {exc.message}")
                last_error = exc
                continue
            if trace is not None:
                trace.add("RPC call successful")
            return result

        logger.error(
            "RPC %s failed on all %d endpoint(s)", method, len(config.endpoints)
        )
        raise RpcExhaustedError(last_error)

    async def _call_endpoint(self, url: str, envelope: dict[str, Any]) -> Any:
        try:
            response = await self._client().post(
                url,
                json=envelope,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            raise RpcTransportError(url, f"timeout after {self._timeout:g}s") from None
        except httpx.HTTPError as exc:
            raise RpcTransportError(url, str(exc) or type(exc).__name__) from exc

        if response.status_code != 200:
            raise RpcProtocolError(f"HTTP {response.status_code} from {url}")

        try:
            body = response.json()
        except ValueError:
            raise RpcProtocolError(f"Invalid JSON response from {url}") from None
        if not isinstance(body, dict):
            raise RpcProtocolError(f"Invalid JSON-RPC response from {url}")

        error = body.get("error")
        if error is not None:
            message = error.get("message") if isinstance(error, dict) else None
            raise RpcProtocolError(f"RPC error: {message or 'Unknown error'}")

        return body.get("result")
