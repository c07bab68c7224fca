"""SupplyApplicationService — request orchestration.

    CHECK_CACHE ─hit──────────────────────────────────────────────► RESPOND
        │miss
        ▼
    RESOLVE_CONFIG ─► FETCH_BALANCE ─► COMPUTE ─► CACHE_WRITE ─► RESPOND
        │                 │
        └──── failure ────┴─► FALLBACK (locked = total, circulating = 0,
                               fallback = true) ─► CACHE_WRITE ─► RESPOND

The service never raises for configuration or upstream failures; the worst
answer it gives is a conservative zero circulating supply.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from src.cs_common.datetime_utils import to_epoch_seconds, to_iso8601, utc_now
from src.cs_common.errors import (
    ConfigMalformedError,
    ConfigNotFoundError,
    RpcExhaustedError,
    RpcProtocolError,
)
from src.cs_supply.application.schemas import DebugReport
from src.cs_supply.domain.calculator import compute_circulating_supply
from src.cs_supply.domain.models import (
    Configuration,
    DebugTrace,
    SupplyParams,
    SupplyResult,
)
from src.cs_supply.infrastructure.balance_fetcher import BalanceFetcher
from src.cs_supply.infrastructure.config_resolver import ConfigResolver
from src.cs_supply.infrastructure.result_cache import ResultCache

logger = logging.getLogger(__name__)

# Failures that degrade to the fallback answer instead of an error response
SUPPLY_UNAVAILABLE = (
    ConfigNotFoundError,
    ConfigMalformedError,
    RpcExhaustedError,
    RpcProtocolError,
)


class SupplyApplicationService:
    def __init__(
        self,
        params: SupplyParams,
        cache: ResultCache,
        resolver: ConfigResolver,
        fetcher: BalanceFetcher,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._params = params
        self._cache = cache
        self._resolver = resolver
        self._fetcher = fetcher
        self._now = now

    async def get_supply(self) -> SupplyResult:
        key = self._params.cache_key
        cached = await self._cache.get(key, self._params.cache_ttl)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        try:
            result = await self._compute()
        except SUPPLY_UNAVAILABLE as exc:
            logger.warning("Serving fallback supply: %s", exc.message)
            result = self._fallback(exc.message)

        await self._cache.put(key, result)
        return result

    async def debug_supply(self) -> DebugReport:
        """Fresh computation with a step trace; the cache is neither read nor written."""
        trace = DebugTrace()
        try:
            result = await self._compute(trace)
        except SUPPLY_UNAVAILABLE as exc:
            trace.add(f"Exception caught: {exc.message}")
            return DebugReport.build(self._fallback(exc.message), False, trace.steps)
        return DebugReport.build(result, True, trace.steps)

    async def _compute(self, trace: DebugTrace | None = None) -> SupplyResult:
        p = self._params
        # Blocking file reads
        config = await asyncio.to_thread(self._resolver.resolve, trace)
        if trace is not None:
            trace.add(f"Using RPC URL: {config.rpc_url}")

        locked = await self._fetcher.fetch_locked_balance(
            p.pool_address, p.token_mint, p.decimals, config, trace
        )
        circulating = compute_circulating_supply(p.total_supply, locked)
        if trace is not None:
            trace.add(f"Circulating supply calculated: {circulating}")
        return self._result(circulating, locked, config)

    def _result(
        self, circulating: int, locked: int, config: Configuration
    ) -> SupplyResult:
        moment = self._now()
        return SupplyResult(
            circulating_supply=circulating,
            total_supply=self._params.total_supply,
            locked_in_pool=locked,
            timestamp=to_epoch_seconds(moment),
            last_updated=to_iso8601(moment),
            pool_address=self._params.pool_address,
            tsat_token=self._params.token_mint,
            rpc_provider=config.provider or "unknown",
        )

    def _fallback(self, error: str) -> SupplyResult:
        # Assume the entire supply is locked: circulating = 0
        moment = self._now()
        total = self._params.total_supply
        return SupplyResult(
            circulating_supply=compute_circulating_supply(total, total),
            total_supply=total,
            locked_in_pool=total,
            timestamp=to_epoch_seconds(moment),
            last_updated=to_iso8601(moment),
            pool_address=self._params.pool_address,
            tsat_token=self._params.token_mint,
            error=error,
            fallback=True,
        )
