"""FastAPI dependency wiring for cs_supply.

Tests override ``get_supply_service`` via ``app.dependency_overrides``.
"""

from functools import lru_cache

from config.settings import settings
from src.cs_common.redis_client import get_redis
from src.cs_supply.application.service import SupplyApplicationService
from src.cs_supply.domain.models import SupplyParams
from src.cs_supply.domain.repository import CacheStoreProtocol
from src.cs_supply.infrastructure.balance_fetcher import BalanceFetcher
from src.cs_supply.infrastructure.cache_store import (
    FileCacheStore,
    InMemoryCacheStore,
    RedisCacheStore,
)
from src.cs_supply.infrastructure.config_resolver import ConfigResolver
from src.cs_supply.infrastructure.result_cache import ResultCache
from src.cs_supply.infrastructure.rpc_client import RpcClient

# Shared across requests; its HTTP connection pool is closed on shutdown
rpc_client = RpcClient(timeout=settings.RPC_TIMEOUT_SECONDS)


def build_cache_store() -> CacheStoreProtocol:
    if settings.CACHE_BACKEND == "redis":
        return RedisCacheStore(get_redis, expire_seconds=settings.CACHE_TTL_SECONDS)
    if settings.CACHE_BACKEND == "memory":
        return InMemoryCacheStore()
    return FileCacheStore(settings.CACHE_DIR)


def supply_params() -> SupplyParams:
    return SupplyParams(
        pool_address=settings.POOL_ADDRESS,
        token_mint=settings.TOKEN_MINT,
        decimals=settings.TOKEN_DECIMALS,
        total_supply=settings.TOTAL_SUPPLY,
        cache_key=settings.CACHE_KEY,
        cache_ttl=settings.CACHE_TTL_SECONDS,
    )


@lru_cache(maxsize=1)
def get_supply_service() -> SupplyApplicationService:
    return SupplyApplicationService(
        params=supply_params(),
        cache=ResultCache(
            build_cache_store(),
            fallback_ttl=settings.FALLBACK_CACHE_TTL_SECONDS,
        ),
        resolver=ConfigResolver.from_paths(settings.config_paths()),
        fetcher=BalanceFetcher(rpc_client),
    )
