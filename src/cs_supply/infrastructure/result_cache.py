"""TTL cache of the last computed SupplyResult.

Read: entry is fresh when now - written_at < ttl. Fallback results expire
sooner (fallback_ttl) so a recovered upstream is picked up quickly.
Missing or corrupt entries are a miss. Write failures are logged and
never fail the request.
"""

import logging
import time
from collections.abc import Callable

from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from src.cs_common.errors import CacheReadError
from src.cs_supply.domain.models import SupplyResult
from src.cs_supply.domain.repository import CacheStoreProtocol

logger = logging.getLogger(__name__)

_result_adapter = TypeAdapter(SupplyResult)


def serialize_result(result: SupplyResult) -> str:
    return _result_adapter.dump_json(result, exclude_none=True).decode()


def deserialize_result(payload: str) -> SupplyResult:
    return _result_adapter.validate_json(payload)


class ResultCache:
    def __init__(
        self,
        store: CacheStoreProtocol,
        fallback_ttl: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._fallback_ttl = fallback_ttl
        self._clock = clock

    async def get(self, key: str, ttl: int) -> SupplyResult | None:
        try:
            entry = await self._store.read(key)
            if entry is None:
                return None
            try:
                result = deserialize_result(entry.payload)
            except ValidationError as exc:
                raise CacheReadError(key, f"{exc.error_count()} validation error(s)") from exc
        except CacheReadError as exc:
            logger.warning("Treating cache entry as miss: %s", exc.message)
            return None
        except RedisError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

        max_age = ttl
        if result.fallback and self._fallback_ttl is not None:
            max_age = min(ttl, self._fallback_ttl)
        if entry.age(self._clock()) >= max_age:
            return None
        return result

    async def put(self, key: str, result: SupplyResult) -> None:
        try:
            await self._store.write(key, serialize_result(result))
        except (OSError, RedisError) as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
