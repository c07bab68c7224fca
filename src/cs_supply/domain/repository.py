# src/cs_supply/domain/repository.py
"""Protocols for the pluggable collaborators of the supply service.

Unit tests inject fakes that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from typing import Any, Protocol

from src.cs_supply.domain.models import CacheEntry, Configuration, DebugTrace


class ConfigProviderProtocol(Protocol):
    """One candidate location for the RPC configuration."""

    @property
    def location(self) -> str: ...

    def load(self) -> dict[str, Any] | None:
        """Parsed JSON object, or None when the candidate does not exist.

        Raises ValueError when the candidate exists but cannot be parsed.
        """
        ...


class CacheStoreProtocol(Protocol):
    async def read(self, key: str) -> CacheEntry | None: ...

    async def write(self, key: str, payload: str) -> None: ...


class RpcClientProtocol(Protocol):
    async def call(
        self,
        method: str,
        params: list[Any],
        config: Configuration,
        trace: DebugTrace | None = None,
    ) -> Any: ...
