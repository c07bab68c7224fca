"""RPC configuration resolution.

Candidates are tried strictly in priority order and the first one that
holds a usable ``solana.rpcUrl`` wins. Nothing is merged across candidates.

Expected file shape:
    {
        "solana": {
            "rpcUrl": "https://...",
            "fallbackRpcUrls": ["https://...", "..."],
            "provider": "chainstack"
        }
    }
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from src.cs_common.errors import ConfigMalformedError, ConfigNotFoundError
from src.cs_supply.domain.models import Configuration, DebugTrace
from src.cs_supply.domain.repository import ConfigProviderProtocol

logger = logging.getLogger(__name__)


class JsonFileConfigProvider:
    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def location(self) -> str:
        return str(self._path)

    def load(self) -> dict[str, Any] | None:
        if not self._path.is_file():
            return None
        with self._path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value is not an object")
        return data


def parse_configuration(data: dict[str, Any], source: str | None = None) -> Configuration:
    """Build a Configuration from the raw JSON object.

    Raises ValueError when ``solana.rpcUrl`` is missing or not a non-empty string.
    """
    solana = data.get("solana")
    if not isinstance(solana, dict):
        raise ValueError("missing 'solana' section")
    rpc_url = solana.get("rpcUrl")
    if not isinstance(rpc_url, str) or not rpc_url:
        raise ValueError("missing 'solana.rpcUrl'")

    fallbacks = solana.get("fallbackRpcUrls") or []
    if not isinstance(fallbacks, list):
        raise ValueError("'solana.fallbackRpcUrls' must be a list")
    provider = solana.get("provider")

    return Configuration(
        rpc_url=rpc_url,
        fallback_rpc_urls=tuple(u for u in fallbacks if isinstance(u, str) and u),
        provider=provider if isinstance(provider, str) else None,
        source=source,
    )


class ConfigResolver:
    def __init__(self, providers: Sequence[ConfigProviderProtocol]) -> None:
        self._providers = list(providers)

    @classmethod
    def from_paths(cls, paths: Sequence[Path]) -> "ConfigResolver":
        return cls([JsonFileConfigProvider(p) for p in paths])

    def resolve(self, trace: DebugTrace | None = None) -> Configuration:
        problems: list[str] = []
        for provider in self._providers:
            if trace is not None:
                trace.add(f"Checking config path: {provider.location}")
            try:
                data = provider.load()
                if data is None:
                    continue
                config = parse_configuration(data, source=provider.location)
            except (OSError, ValueError) as exc:
                # json.JSONDecodeError is a ValueError
                logger.warning("Skipping config %s: %s", provider.location, exc)
                problems.append(f"{provider.location}: {exc}")
                continue
            if trace is not None:
                trace.add(f"Config loaded successfully from: {provider.location}")
            logger.debug("Config resolved from %s", provider.location)
            return config

        if problems:
            raise ConfigMalformedError("; ".join(problems))
        raise ConfigNotFoundError()
