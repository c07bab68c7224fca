import tempfile
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Token / pool constants (defaults are the tSAT mainnet values)
    POOL_ADDRESS: str = "AnTuW1uDnQBnwSa2Yso8MFmknz8B3K4V1iZZNdMdEXNj"
    TOKEN_MINT: str = "tSATdGGSLYBVCrm3pXiib8NmzKcB1iUdjRRseNGssxu"
    TOKEN_DECIMALS: int = 2
    TOTAL_SUPPLY: int = 21_000_000_000_000  # whole tokens

    # Cache
    CACHE_BACKEND: Literal["file", "redis", "memory"] = "file"
    CACHE_KEY: str = "tsat_circulating_supply_api"
    CACHE_TTL_SECONDS: int = 300
    FALLBACK_CACHE_TTL_SECONDS: int = 60
    CACHE_DIR: str = tempfile.gettempdir()

    # Redis (only used when CACHE_BACKEND=redis)
    REDIS_URL: str = "redis://localhost:6379/0"

    # RPC
    RPC_TIMEOUT_SECONDS: float = 15.0
    # Relative entries are resolved against PROJECT_ROOT, first valid file wins
    RPC_CONFIG_PATHS: list[str] = [
        "frt/config.json",
        "/var/www/html/frt/config.json",
        "../frt/config.json",
    ]

    # App
    APP_NAME: str = "Circulating Supply"

    def config_paths(self) -> list[Path]:
        paths = []
        for raw in self.RPC_CONFIG_PATHS:
            path = Path(raw)
            paths.append(path if path.is_absolute() else PROJECT_ROOT / path)
        return paths


settings = Settings()
