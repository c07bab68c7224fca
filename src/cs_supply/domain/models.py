"""Domain models for cs_supply — pure dataclasses, no I/O."""

from dataclasses import dataclass, field

from src.cs_supply.domain.calculator import to_whole_units


@dataclass(frozen=True)
class Configuration:
    """Resolved RPC configuration. Read-only for the whole request."""

    rpc_url: str
    fallback_rpc_urls: tuple[str, ...] = ()
    provider: str | None = None
    source: str | None = None

    @property
    def endpoints(self) -> tuple[str, ...]:
        """Primary first, then fallbacks in listed order."""
        return (self.rpc_url, *self.fallback_rpc_urls)


@dataclass(frozen=True)
class TokenAccountQuery:
    owner: str
    mint: str


@dataclass(frozen=True)
class RawBalance:
    """Amount in the token's smallest unit plus its decimal exponent."""

    amount: int
    decimals: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"amount must be >= 0, got {self.amount}")
        if self.decimals < 0:
            raise ValueError(f"decimals must be >= 0, got {self.decimals}")

    @property
    def whole_units(self) -> int:
        return to_whole_units(self.amount, self.decimals)


@dataclass
class SupplyResult:
    circulating_supply: int
    total_supply: int
    locked_in_pool: int
    timestamp: int
    last_updated: str
    pool_address: str | None = None
    tsat_token: str | None = None
    rpc_provider: str | None = None
    error: str | None = None
    fallback: bool | None = None


@dataclass(frozen=True)
class SupplyParams:
    """Constants that identify the token and pool being measured."""

    pool_address: str
    token_mint: str
    decimals: int
    total_supply: int
    cache_key: str
    cache_ttl: int


@dataclass(frozen=True)
class CacheEntry:
    payload: str
    written_at: float

    def age(self, now: float) -> float:
        return now - self.written_at


@dataclass
class DebugTrace:
    """Ordered, human-readable steps collected during a debug computation."""

    steps: list[str] = field(default_factory=list)

    def add(self, step: str) -> None:
        self.steps.append(step)
