"""Pydantic schemas for cs_supply API responses.

JSON field names are part of the public contract read by aggregators;
optional fields (error, fallback, rpc_provider) are omitted when unset.
"""

from dataclasses import asdict

from pydantic import BaseModel

from src.cs_supply.domain.models import SupplyResult


class SupplyResultOut(BaseModel):
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

    @classmethod
    def from_domain(cls, result: SupplyResult) -> "SupplyResultOut":
        return cls(**asdict(result))

    def to_json_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class DebugReport(SupplyResultOut):
    success: bool
    debug: list[str]

    @classmethod
    def build(cls, result: SupplyResult, success: bool, steps: list[str]) -> "DebugReport":
        return cls(**asdict(result), success=success, debug=list(steps))
