"""Pool token balance lookup via getTokenAccountsByOwner.

An owner with no token account for the mint has nothing locked; that is a
valid state and yields 0. When several accounts match, only the first is
used (assumed to be the single canonical pool token account).
"""

import logging
from typing import Any

from src.cs_common.errors import RpcProtocolError
from src.cs_supply.domain.models import (
    Configuration,
    DebugTrace,
    RawBalance,
    TokenAccountQuery,
)
from src.cs_supply.domain.repository import RpcClientProtocol

logger = logging.getLogger(__name__)

GET_TOKEN_ACCOUNTS_BY_OWNER = "getTokenAccountsByOwner"


def extract_raw_amount(result: Any) -> str | None:
    """result.value[0].account.data.parsed.info.tokenAmount.amount, or None."""
    if not isinstance(result, dict):
        return None
    accounts = result.get("value")
    if not isinstance(accounts, list) or not accounts:
        return None
    node: Any = accounts[0]
    for key in ("account", "data", "parsed", "info", "tokenAmount", "amount"):
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


class BalanceFetcher:
    def __init__(self, rpc: RpcClientProtocol) -> None:
        self._rpc = rpc

    async def get_token_accounts_by_owner(
        self,
        query: TokenAccountQuery,
        config: Configuration,
        trace: DebugTrace | None = None,
    ) -> Any:
        params = [query.owner, {"mint": query.mint}, {"encoding": "jsonParsed"}]
        return await self._rpc.call(GET_TOKEN_ACCOUNTS_BY_OWNER, params, config, trace)

    async def fetch_raw_balance(
        self,
        query: TokenAccountQuery,
        decimals: int,
        config: Configuration,
        trace: DebugTrace | None = None,
    ) -> RawBalance:
        result = await self.get_token_accounts_by_owner(query, config, trace)
        raw = extract_raw_amount(result)
        if raw is None:
            if trace is not None:
                trace.add("No token accounts found in response")
            logger.info("No token account for owner=%s mint=%s", query.owner, query.mint)
            return RawBalance(amount=0, decimals=decimals)

        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            raise RpcProtocolError(f"Invalid token amount: {raw!r}")
        try:
            amount = int(raw)
        except ValueError:
            raise RpcProtocolError(f"Invalid token amount: {raw!r}") from None
        if amount < 0:
            raise RpcProtocolError(f"Invalid token amount: {raw!r}")

        balance = RawBalance(amount=amount, decimals=decimals)
        if trace is not None:
            trace.add(f"Raw amount: {amount}")
            trace.add(f"Actual amount (with decimals): {balance.whole_units}")
        return balance

    async def fetch_locked_balance(
        self,
        owner: str,
        mint: str,
        decimals: int,
        config: Configuration,
        trace: DebugTrace | None = None,
    ) -> int:
        balance = await self.fetch_raw_balance(
            TokenAccountQuery(owner=owner, mint=mint), decimals, config, trace
        )
        return balance.whole_units
