"""Circulating supply arithmetic — integer only, no I/O."""


def compute_circulating_supply(total_supply: int, locked_balance: int) -> int:
    """Total issuance minus tokens locked in the pool, clamped at zero.

    A pool briefly reporting more than the total supply must never surface
    as a negative circulating figure.
    """
    return max(0, total_supply - locked_balance)


def to_whole_units(raw_amount: int, decimals: int) -> int:
    """12345 with decimals=2 -> 123."""
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")
    return raw_amount // 10**decimals
