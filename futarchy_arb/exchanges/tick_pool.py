# futarchy_arb/exchanges/tick_pool.py
"""Concentrated-liquidity (Uniswap V3 / Algebra) math on in-memory snapshots."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional, Tuple

from ..errors import PoolUnavailable
from ..models.pools import TickPool

ONE = Decimal(1)
Q96 = Decimal(2 ** 96)

MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342


def sqrt_price_x96_to_price(sqrt_price_x96: int, decimals0: int = 18, decimals1: int = 18) -> Decimal:
    """Human price of token0 expressed in token1."""
    ratio = Decimal(sqrt_price_x96) / Q96
    return ratio * ratio * Decimal(10) ** (decimals0 - decimals1)


def price_to_sqrt_price_x96(price: Decimal, decimals0: int = 18, decimals1: int = 18) -> int:
    raw = Decimal(price) / Decimal(10) ** (decimals0 - decimals1)
    return int(raw.sqrt() * Q96)


def resolve_orientation(pool: TickPool, base_token: str) -> bool:
    """True when ``base_token`` is token0, False when it is token1."""
    if pool.token0.lower() == base_token.lower():
        return True
    if pool.token1.lower() == base_token.lower():
        return False
    raise PoolUnavailable(f"Token {base_token} is not traded in pool {pool.address}")


def _other(pool: TickPool, base_is_token0: bool, quote: Optional[str]) -> None:
    expected = pool.token1 if base_is_token0 else pool.token0
    if quote is not None and quote.lower() != expected.lower():
        raise PoolUnavailable(f"Pool {pool.address} does not pair the requested tokens")


def spot_price(pool: TickPool, base: str, quote: Optional[str] = None) -> Decimal:
    base_is_token0 = resolve_orientation(pool, base)
    _other(pool, base_is_token0, quote)
    if pool.sqrt_price_x96 <= 0:
        raise PoolUnavailable(f"Pool {pool.address} is not initialized")
    price = sqrt_price_x96_to_price(pool.sqrt_price_x96, pool.decimals0, pool.decimals1)
    return price if base_is_token0 else ONE / price


def quote_exact_in(pool: TickPool, token_in: str, token_out: str,
                   amount_in: Decimal) -> Tuple[Decimal, TickPool]:
    """Swap inside the active range only; no tick crossings are modeled."""
    if amount_in <= 0:
        raise ValueError("amount_in must be positive")
    zero_for_one = resolve_orientation(pool, token_in)
    _other(pool, zero_for_one, token_out)
    if pool.liquidity <= 0 or pool.sqrt_price_x96 <= 0:
        raise PoolUnavailable(f"Pool {pool.address} has no active liquidity")

    liquidity = Decimal(pool.liquidity)
    sqrt_price = Decimal(pool.sqrt_price_x96) / Q96
    dec_in, dec_out = (pool.decimals0, pool.decimals1) if zero_for_one else (pool.decimals1, pool.decimals0)
    amount_raw = amount_in * Decimal(10) ** dec_in * (ONE - pool.fee_rate)

    if zero_for_one:
        sqrt_next = liquidity * sqrt_price / (liquidity + amount_raw * sqrt_price)
        out_raw = liquidity * (sqrt_price - sqrt_next)
    else:
        sqrt_next = sqrt_price + amount_raw / liquidity
        out_raw = liquidity * (ONE / sqrt_price - ONE / sqrt_next)

    next_x96 = min(max(int(sqrt_next * Q96), MIN_SQRT_RATIO), MAX_SQRT_RATIO)
    return out_raw / Decimal(10) ** dec_out, replace(pool, sqrt_price_x96=next_x96)
