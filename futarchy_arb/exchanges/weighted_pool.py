# futarchy_arb/exchanges/weighted_pool.py
"""Balancer weighted-pool math on in-memory snapshots.

Wrapped tokens (waGNO) can be addressed either by their own address, which
yields nominal pool amounts, or by the address of their underlying token
(GNO), in which case the rate-provider factor is applied to balances and
amounts.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Optional, Tuple

from ..errors import PoolUnavailable
from ..models.pools import WeightedPool

ONE = Decimal(1)


def token_index(pool: WeightedPool, token: str) -> Tuple[int, bool]:
    """Return ``(index, via_underlying)`` for ``token`` in ``pool``."""
    wanted = token.lower()
    for i, address in enumerate(pool.tokens):
        if address.lower() == wanted:
            return i, False
    for i, underlying in enumerate(pool.underlying):
        if underlying and underlying.lower() == wanted:
            return i, True
    raise PoolUnavailable(f"Token {token} is not traded in pool {pool.address}")


def _resolve_pair(pool: WeightedPool, base: str, quote: Optional[str]):
    i, base_via_underlying = token_index(pool, base)
    if quote is None:
        if len(pool.tokens) != 2:
            raise ValueError(f"Pool {pool.address} holds {len(pool.tokens)} tokens, a quote token is required")
        j, quote_via_underlying = 1 - i, False
    else:
        j, quote_via_underlying = token_index(pool, quote)
    if i == j:
        raise PoolUnavailable(f"Base and quote resolve to the same token in pool {pool.address}")
    return i, base_via_underlying, j, quote_via_underlying


def _live_balance(pool: WeightedPool, i: int, via_underlying: bool) -> Decimal:
    balance = pool.balances[i] * (pool.rate(i) if via_underlying else ONE)
    if balance <= 0:
        raise PoolUnavailable(f"Pool {pool.address} has no {pool.tokens[i]} balance")
    return balance


def spot_price(pool: WeightedPool, base: str, quote: Optional[str] = None) -> Decimal:
    """Quote units per one unit of ``base``: (B_q / w_q) / (B_b / w_b)."""
    i, iu, j, ju = _resolve_pair(pool, base, quote)
    base_balance = _live_balance(pool, i, iu)
    quote_balance = _live_balance(pool, j, ju)
    return (quote_balance / pool.weight(j)) / (base_balance / pool.weight(i))


def quote_exact_in(pool: WeightedPool, token_in: str, token_out: str,
                   amount_in: Decimal) -> Tuple[Decimal, WeightedPool]:
    """Out-given-in with the swap fee charged on the input.

    Returns the output amount and the pool snapshot after the swap.
    """
    if amount_in <= 0:
        raise ValueError("amount_in must be positive")
    i, iu, j, ju = _resolve_pair(pool, token_in, token_out)
    balance_in = _live_balance(pool, i, iu)
    balance_out = _live_balance(pool, j, ju)

    amount_in_after_fee = amount_in * (ONE - pool.swap_fee)
    base = balance_in / (balance_in + amount_in_after_fee)
    amount_out = balance_out * (ONE - base ** (pool.weight(i) / pool.weight(j)))

    scale_in = pool.rate(i) if iu else ONE
    scale_out = pool.rate(j) if ju else ONE
    balances = list(pool.balances)
    balances[i] += amount_in / scale_in
    balances[j] -= amount_out / scale_out
    return amount_out, replace(pool, balances=tuple(balances))
