# futarchy_arb/exchanges/price_oracle.py
"""Venue-agnostic pricing: dispatches on ``pool.kind`` to the pool math."""

import logging
from decimal import Decimal
from typing import NamedTuple, Optional, Tuple

from ..models.pools import Pool, PoolKind, SpotRoute
from . import tick_pool, weighted_pool

logger = logging.getLogger(__name__)

_PRICERS = {
    PoolKind.WEIGHTED: weighted_pool.spot_price,
    PoolKind.TICK: tick_pool.spot_price,
}

_QUOTERS = {
    PoolKind.WEIGHTED: weighted_pool.quote_exact_in,
    PoolKind.TICK: tick_pool.quote_exact_in,
}


class Quote(NamedTuple):
    amount_out: Decimal
    pool: Pool            # snapshot after the swap


class RouteQuote(NamedTuple):
    amount_out: Decimal
    pools: Tuple[Pool, ...]


def price_of(pool: Pool, base_token: str, quote_token: Optional[str] = None) -> Decimal:
    """Quote-token units per one unit of ``base_token`` in ``pool``."""
    price = _PRICERS[pool.kind](pool, base_token, quote_token)
    logger.debug("price %s in %s: %s", base_token, pool.address, price)
    return price


def quote_exact_in(pool: Pool, token_in: str, token_out: str, amount_in: Decimal) -> Quote:
    amount_out, after = _QUOTERS[pool.kind](pool, token_in, token_out, Decimal(amount_in))
    logger.debug("quote %s %s -> %s %s on %s", amount_in, token_in, amount_out, token_out, pool.address)
    return Quote(amount_out, after)


def route_price(route: SpotRoute) -> Decimal:
    """Price of ``route.token_in`` in ``route.token_out``, product of hop prices."""
    price = Decimal(1)
    for pool, base, quote in zip(route.pools, route.path, route.path[1:]):
        price *= price_of(pool, base, quote)
    return price


def quote_route(route: SpotRoute, amount_in: Decimal) -> RouteQuote:
    amount = Decimal(amount_in)
    pools = []
    for pool, token_in, token_out in zip(route.pools, route.path, route.path[1:]):
        amount, after = quote_exact_in(pool, token_in, token_out, amount)
        pools.append(after)
    return RouteQuote(amount, tuple(pools))
