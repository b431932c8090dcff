"""Quote a full arbitrage cycle against pool snapshots, without touching them."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..exchanges.price_oracle import quote_exact_in, quote_route
from ..models.opportunity import Direction, LegQuotes, MarketSnapshot

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


@dataclass(frozen=True, slots=True)
class RouteSimulation:
    direction: Direction
    amount: Decimal
    legs: LegQuotes
    owed: Decimal                # principal plus flash-loan fee
    profit: Decimal              # borrow token units, may be negative
    residual_token: Optional[str]
    residual_amount: Decimal     # unmatched outcome tokens left after the merge


def liquidation_proceeds(market: MarketSnapshot, token: Optional[str], amount: Decimal) -> Decimal:
    """Collateral obtained by selling ``amount`` of an outcome token on its prediction pool."""
    if token is None or amount <= 0:
        return ZERO
    pool = market.prediction_pools.get(token.lower())
    if pool is None:
        return ZERO
    collateral = market.proposal.collateral_of(token)
    return quote_exact_in(pool, token, collateral, amount).amount_out


def simulate(market: MarketSnapshot, direction: Direction, amount: Decimal,
             flash_loan_fee: Decimal, liquidate: bool = False) -> RouteSimulation:
    p = market.proposal
    amount = Decimal(amount)
    if direction == Direction.SPOT_SPLIT:
        yes_in, yes_out_token, no_in, no_out_token = p.yes_a, p.yes_b, p.no_a, p.no_b
        spot_leg = market.spot_route.reversed()
    else:
        yes_in, yes_out_token, no_in, no_out_token = p.yes_b, p.yes_a, p.no_b, p.no_a
        spot_leg = market.spot_route

    yes_out = quote_exact_in(market.yes_pool, yes_in, yes_out_token, amount).amount_out
    no_out = quote_exact_in(market.no_pool, no_in, no_out_token, amount).amount_out
    merged = min(yes_out, no_out)

    if yes_out > no_out:
        residual_token, residual_amount = yes_out_token, yes_out - no_out
    elif no_out > yes_out:
        residual_token, residual_amount = no_out_token, no_out - yes_out
    else:
        residual_token, residual_amount = None, ZERO

    spot_in = merged
    if liquidate:
        spot_in += liquidation_proceeds(market, residual_token, residual_amount)

    returned = quote_route(spot_leg, spot_in).amount_out
    owed = amount * (1 + flash_loan_fee)
    profit = returned - owed
    logger.debug("%s %s: yes=%s no=%s merged=%s returned=%s profit=%s",
                 direction.name, amount, yes_out, no_out, merged, returned, profit)
    return RouteSimulation(
        direction=direction,
        amount=amount,
        legs=LegQuotes(yes_out=yes_out, no_out=no_out, merged=merged, returned=returned),
        owed=owed,
        profit=profit,
        residual_token=residual_token,
        residual_amount=residual_amount,
    )
