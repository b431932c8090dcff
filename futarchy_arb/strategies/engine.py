# futarchy_arb/strategies/engine.py
"""Decides which arbitrage direction, if any, is profitable and how big to go.

SPOT_SPLIT: both outcome prices sit above spot. Borrow the company token,
split it, sell both outcome legs, merge the matched currency and buy back.

MERGE_SPOT: spot sits above both outcome prices. Borrow currency, split it,
buy both outcome legs, merge the matched company token and sell at spot.

Only the matched (mergeable) leg counts as guaranteed; the unmatched leg is
a risky residual and never enters the profit test.
"""

import logging
from decimal import Decimal
from typing import NamedTuple, Optional

from ..config.settings import ArbitrageSettings, ResidualPolicy
from ..errors import PoolUnavailable
from ..exchanges.price_oracle import price_of, route_price
from ..models.opportunity import ArbitrageOpportunity, Direction, MarketSnapshot
from ..models.proposal import ProposalView
from .routes import RouteSimulation, simulate

logger = logging.getLogger(__name__)

ONE = Decimal(1)
OUTCOME_LEGS = 2


class MarketPrices(NamedTuple):
    yes: Decimal    # YES company token in YES currency
    no: Decimal     # NO company token in NO currency
    spot: Decimal   # company token in currency


class StrategyEngine:
    def __init__(self, settings: Optional[ArbitrageSettings] = None):
        self.settings = settings or ArbitrageSettings()

    def fee_cost(self, notional: Decimal, hops: int) -> Decimal:
        """Flash-loan fee plus per-hop swap fees on ``notional``."""
        return notional * (self.settings.flash_loan_fee + hops * self.settings.hop_fee)

    def _clears(self, profit: Decimal) -> bool:
        # profit in borrowed-token units, same as min_profit
        return profit > 0 and profit >= self.settings.min_profit

    def evaluate(self, proposal: ProposalView, yes_price, no_price, spot_price,
                 amount=ONE, spot_hops: int = 1) -> Optional[ArbitrageOpportunity]:
        """Marginal-price decision for ``amount`` units of the borrow token.

        All value fields of the returned opportunity are in collateral_b units.
        """
        yes, no, spot, amount = (Decimal(str(v)) for v in (yes_price, no_price, spot_price, amount))
        if min(yes, no, spot) <= 0:
            raise ValueError(f"Prices must be positive, got yes={yes} no={no} spot={spot}")
        if amount <= 0:
            raise ValueError("amount must be positive")

        hops = OUTCOME_LEGS + spot_hops
        low, high = min(yes, no), max(yes, no)

        if low > spot:
            guaranteed = amount * low
            profit = guaranteed - amount * spot - self.fee_cost(amount * spot, hops)
            if not self._clears(profit / spot):
                logger.debug("SPOT_SPLIT edge %s does not cover fees", low - spot)
                return None
            return ArbitrageOpportunity(
                direction=Direction.SPOT_SPLIT,
                proposal=proposal,
                borrow_token=proposal.collateral_a,
                borrow_amount=amount,
                expected_profit=profit,
                min_guaranteed_return=guaranteed,
                risky_residual=amount * (high - low),
                borrow_token_profit=profit / spot,
            )

        recoverable = spot / high
        if recoverable > ONE:
            guaranteed = amount * recoverable
            profit = guaranteed - amount - self.fee_cost(amount, hops)
            if not self._clears(profit):
                logger.debug("MERGE_SPOT recoverable %s does not cover fees", recoverable)
                return None
            return ArbitrageOpportunity(
                direction=Direction.MERGE_SPOT,
                proposal=proposal,
                borrow_token=proposal.collateral_b,
                borrow_amount=amount,
                expected_profit=profit,
                min_guaranteed_return=guaranteed,
                risky_residual=amount * spot * (ONE / low - ONE / high),
                borrow_token_profit=profit,
            )
        return None

    def observe(self, market: MarketSnapshot) -> MarketPrices:
        p = market.proposal
        return MarketPrices(
            yes=price_of(market.yes_pool, p.yes_a, p.yes_b),
            no=price_of(market.no_pool, p.no_a, p.no_b),
            spot=route_price(market.spot_route),
        )

    def simulate(self, market: MarketSnapshot, direction: Direction, amount) -> RouteSimulation:
        return simulate(
            market,
            direction,
            Decimal(str(amount)),
            self.settings.flash_loan_fee,
            liquidate=self.settings.residual_policy == ResidualPolicy.LIQUIDATE,
        )

    def size(self, market: MarketSnapshot,
             opportunity: ArbitrageOpportunity) -> Optional[ArbitrageOpportunity]:
        """Largest candidate size whose simulated cycle still clears the threshold."""
        direction = opportunity.direction
        if direction == Direction.SPOT_SPLIT:
            candidates = self.settings.split_amounts
        else:
            candidates = self.settings.merge_amounts
        cap = market.lender_liquidity.get(opportunity.borrow_token.lower())

        best = None
        for amount in sorted(candidates):
            if cap is not None and amount > cap:
                logger.debug("Skipping %s: lender only has %s", amount, cap)
                continue
            try:
                sim = self.simulate(market, direction, amount)
            except PoolUnavailable as exc:
                logger.debug("Cannot route %s %s: %s", direction.name, amount, exc)
                continue
            if self._clears(sim.profit):
                best = sim
        if best is None:
            logger.info("%s signal found but no size clears fees", direction.name)
            return None

        spot = route_price(market.spot_route)
        legs = best.legs
        if direction == Direction.SPOT_SPLIT:
            expected_profit = best.profit * spot
            guaranteed = legs.merged
            residual = abs(legs.yes_out - legs.no_out)
        else:
            expected_profit = best.profit
            guaranteed = legs.returned
            residual = abs(legs.yes_out - legs.no_out) * spot

        return ArbitrageOpportunity(
            direction=direction,
            proposal=opportunity.proposal,
            borrow_token=opportunity.borrow_token,
            borrow_amount=best.amount,
            expected_profit=expected_profit,
            min_guaranteed_return=guaranteed,
            risky_residual=residual,
            borrow_token_profit=best.profit,
            legs=legs,
        )

    def scan(self, market: MarketSnapshot) -> Optional[ArbitrageOpportunity]:
        prices = self.observe(market)
        logger.info("YES=%s NO=%s SPOT=%s", prices.yes, prices.no, prices.spot)
        opportunity = self.evaluate(
            market.proposal, prices.yes, prices.no, prices.spot,
            spot_hops=market.spot_route.hops,
        )
        if opportunity is None:
            return None
        return self.size(market, opportunity)
