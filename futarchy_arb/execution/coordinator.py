# futarchy_arb/execution/coordinator.py
"""
Runs one arbitrage cycle atomically:

    Borrow -> Split -> Trade legs -> Merge -> [Liquidate residual]
    -> Swap back at spot -> Repay -> Profit check -> Settle

Every step happens inside the flash-loan callback and inside
``Ledger.atomic``, so any failure leaves balances and pools untouched.
"""

import logging
from decimal import Decimal
from typing import Mapping, Optional

from ..config.settings import ArbitrageSettings, ResidualPolicy
from ..errors import ArbitrageError, InsufficientToRepay, ProfitBelowMinimum, StepFailed
from ..models.opportunity import (
    ArbitrageOpportunity,
    ArbitrageResult,
    Direction,
    LegQuotes,
    Leftovers,
    MarketSnapshot,
)
from ..models.proposal import ProposalView
from .ledger import Ledger
from .simulated import SimulatedFlashLender, SimulatedPositionRouter, VenueSet

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


class ExecutionCoordinator:
    def __init__(self, proposal: ProposalView, ledger: Ledger, lender: SimulatedFlashLender,
                 router: SimulatedPositionRouter, venues: VenueSet,
                 settings: Optional[ArbitrageSettings] = None, address: str = "arbitrage-executor"):
        self.proposal = proposal
        self.ledger = ledger
        self.lender = lender
        self.router = router
        self.venues = venues
        self.settings = settings or ArbitrageSettings()
        self.address = address

    @classmethod
    def from_market(cls, market: MarketSnapshot, settings: Optional[ArbitrageSettings] = None,
                    lender_liquidity: Optional[Mapping[str, Decimal]] = None,
                    locked_collateral: Optional[Mapping[str, Decimal]] = None) -> "ExecutionCoordinator":
        """Paper-trading coordinator over copies of a market's pools."""
        settings = settings or ArbitrageSettings()
        lender = SimulatedFlashLender(fee_rate=settings.flash_loan_fee)
        router = SimulatedPositionRouter(market.proposal)
        ledger = Ledger()
        for token, amount in (lender_liquidity or market.lender_liquidity).items():
            ledger.credit(lender.address, token, Decimal(amount))
        for token, amount in (locked_collateral or {}).items():
            ledger.credit(router.address, token, Decimal(amount))
        return cls(market.proposal, ledger, lender, router, VenueSet.from_market(market), settings)

    def min_outputs(self, legs: LegQuotes) -> LegQuotes:
        """Slippage bounds derived from a sized opportunity's expected outputs."""
        keep = 1 - self.settings.slippage_tolerance
        return LegQuotes(
            yes_out=legs.yes_out * keep,
            no_out=legs.no_out * keep,
            merged=legs.merged * keep,
            returned=legs.returned * keep,
        )

    def execute(self, opportunity: ArbitrageOpportunity, min_profit, caller: str = "caller") -> ArbitrageResult:
        bounds = self.min_outputs(opportunity.legs) if opportunity.legs is not None else None
        return self.execute_arbitrage(
            opportunity.proposal,
            opportunity.borrow_token,
            opportunity.borrow_amount,
            opportunity.direction,
            min_profit,
            caller=caller,
            min_outputs=bounds,
        )

    def execute_arbitrage(self, proposal: ProposalView, borrow_token: str, borrow_amount,
                          direction, min_profit, caller: str = "caller",
                          min_outputs: Optional[LegQuotes] = None) -> ArbitrageResult:
        """
        Borrow, cycle and settle in one all-or-nothing step.

        Returns:
            A successful ArbitrageResult; profit and leftovers now belong to ``caller``.

        Raises:
            InsufficientLiquidity, StepFailed, InsufficientToRepay, ProfitBelowMinimum.
            The raised error's ``result`` is the failed, zero-leftover result.
        """
        direction = Direction(direction)
        amount = Decimal(str(borrow_amount))
        min_profit = Decimal(str(min_profit))
        if proposal.address.lower() != self.proposal.address.lower():
            raise ValueError(f"Coordinator is bound to {self.proposal.address}, got {proposal.address}")
        expected = proposal.collateral_a if direction == Direction.SPOT_SPLIT else proposal.collateral_b
        if borrow_token.lower() != expected.lower():
            raise ValueError(f"{direction.name} must borrow {expected}, got {borrow_token}")
        if amount <= 0:
            raise ValueError("borrow_amount must be positive")
        if min_profit < 0:
            raise ValueError("min_profit must not be negative")

        logger.info("Executing %s: borrow %s of %s, min profit %s",
                    direction.name, amount, borrow_token, min_profit)
        try:
            with self.ledger.atomic(*self.venues.all()):
                def cycle(token, principal, fee):
                    self._cycle(direction, principal, fee, min_outputs)

                self.lender.flash_loan(self.ledger, self.address, borrow_token, amount, cycle)

                profit = self.ledger.balance_of(self.address, borrow_token)
                if profit < min_profit:
                    raise ProfitBelowMinimum(
                        f"Profit below minimum: {profit} < {min_profit}",
                        profit=profit, min_profit=min_profit)
                leftovers = self._settle(caller, borrow_token)
        except ArbitrageError as exc:
            exc.result = ArbitrageResult(
                success=False, direction=direction, borrow_token=borrow_token, borrow_amount=amount)
            logger.warning("%s aborted and rolled back: %s", direction.name, exc)
            raise

        logger.info("%s settled: profit %s %s", direction.name, profit, borrow_token)
        return ArbitrageResult(
            success=True,
            direction=direction,
            borrow_token=borrow_token,
            borrow_amount=amount,
            profit=profit,
            leftovers=leftovers,
        )

    def _cycle(self, direction: Direction, amount: Decimal, fee: Decimal,
               bounds: Optional[LegQuotes]) -> None:
        p = self.proposal
        me = self.address
        if direction == Direction.SPOT_SPLIT:
            borrowed, other = p.collateral_a, p.collateral_b
            yes_in, yes_out, no_in, no_out = p.yes_a, p.yes_b, p.no_a, p.no_b
        else:
            borrowed, other = p.collateral_b, p.collateral_a
            yes_in, yes_out, no_in, no_out = p.yes_b, p.yes_a, p.no_b, p.no_a

        self.router.split(self.ledger, me, borrowed, amount)

        yes_got = self.venues.yes.swap_exact_in(
            self.ledger, me, yes_in, yes_out, amount, bounds.yes_out if bounds else ZERO)
        no_got = self.venues.no.swap_exact_in(
            self.ledger, me, no_in, no_out, amount, bounds.no_out if bounds else ZERO)
        logger.debug("legs: %s YES, %s NO", yes_got, no_got)

        merged = self.router.merge(self.ledger, me, other, min(yes_got, no_got))
        logger.debug("merged %s of %s", merged, other)
        if bounds and merged < bounds.merged:
            raise StepFailed("merge", f"merged {merged} of {other}, below minimum {bounds.merged}")

        if self.settings.residual_policy == ResidualPolicy.LIQUIDATE:
            self._liquidate_residual(yes_out, no_out)

        spot_in = self.ledger.balance_of(me, other)
        returned = self.venues.swap_route(
            self.ledger, me, reverse=direction == Direction.SPOT_SPLIT, amount_in=spot_in,
            min_amount_out=bounds.returned if bounds else ZERO)
        logger.debug("spot leg returned %s of %s", returned, borrowed)

        owed = amount + fee
        held = self.ledger.balance_of(me, borrowed)
        if held < owed:
            raise InsufficientToRepay(
                f"Insufficient to repay: hold {held}, owe {owed}", owed=owed, available=held)

    def _liquidate_residual(self, *tokens: str) -> None:
        for token in tokens:
            amount = self.ledger.balance_of(self.address, token)
            venue = self.venues.prediction.get(token.lower())
            if amount <= 0 or venue is None:
                continue
            collateral = self.proposal.collateral_of(token)
            got = venue.swap_exact_in(self.ledger, self.address, token, collateral, amount)
            logger.debug("liquidated %s %s into %s %s", amount, token, got, collateral)

    def _settle(self, caller: str, profit_token: str) -> Leftovers:
        p = self.proposal
        held = {}
        for name, token in (
            ("yes_company", p.yes_a),
            ("no_company", p.no_a),
            ("yes_currency", p.yes_b),
            ("no_currency", p.no_b),
            ("company", p.collateral_a),
            ("currency", p.collateral_b),
        ):
            amount = self.ledger.balance_of(self.address, token)
            if amount > 0:
                self.ledger.transfer(token, self.address, caller, amount)
            held[name] = ZERO if token.lower() == profit_token.lower() else amount
        return Leftovers(**held)
