"""Offline stand-ins for the flash lender, the Futarchy router and the AMMs.

They move balances on a Ledger and mutate pool snapshots exactly the way the
pricing layer quotes them, so a cycle can be executed, checked and rolled
back without a chain.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Sequence, Tuple

from ..errors import InsufficientLiquidity, InsufficientToRepay, StepFailed
from ..exchanges.price_oracle import quote_exact_in
from ..models.opportunity import MarketSnapshot
from ..models.pools import Pool
from ..models.proposal import ProposalView
from .ledger import Ledger

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


class SimulatedFlashLender:
    """Lends its own ledger balance and pulls principal plus fee after the callback."""

    def __init__(self, address: str = "flash-lender", fee_rate: Decimal = ZERO):
        self.address = address
        self.fee_rate = Decimal(fee_rate)

    def available(self, ledger: Ledger, token: str) -> Decimal:
        return ledger.balance_of(self.address, token)

    def fee_for(self, amount: Decimal) -> Decimal:
        return amount * self.fee_rate

    def flash_loan(self, ledger: Ledger, receiver: str, token: str, amount: Decimal,
                   callback: Callable[[str, Decimal, Decimal], None]) -> Decimal:
        available = self.available(ledger, token)
        if available < amount:
            raise InsufficientLiquidity(
                f"Lender holds {available} of {token}, {amount} requested")
        fee = self.fee_for(amount)
        ledger.transfer(token, self.address, receiver, amount)
        logger.debug("flash loan %s %s to %s (fee %s)", amount, token, receiver, fee)

        callback(token, amount, fee)

        owed = amount + fee
        held = ledger.balance_of(receiver, token)
        if held < owed:
            raise InsufficientToRepay(
                f"Receiver holds {held} of {token}, owes {owed}", owed=owed, available=held)
        ledger.transfer(token, receiver, self.address, owed)
        return fee


class SimulatedPositionRouter:
    """Splits collateral into YES/NO outcome tokens and merges them back.

    Locked collateral is held under the router's own address. ``merge_fee`` is
    deducted from merged collateral and stays with the router.
    """

    def __init__(self, proposal: ProposalView, address: str = "futarchy-router",
                 merge_fee: Decimal = ZERO):
        self.proposal = proposal
        self.address = address
        self.merge_fee = Decimal(merge_fee)

    def split(self, ledger: Ledger, holder: str, collateral: str, amount: Decimal) -> None:
        yes, no = self.proposal.outcome_pair(collateral)
        ledger.transfer(collateral, holder, self.address, amount)
        ledger.credit(holder, yes, amount)
        ledger.credit(holder, no, amount)

    def merge(self, ledger: Ledger, holder: str, collateral: str, amount: Decimal) -> Decimal:
        yes, no = self.proposal.outcome_pair(collateral)
        ledger.debit(holder, yes, amount)
        ledger.debit(holder, no, amount)
        received = amount * (1 - self.merge_fee)
        ledger.transfer(collateral, self.address, holder, received)
        return received


class SimulatedVenue:
    """One pool. Swaps settle on the ledger and replace the pool snapshot."""

    def __init__(self, pool: Pool):
        self.pool = pool

    @property
    def address(self) -> str:
        return self.pool.address

    def quote(self, token_in: str, token_out: str, amount_in: Decimal) -> Decimal:
        return quote_exact_in(self.pool, token_in, token_out, amount_in).amount_out

    def swap_exact_in(self, ledger: Ledger, holder: str, token_in: str, token_out: str,
                      amount_in: Decimal, min_amount_out: Decimal = ZERO) -> Decimal:
        amount_out, after = quote_exact_in(self.pool, token_in, token_out, amount_in)
        if amount_out < min_amount_out:
            raise StepFailed(
                "swap", f"{self.address} returns {amount_out} {token_out}, minimum {min_amount_out}")
        ledger.debit(holder, token_in, amount_in)
        ledger.credit(holder, token_out, amount_out)
        self.pool = after
        return amount_out

    def snapshot(self) -> Pool:
        return self.pool

    def restore(self, pool: Pool) -> None:
        self.pool = pool


@dataclass
class VenueSet:
    yes: SimulatedVenue
    no: SimulatedVenue
    spot: Tuple[SimulatedVenue, ...]
    spot_path: Tuple[str, ...]           # company token -> currency token
    prediction: Dict[str, SimulatedVenue] = field(default_factory=dict)

    @classmethod
    def from_market(cls, market: MarketSnapshot) -> "VenueSet":
        return cls(
            yes=SimulatedVenue(market.yes_pool),
            no=SimulatedVenue(market.no_pool),
            spot=tuple(SimulatedVenue(p) for p in market.spot_route.pools),
            spot_path=market.spot_route.path,
            prediction={k.lower(): SimulatedVenue(p) for k, p in market.prediction_pools.items()},
        )

    def all(self) -> Sequence[SimulatedVenue]:
        return [self.yes, self.no, *self.spot, *self.prediction.values()]

    def swap_route(self, ledger: Ledger, holder: str, reverse: bool, amount_in: Decimal,
                   min_amount_out: Decimal = ZERO) -> Decimal:
        venues = list(reversed(self.spot)) if reverse else list(self.spot)
        path = list(reversed(self.spot_path)) if reverse else list(self.spot_path)
        amount = amount_in
        for i, venue in enumerate(venues):
            last = i == len(venues) - 1
            amount = venue.swap_exact_in(ledger, holder, path[i], path[i + 1], amount,
                                         min_amount_out if last else ZERO)
        return amount
