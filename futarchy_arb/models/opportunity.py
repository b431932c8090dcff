"""Value objects passed between the strategy engine and the executors."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import IntEnum
from typing import Dict, Mapping, Optional

from futarchy_arb.models.pools import Pool, SpotRoute
from futarchy_arb.models.proposal import ProposalView

__all__ = [
    "Direction",
    "LegQuotes",
    "ArbitrageOpportunity",
    "Leftovers",
    "ArbitrageResult",
    "MarketSnapshot",
]

ZERO = Decimal(0)


class Direction(IntEnum):
    """Values match the ``direction`` argument of ``executeArbitrage``."""

    SPOT_SPLIT = 0   # borrow company token, split, sell outcomes, merge currency, buy back
    MERGE_SPOT = 1   # borrow currency, split, buy outcomes, merge company token, sell at spot


@dataclass(frozen=True, slots=True)
class LegQuotes:
    """Expected amounts along a sized route, used for slippage bounds."""

    yes_out: Decimal    # output of the YES pool leg
    no_out: Decimal     # output of the NO pool leg
    merged: Decimal     # collateral recovered by merging min(yes_out, no_out)
    returned: Decimal   # borrow token received from the spot leg


@dataclass(frozen=True, slots=True)
class ArbitrageOpportunity:
    direction: Direction
    proposal: ProposalView
    borrow_token: str
    borrow_amount: Decimal
    expected_profit: Decimal        # after fees, in collateral_b units
    min_guaranteed_return: Decimal  # value of the matched (mergeable) leg, collateral_b units
    risky_residual: Decimal         # value of the unmatched leg, collateral_b units
    borrow_token_profit: Decimal    # expected profit in borrow token units
    legs: Optional[LegQuotes] = None


@dataclass(frozen=True, slots=True)
class Leftovers:
    yes_company: Decimal = ZERO
    no_company: Decimal = ZERO
    yes_currency: Decimal = ZERO
    no_currency: Decimal = ZERO
    company: Decimal = ZERO    # base collateral dust
    currency: Decimal = ZERO

    def is_zero(self) -> bool:
        return all(v == 0 for v in self.as_dict().values())

    def as_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ArbitrageResult:
    """Produced exactly once per execution attempt."""

    success: bool
    direction: Direction
    borrow_token: str
    borrow_amount: Decimal
    profit: Decimal = ZERO          # in borrow token units
    leftovers: Leftovers = field(default_factory=Leftovers)
    tx_hash: Optional[str] = None
    gas_used: Optional[int] = None


@dataclass(frozen=True, slots=True)
class MarketSnapshot:
    """Everything the engine needs to price and size one proposal."""

    proposal: ProposalView
    yes_pool: Pool                  # YES company / YES currency
    no_pool: Pool                   # NO company / NO currency
    spot_route: SpotRoute           # company token -> currency token
    # outcome token (lowercase) -> pool pairing it with its own collateral
    prediction_pools: Mapping[str, Pool] = field(default_factory=dict)
    # borrow token (lowercase) -> amount the flash lender can provide
    lender_liquidity: Mapping[str, Decimal] = field(default_factory=dict)
