from .proposal import OutcomeToken, ProposalView, PoolRefs
from .pools import PoolKind, WeightedPool, TickPool, Pool, SpotRoute
from .opportunity import (
    Direction,
    LegQuotes,
    ArbitrageOpportunity,
    Leftovers,
    ArbitrageResult,
    MarketSnapshot,
)

__all__ = [
    "OutcomeToken",
    "ProposalView",
    "PoolRefs",
    "PoolKind",
    "WeightedPool",
    "TickPool",
    "Pool",
    "SpotRoute",
    "Direction",
    "LegQuotes",
    "ArbitrageOpportunity",
    "Leftovers",
    "ArbitrageResult",
    "MarketSnapshot",
]
