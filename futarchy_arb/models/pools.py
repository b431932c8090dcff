"""Pool snapshots. A pool is a tagged variant: ``kind`` selects the pricing
and quoting math, there is no shared base class."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

__all__ = ["PoolKind", "WeightedPool", "TickPool", "Pool", "SpotRoute"]


class PoolKind(str, Enum):
    WEIGHTED = "weighted"   # Balancer style constant-product on weighted balances
    TICK = "tick"           # concentrated liquidity, Uniswap V3 / Algebra


@dataclass(frozen=True, slots=True)
class WeightedPool:
    address: str
    tokens: Tuple[str, ...]
    balances: Tuple[Decimal, ...]              # raw balances in token units
    weights: Tuple[Decimal, ...] = ()          # empty -> equal weights
    rates: Tuple[Decimal, ...] = ()            # rate-provider factors, empty -> 1
    underlying: Tuple[Optional[str], ...] = () # token each wrapped entry is worth
    swap_fee: Decimal = Decimal("0")

    kind: ClassVar[PoolKind] = PoolKind.WEIGHTED

    def __post_init__(self):
        n = len(self.tokens)
        if len(self.balances) != n:
            raise ValueError("balances must match tokens")
        for name in ("weights", "rates", "underlying"):
            value = getattr(self, name)
            if value and len(value) != n:
                raise ValueError(f"{name} must match tokens")

    def weight(self, i: int) -> Decimal:
        return self.weights[i] if self.weights else Decimal(1) / len(self.tokens)

    def rate(self, i: int) -> Decimal:
        return self.rates[i] if self.rates else Decimal(1)


@dataclass(frozen=True, slots=True)
class TickPool:
    address: str
    token0: str
    token1: str
    sqrt_price_x96: int
    liquidity: int
    decimals0: int = 18
    decimals1: int = 18
    fee: int = 0            # hundredths of a bip, 500 == 0.05%
    flavor: str = "algebra" # "algebra" (globalState) or "uniswap_v3" (slot0)

    kind: ClassVar[PoolKind] = PoolKind.TICK

    @property
    def fee_rate(self) -> Decimal:
        return Decimal(self.fee) / Decimal(1_000_000)


Pool = Union[WeightedPool, TickPool]


@dataclass(frozen=True, slots=True)
class SpotRoute:
    """Ordered hops from ``path[0]`` to ``path[-1]``; hop i trades path[i] for path[i + 1]."""

    pools: Tuple[Pool, ...]
    path: Tuple[str, ...]

    def __post_init__(self):
        if not self.pools:
            raise ValueError("a route needs at least one pool")
        if len(self.path) != len(self.pools) + 1:
            raise ValueError("path must list one more token than there are pools")

    @property
    def hops(self) -> int:
        return len(self.pools)

    @property
    def token_in(self) -> str:
        return self.path[0]

    @property
    def token_out(self) -> str:
        return self.path[-1]

    def reversed(self) -> "SpotRoute":
        return SpotRoute(tuple(reversed(self.pools)), tuple(reversed(self.path)))

    def with_pools(self, pools) -> "SpotRoute":
        return SpotRoute(tuple(pools), self.path)
