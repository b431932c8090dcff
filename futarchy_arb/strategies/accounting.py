"""Session profit bookkeeping for the scanning loop."""

import time
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from ..models.opportunity import ArbitrageResult, Direction


@dataclass(frozen=True, slots=True)
class TradeRecord:
    direction: Direction
    token: str
    borrow_amount: Decimal
    profit: Decimal
    gas_cost: Decimal
    tx_hash: Optional[str]
    timestamp: float


class ProfitAccumulator:
    """Running totals of realized profit, grouped by profit token."""

    def __init__(self):
        self._records: List[TradeRecord] = []

    def record(self, result: ArbitrageResult, gas_cost=Decimal(0),
               timestamp: Optional[float] = None) -> Optional[TradeRecord]:
        if not result.success:
            return None
        entry = TradeRecord(
            direction=result.direction,
            token=result.borrow_token,
            borrow_amount=result.borrow_amount,
            profit=result.profit,
            gas_cost=Decimal(gas_cost),
            tx_hash=result.tx_hash,
            timestamp=time.time() if timestamp is None else timestamp,
        )
        self._records.append(entry)
        return entry

    @property
    def trades(self) -> int:
        return len(self._records)

    @property
    def records(self) -> List[TradeRecord]:
        return list(self._records)

    def total(self, token: Optional[str] = None) -> Decimal:
        return sum(
            (r.profit for r in self._records if token is None or r.token.lower() == token.lower()),
            Decimal(0),
        )

    def totals_by_token(self) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = defaultdict(Decimal)
        for r in self._records:
            totals[r.token] += r.profit
        return dict(totals)

    def average(self, token: str) -> Decimal:
        count = sum(1 for r in self._records if r.token.lower() == token.lower())
        return self.total(token) / count if count else Decimal(0)

    def summary(self) -> Dict[str, object]:
        by_direction: Dict[str, int] = defaultdict(int)
        for r in self._records:
            by_direction[r.direction.name] += 1
        return {
            "trades": self.trades,
            "profit_by_token": self.totals_by_token(),
            "average_by_token": {t: self.average(t) for t in self.totals_by_token()},
            "trades_by_direction": dict(by_direction),
            "gas_cost": sum((r.gas_cost for r in self._records), Decimal(0)),
        }
