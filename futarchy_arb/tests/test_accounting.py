from decimal import Decimal

from futarchy_arb.models import ArbitrageResult, Direction
from futarchy_arb.strategies import ProfitAccumulator

from .helpers import GNO, SDAI


def result(token, profit, direction=Direction.SPOT_SPLIT, success=True):
    return ArbitrageResult(success=success, direction=direction, borrow_token=token,
                           borrow_amount=Decimal(1), profit=Decimal(profit))


class TestProfitAccumulator:
    def test_groups_profit_by_token(self):
        acc = ProfitAccumulator()
        acc.record(result(GNO, "0.1"), gas_cost=Decimal("0.002"), timestamp=1.0)
        acc.record(result(GNO, "0.05"), timestamp=2.0)
        acc.record(result(SDAI, "3", Direction.MERGE_SPOT), gas_cost="0.001")

        assert acc.trades == 3
        assert acc.total(GNO) == Decimal("0.15")
        assert acc.total(SDAI.upper().replace("0X", "0x")) == Decimal(3)
        assert acc.totals_by_token() == {GNO: Decimal("0.15"), SDAI: Decimal(3)}

        summary = acc.summary()
        assert summary["trades_by_direction"] == {"SPOT_SPLIT": 2, "MERGE_SPOT": 1}
        assert summary["gas_cost"] == Decimal("0.003")
        assert summary["average_by_token"][GNO] == Decimal("0.075")

    def test_failed_results_are_not_recorded(self):
        acc = ProfitAccumulator()
        assert acc.record(result(GNO, "0", success=False)) is None
        assert acc.trades == 0
        assert acc.total() == 0

    def test_records_are_copies(self):
        acc = ProfitAccumulator()
        entry = acc.record(result(GNO, "1"), timestamp=5.0)
        acc.records.clear()
        assert acc.records == [entry]
        assert entry.timestamp == 5.0
