from dataclasses import replace
from decimal import Decimal

import pytest

from futarchy_arb.config.settings import ArbitrageSettings, ResidualPolicy
from futarchy_arb.models import Direction
from futarchy_arb.strategies import StrategyEngine

from .helpers import GNO, PRED_POOL, SDAI, YES_SDAI, make_market, spot_pool, tick_pool


def close(a, b, tol=Decimal("1e-9")):
    return abs(Decimal(a) - Decimal(b)) <= tol


class TestEvaluate:
    """Marginal-price decisions for one unit of the borrow token."""

    def test_both_outcomes_above_spot_is_spot_split(self, proposal):
        opp = StrategyEngine().evaluate(proposal, 120, 110, 100)
        assert opp.direction == Direction.SPOT_SPLIT
        assert opp.borrow_token == GNO
        assert opp.min_guaranteed_return == Decimal(110)
        assert opp.risky_residual == Decimal(10)
        # 10 of edge minus 0.3% flash fee and three 0.05% hops on 100 notional
        assert opp.expected_profit == Decimal("9.55")
        assert opp.borrow_token_profit == Decimal("0.0955")

    def test_both_outcomes_below_spot_is_merge_spot(self, proposal):
        opp = StrategyEngine().evaluate(proposal, 90, 95, 100)
        assert opp.direction == Direction.MERGE_SPOT
        assert opp.borrow_token == SDAI
        assert close(opp.min_guaranteed_return, Decimal(100) / Decimal(95))
        assert close(opp.expected_profit, Decimal(100) / Decimal(95) - 1 - Decimal("0.0045"))
        assert close(opp.risky_residual, 100 * (Decimal(1) / 90 - Decimal(1) / 95))

    def test_recoverable_below_one_returns_none(self, proposal):
        # 100 / 101 < 1 even though YES trades under spot
        assert StrategyEngine().evaluate(proposal, 90, 101, 100) is None

    def test_one_sided_edge_is_not_traded(self, proposal):
        assert StrategyEngine().evaluate(proposal, 130, 95, 100) is None

    def test_no_edge(self, proposal):
        assert StrategyEngine().evaluate(proposal, 100, 100, 100) is None

    def test_edge_smaller_than_fees(self, proposal):
        assert StrategyEngine().evaluate(proposal, "100.3", "100.2", 100) is None

    def test_min_profit_setting(self, proposal):
        engine = StrategyEngine(ArbitrageSettings(min_profit=Decimal(20)))
        assert engine.evaluate(proposal, 120, 110, 100) is None

    def test_amount_scales_values(self, proposal):
        opp = StrategyEngine().evaluate(proposal, 120, 110, 100, amount=2)
        assert opp.borrow_amount == Decimal(2)
        assert opp.min_guaranteed_return == Decimal(220)
        assert opp.expected_profit == Decimal("19.10")

    def test_extra_spot_hops_cost_more(self, proposal):
        one = StrategyEngine().evaluate(proposal, 120, 110, 100)
        two = StrategyEngine().evaluate(proposal, 120, 110, 100, spot_hops=2)
        assert two.expected_profit == one.expected_profit - Decimal("0.05")

    def test_non_positive_price_rejected(self, proposal):
        with pytest.raises(ValueError):
            StrategyEngine().evaluate(proposal, 0, 110, 100)

    @pytest.mark.parametrize("yes,no,spot", [
        (120, 110, 100), (90, 95, 100), (130, 95, 100), (100, 100, 100),
        (101, 99, 100), (50, 60, 100), (200, 150, 100),
    ])
    def test_direction_matches_price_ordering(self, proposal, yes, no, spot):
        opp = StrategyEngine().evaluate(proposal, yes, no, spot)
        if opp is None:
            return
        if opp.direction == Direction.SPOT_SPLIT:
            assert min(yes, no) > spot
        else:
            assert Decimal(spot) / max(yes, no) > 1


class TestSizing:
    def test_scan_picks_largest_profitable_split(self, proposal):
        market = make_market(proposal, 120, 110)
        opp = StrategyEngine().scan(market)
        assert opp.direction == Direction.SPOT_SPLIT
        assert opp.borrow_amount == Decimal("1")
        assert opp.legs is not None
        assert Decimal("109.9") < opp.legs.merged < Decimal(110)
        assert Decimal("9.9") < opp.risky_residual < Decimal("10.1")
        assert opp.borrow_token_profit > 0

    def test_shallow_spot_pool_limits_size(self, proposal):
        market = make_market(proposal, 120, 110, spot=spot_pool("2", "200"))
        opp = StrategyEngine().scan(market)
        assert opp.borrow_amount == Decimal("0.1")

    def test_lender_liquidity_caps_size(self, proposal):
        market = replace(make_market(proposal, 120, 110), lender_liquidity={GNO: Decimal("0.05")})
        opp = StrategyEngine().scan(market)
        assert opp.borrow_amount == Decimal("0.05")

    def test_scan_merge_spot(self, proposal):
        opp = StrategyEngine().scan(make_market(proposal, 90, 95))
        assert opp.direction == Direction.MERGE_SPOT
        assert opp.borrow_token == SDAI
        assert opp.borrow_amount == Decimal("100")
        assert opp.expected_profit == opp.borrow_token_profit

    @pytest.mark.parametrize("min_profit,found", [("0.05", True), ("0.5", False)])
    def test_min_profit_is_in_borrow_token_units(self, proposal, min_profit, found):
        # 9.55 sDAI of edge per GNO is 0.0955 GNO
        engine = StrategyEngine(ArbitrageSettings(min_profit=Decimal(min_profit)))
        evaluated = engine.evaluate(proposal, 120, 110, 100)
        scanned = engine.scan(make_market(proposal, 120, 110))
        assert (evaluated is not None) is found
        assert (scanned is not None) is found
        if found:
            assert scanned.borrow_token_profit >= Decimal(min_profit)

    def test_scan_without_edge(self, proposal):
        assert StrategyEngine().scan(make_market(proposal, "100.1", "100.05")) is None

    def test_observe_reads_all_three_prices(self, proposal):
        prices = StrategyEngine().observe(make_market(proposal, 120, 110))
        assert close(prices.yes, 120)
        assert close(prices.no, 110)
        assert prices.spot == Decimal(100)

    def test_liquidating_residual_adds_proceeds(self, proposal):
        prediction = {YES_SDAI: tick_pool(PRED_POOL, YES_SDAI, SDAI, "0.6")}
        market = make_market(proposal, 120, 110, prediction=prediction)
        forward = StrategyEngine().simulate(market, Direction.SPOT_SPLIT, 1)
        liquidate = StrategyEngine(
            ArbitrageSettings(residual_policy=ResidualPolicy.LIQUIDATE)
        ).simulate(market, Direction.SPOT_SPLIT, 1)
        assert forward.residual_token == YES_SDAI
        assert liquidate.profit > forward.profit
