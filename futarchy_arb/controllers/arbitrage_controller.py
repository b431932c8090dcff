# futarchy_arb/controllers/arbitrage_controller.py
import logging
import os
import time
from decimal import Decimal
from typing import List, Optional, Tuple

from ..cli.view import View
from ..config.contracts import CONTRACT_ADDRESSES, TOKEN_ADDRESSES, is_zero_address
from ..core.context import ArbContext
from ..errors import ArbitrageError
from ..exchanges.pool_reader import PoolReader
from ..exchanges.price_oracle import route_price
from ..execution.coordinator import ExecutionCoordinator
from ..execution.onchain import FlashArbitrageContract
from ..managers.proposal_loader import ProposalLoader
from ..models.opportunity import Direction, MarketSnapshot
from ..services.tenderly_client import TenderlySimulationClient
from ..strategies.accounting import ProfitAccumulator
from ..strategies.engine import StrategyEngine

logger = logging.getLogger(__name__)


def parse_spot_pools(raw: Optional[str]) -> List[Tuple[str, str]]:
    """``"0xpool:balancer_v3,0xpool:algebra"`` -> [(address, pool_type), ...]."""
    if not raw:
        return [(CONTRACT_ADDRESSES["spotPool"], "balancer_v3")]
    hops = []
    for entry in raw.split(","):
        address, _, pool_type = entry.strip().partition(":")
        hops.append((address, pool_type or "balancer_v3"))
    return hops


class ArbitrageController:
    """Handles commands that read markets, evaluate and execute arbitrage."""

    def __init__(self, context: ArbContext, view: View):
        self.context = context
        self.view = view
        self.settings = context.settings
        self.loader = ProposalLoader(context.w3)
        self.reader = PoolReader(context.w3)
        self.engine = StrategyEngine(self.settings)
        self.session = ProfitAccumulator()

    def _contract(self) -> FlashArbitrageContract:
        address = os.environ.get("ARBITRAGE_CONTRACT_ADDRESS", CONTRACT_ADDRESSES["arbitrageContract"])
        if is_zero_address(address):
            raise ValueError("ARBITRAGE_CONTRACT_ADDRESS is not configured")
        return FlashArbitrageContract(
            self.context.w3,
            address,
            account=self.context.account,
            gas_limit=self.settings.gas_limit,
            tenderly=TenderlySimulationClient.from_env(os.environ, w3=self.context.w3),
        )

    def _load(self, proposal_address: str):
        """Load the proposal, pinned to the configured company/currency pair."""
        expected = (TOKEN_ADDRESSES["company"], TOKEN_ADDRESSES["currency"])
        if any(is_zero_address(token) for token in expected):
            expected = None
        return self.loader.load(proposal_address, expected_collaterals=expected)

    def _market(self, proposal_address: str) -> MarketSnapshot:
        proposal = self._load(proposal_address)
        refs = self.loader.locate_pools(proposal)
        intermediates = [t for t in os.environ.get("SPOT_INTERMEDIATE_TOKENS", "").split(",") if t]
        return self.reader.read_market(
            proposal,
            refs,
            spot_pools=parse_spot_pools(os.environ.get("SPOT_POOLS")),
            spot_path=[proposal.collateral_a, *intermediates, proposal.collateral_b],
        )

    def show_proposal(self, proposal_address: str):
        proposal = self._load(proposal_address)
        self.view.display_proposal(proposal, self.loader.locate_pools(proposal))

    def show_prices(self, proposal_address: str):
        self.view.display_prices(self.engine.observe(self._market(proposal_address)))

    def evaluate(self, proposal_address: str, amount: Decimal):
        market = self._market(proposal_address)
        prices = self.engine.observe(market)
        self.view.display_prices(prices)
        opportunity = self.engine.evaluate(
            market.proposal, prices.yes, prices.no, prices.spot, amount,
            spot_hops=market.spot_route.hops)
        self.view.display_opportunity(opportunity)
        return opportunity

    def paper_trade(self, market: MarketSnapshot, opportunity):
        """Run the sized opportunity through the offline coordinator."""
        p = market.proposal
        coordinator = ExecutionCoordinator.from_market(
            market,
            self.settings,
            lender_liquidity={opportunity.borrow_token: opportunity.borrow_amount},
            locked_collateral={
                p.collateral_a: opportunity.borrow_amount * 1000,
                p.collateral_b: opportunity.borrow_amount * 1000,
            },
        )
        result = coordinator.execute(opportunity, min_profit=Decimal(0))
        self.view.display_result(result, label="Paper trade")
        return result

    def gas_in_borrow_token(self, market: MarketSnapshot, opportunity, gas_cost: Decimal) -> Decimal:
        """Native gas cost expressed in units of the borrowed token."""
        in_currency = gas_cost * self.settings.gas_token_price
        if opportunity.direction == Direction.SPOT_SPLIT:
            return in_currency / route_price(market.spot_route)
        return in_currency

    def scan_once(self, proposal_address: str, execute: bool = False, paper: bool = False):
        market = self._market(proposal_address)
        opportunity = self.engine.scan(market)
        self.view.display_opportunity(opportunity)
        if opportunity is None:
            return None

        if paper:
            return self.paper_trade(market, opportunity)

        contract = self._contract()
        simulated = contract.simulate_opportunity(opportunity, self.settings.min_profit_margin)
        self.view.display_result(simulated, label="On-chain simulation")

        gas_cost = contract.gas_cost()
        gas = self.gas_in_borrow_token(market, opportunity, gas_cost)
        net_profit = simulated.profit - gas
        self.view.display_message(
            f"  Gas: {gas:.6f}  Net profit: {net_profit:.6f} of {opportunity.borrow_token}")
        if net_profit <= self.settings.min_net_profit:
            self.view.display_message(
                f"📉 Net profit below threshold (min {self.settings.min_net_profit}), not executing")
            return simulated
        if not execute:
            return simulated

        result = contract.execute_opportunity(
            opportunity, self.settings.min_profit_margin, expected=simulated)
        self.session.record(result, gas_cost=gas_cost)
        self.view.display_result(result, label="Executed")
        return result

    def scan(self, proposal_address: str, execute: bool = False, paper: bool = False,
             loop: bool = False, interval: Optional[int] = None):
        interval = interval or self.settings.scan_interval
        while True:
            try:
                self.scan_once(proposal_address, execute=execute, paper=paper)
            except ArbitrageError as e:
                if not loop:
                    raise
                self.view.display_error(f"{type(e).__name__}: {e}")
            if not loop:
                break
            self.view.display_session(self.session)
            self.view.display_verbose(f"Sleeping {interval}s")
            time.sleep(interval)

    def simulate(self, proposal_address: str, direction: Direction, amount: Decimal,
                 min_profit: Decimal = Decimal(0), tenderly: bool = False):
        proposal = self._load(proposal_address)
        borrow_token = proposal.collateral_a if direction == Direction.SPOT_SPLIT else proposal.collateral_b
        contract = self._contract()
        if tenderly:
            result = contract.simulate_bundle(proposal.address, borrow_token, amount, direction, min_profit)
        else:
            result = contract.simulate(proposal.address, borrow_token, amount, direction, min_profit)
        self.view.display_result(result, label="Simulation")
        return result
