from decimal import Decimal, ROUND_DOWN, InvalidOperation

from ..models.opportunity import ArbitrageOpportunity, ArbitrageResult, Direction
from ..models.proposal import PoolRefs, ProposalView
from ..strategies.accounting import ProfitAccumulator
from ..strategies.engine import MarketPrices


class View:
    """Handles all console output and presentation."""

    def __init__(self, verbose=False):
        self.verbose = verbose

    def _floor_to_6(self, val):
        """Floor a number to 6 decimal places for safe display."""
        if val is None:
            return Decimal(0)
        try:
            return Decimal(str(val)).quantize(Decimal('0.000001'), rounding=ROUND_DOWN)
        except InvalidOperation:
            return Decimal(0)

    def display_proposal(self, proposal: ProposalView, pools: PoolRefs = None):
        print(f"\n=== Proposal {proposal.name or proposal.address} ===")
        print(f"  Address:      {proposal.address}")
        print(f"  Company (A):  {proposal.collateral_a}")
        print(f"  Currency (B): {proposal.collateral_b}")
        for token in proposal.outcomes:
            side = "A" if token.collateral.lower() == proposal.collateral_a.lower() else "B"
            print(f"  {token.outcome:<3} {side}:        {token.address}")
        if pools is not None:
            print(f"\n🔵 YES pool: {pools.yes_pool}")
            print(f"🔴 NO pool:  {pools.no_pool}")
            for token, pool in pools.prediction.items():
                print(f"   prediction {token}: {pool or 'none'}")
        print("=" * 22)

    def display_prices(self, prices: MarketPrices):
        print("\n=== Market Prices ===")
        print(f"  YES: {self._floor_to_6(prices.yes)}")
        print(f"  NO:  {self._floor_to_6(prices.no)}")
        print(f"  SPOT: {self._floor_to_6(prices.spot)}")
        print("=" * 22)

    def display_opportunity(self, opportunity: ArbitrageOpportunity):
        if opportunity is None:
            print("⚪ No profitable opportunity")
            return
        label = "SPOT → SPLIT" if opportunity.direction == Direction.SPOT_SPLIT else "MERGE → SPOT"
        print(f"\n💰 Opportunity: {label}")
        print(f"  Borrow:              {self._floor_to_6(opportunity.borrow_amount)} of {opportunity.borrow_token}")
        print(f"  Expected profit:     {self._floor_to_6(opportunity.expected_profit)}")
        print(f"  Guaranteed return:   {self._floor_to_6(opportunity.min_guaranteed_return)}")
        print(f"  Risky residual:      {self._floor_to_6(opportunity.risky_residual)}")
        if self.verbose and opportunity.legs is not None:
            legs = opportunity.legs
            print(f"  [legs] yes={legs.yes_out} no={legs.no_out} merged={legs.merged} returned={legs.returned}")

    def display_result(self, result: ArbitrageResult, label: str = "Result"):
        marker = "✅" if result.success else "❌"
        print(f"\n{marker} {label}: {result.direction.name} borrowing {self._floor_to_6(result.borrow_amount)}")
        print(f"  Profit: {self._floor_to_6(result.profit)} of {result.borrow_token}")
        for name, amount in result.leftovers.as_dict().items():
            if amount:
                print(f"  Leftover {name}: {self._floor_to_6(amount)}")
        if result.tx_hash:
            print(f"  Transaction: https://gnosisscan.io/tx/{result.tx_hash}")
        if result.gas_used:
            print(f"  Gas used: {result.gas_used}")

    def display_session(self, accumulator: ProfitAccumulator):
        summary = accumulator.summary()
        print(f"\n📊 Session: {summary['trades']} trades")
        for token, profit in summary["profit_by_token"].items():
            print(f"  {token}: {self._floor_to_6(profit)}")

    def display_error(self, message: str):
        """Displays an error message."""
        print(f"❌ ERROR: {message}")

    def display_message(self, message: str):
        """Displays a general message."""
        print(message)

    def display_verbose(self, message: str):
        """Displays a message only if verbose mode is enabled."""
        if self.verbose:
            print(f"[VERBOSE] {message}")
