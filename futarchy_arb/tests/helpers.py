"""Builders for proposals, pools and markets plus a fake web3 surface."""

from decimal import Decimal
from types import SimpleNamespace

from web3.exceptions import ContractLogicError

from futarchy_arb.config.settings import ArbitrageSettings
from futarchy_arb.exchanges.tick_pool import price_to_sqrt_price_x96
from futarchy_arb.execution import (
    ExecutionCoordinator,
    Ledger,
    SimulatedFlashLender,
    SimulatedPositionRouter,
    VenueSet,
)
from futarchy_arb.models import MarketSnapshot, ProposalView, SpotRoute, TickPool, WeightedPool

PROPOSAL = "0x1111111111111111111111111111111111111111"
GNO = "0x9c58bacc331c9aa871afd802db6379a98e80cedb"
SDAI = "0xaf204776c7245bf4147c2612bf6e5972ee483701"
WAGNO = "0x7c16f0185a26db0ae7a9377f23bc18ea7ce5d644"
YES_GNO = "0xa1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1a1"
NO_GNO = "0xa2a2a2a2a2a2a2a2a2a2a2a2a2a2a2a2a2a2a2a2"
YES_SDAI = "0xb1b1b1b1b1b1b1b1b1b1b1b1b1b1b1b1b1b1b1b1"
NO_SDAI = "0xb2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2b2"

YES_POOL = "0xc1c1c1c1c1c1c1c1c1c1c1c1c1c1c1c1c1c1c1c1"
NO_POOL = "0xc2c2c2c2c2c2c2c2c2c2c2c2c2c2c2c2c2c2c2c2"
SPOT_POOL = "0xd1d7fa8871d84d0e77020fc28b7cd5718c446522"
PRED_POOL = "0xc3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3"

DEEP = 10 ** 24


def tick_pool(address, base, quote, price, liquidity=DEEP, fee=0):
    """Pool with ``base`` as token0 quoted at ``price`` units of ``quote``."""
    return TickPool(
        address=address,
        token0=base,
        token1=quote,
        sqrt_price_x96=price_to_sqrt_price_x96(Decimal(str(price))),
        liquidity=liquidity,
        fee=fee,
    )


def spot_pool(company_balance="1000", currency_balance="100000"):
    return WeightedPool(
        address=SPOT_POOL,
        tokens=(GNO, SDAI),
        balances=(Decimal(company_balance), Decimal(currency_balance)),
    )


def make_market(proposal, yes_price, no_price, spot=None, prediction=None):
    return MarketSnapshot(
        proposal=proposal,
        yes_pool=tick_pool(YES_POOL, proposal.yes_a, proposal.yes_b, yes_price),
        no_pool=tick_pool(NO_POOL, proposal.no_a, proposal.no_b, no_price),
        spot_route=SpotRoute((spot or spot_pool(),), (GNO, SDAI)),
        prediction_pools=prediction or {},
    )


def make_coordinator(market, settings=None, lender_funds=None, locked=None):
    settings = settings or ArbitrageSettings()
    ledger = Ledger()
    lender = SimulatedFlashLender(fee_rate=settings.flash_loan_fee)
    router = SimulatedPositionRouter(market.proposal)
    for token, amount in (lender_funds or {GNO: "1000", SDAI: "100000"}).items():
        ledger.credit(lender.address, token, Decimal(amount))
    for token, amount in (locked or {GNO: "1000000", SDAI: "1000000"}).items():
        ledger.credit(router.address, token, Decimal(amount))
    return ExecutionCoordinator(
        market.proposal, ledger, lender, router, VenueSet.from_market(market), settings)


# --------------------------------------------------------------------------- #
# Fake web3                                                                   #
# --------------------------------------------------------------------------- #

class FakeCall:
    def __init__(self, result):
        self.result = result

    def call(self, *args, **kwargs):
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def build_transaction(self, params):
        return dict(params, data="0x")


class FakeFunctions:
    def __init__(self, responses):
        self._responses = responses

    def __getattr__(self, name):
        if name not in self._responses:
            return lambda *args: FakeCall(ContractLogicError(f"execution reverted: {name}"))
        value = self._responses[name]

        def fn(*args):
            result = value(*args) if callable(value) else value
            return FakeCall(result)
        return fn


class FakeContract:
    def __init__(self, responses=None):
        self.functions = FakeFunctions(responses or {})


class FakeEth:
    def __init__(self, contracts):
        self.contracts = {k.lower(): v for k, v in contracts.items()}

    def contract(self, address=None, abi=None):
        return self.contracts.get(str(address).lower(), FakeContract())


class FakeWeb3:
    def __init__(self, contracts):
        self.eth = FakeEth(contracts)


def erc20(decimals=18):
    return FakeContract({"decimals": decimals})


class SendingEth(FakeEth):
    """FakeEth that can sign, send and mine a transaction."""

    def __init__(self, contracts, status=1, gas_price=10 ** 9):
        super().__init__(contracts)
        self.status = status
        self.gas_price = gas_price
        self.sent = []
        self.account = SimpleNamespace(
            sign_transaction=lambda tx, key: SimpleNamespace(raw_transaction=b"signed"))

    def get_transaction_count(self, address):
        return 7

    def send_raw_transaction(self, raw):
        self.sent.append(raw)
        return bytes.fromhex("abcd")

    def wait_for_transaction_receipt(self, tx_hash, timeout=120):
        return {"status": self.status, "gasUsed": 412_000}
