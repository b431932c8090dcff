from decimal import Decimal
from types import SimpleNamespace

import pytest
import requests
from web3 import Web3
from web3.exceptions import ContractLogicError

from futarchy_arb.errors import (
    InsufficientLiquidity,
    InsufficientToRepay,
    ProfitBelowMinimum,
    StepFailed,
    TransactionFailed,
)
from futarchy_arb.execution import FlashArbitrageContract, classify_revert
from futarchy_arb.execution.onchain import RESULT_TYPE
from futarchy_arb.models import Direction
from futarchy_arb.services import TenderlySimulationClient
from futarchy_arb.services import tenderly_client

from .helpers import GNO, PROPOSAL, SDAI, FakeContract, FakeWeb3, SendingEth

ARBITRAGE = "0xabababababababababababababababababababab"
SENDER = "0xcdcdcdcdcdcdcdcdcdcdcdcdcdcdcdcdcdcdcdcd"
WAD = 10 ** 18

RAW_RESULT = (True, 5 * 10 ** 16, 0, 0, 10 * WAD, 0, 0, 0)


def contract(result=RAW_RESULT, status=1, account=None):
    w3 = FakeWeb3({ARBITRAGE: FakeContract({"executeArbitrage": result})})
    w3.eth = SendingEth(w3.eth.contracts, status=status)
    return FlashArbitrageContract(w3, ARBITRAGE, account=account)


class TestClassifyRevert:
    @pytest.mark.parametrize("reason,expected", [
        ("execution reverted: insufficient to repay flash loan", InsufficientToRepay),
        ("execution reverted: Profit below minimum", ProfitBelowMinimum),
        ("execution reverted: not enough liquidity", InsufficientLiquidity),
        ("execution reverted: SPL", StepFailed),
    ])
    def test_reasons(self, reason, expected):
        assert isinstance(classify_revert(ContractLogicError(reason)), expected)


class TestSimulate:
    def test_decodes_result(self):
        result = contract().simulate(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT)
        assert result.success
        assert result.direction == Direction.SPOT_SPLIT
        assert result.profit == Decimal("0.05")
        assert result.leftovers.yes_currency == Decimal(10)
        assert result.borrow_amount == Decimal(1)

    def test_decodes_collateral_leftovers(self):
        raw = (True, WAD, 0, 0, 0, 0, 3 * WAD, 7 * WAD)
        result = contract(result=raw).simulate(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT)
        assert result.profit == Decimal(1)
        assert result.leftovers.company == Decimal(3)
        assert result.leftovers.currency == Decimal(7)
        assert result.leftovers.yes_currency == 0

    def test_revert_is_classified(self):
        arb = contract(result=ContractLogicError("execution reverted: profit below minimum"))
        with pytest.raises(ProfitBelowMinimum):
            arb.simulate(PROPOSAL, SDAI, Decimal(10), Direction.MERGE_SPOT, Decimal(1))

    def test_arguments_are_wei(self):
        args = FlashArbitrageContract._args(PROPOSAL, GNO, Decimal("1.5"), Direction.MERGE_SPOT, "0.01")
        assert args[2] == 15 * 10 ** 17
        assert args[3] == 1
        assert args[4] == 10 ** 16
        assert args[0] == Web3.to_checksum_address(PROPOSAL)


class TestExecute:
    account = SimpleNamespace(address=Web3.to_checksum_address(SENDER), key=b"\x01" * 32)

    def test_sends_and_waits_for_receipt(self):
        arb = contract(account=self.account)
        result = arb.execute(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT, Decimal("0.01"))
        assert result.tx_hash == "abcd"
        assert result.gas_used == 412_000
        assert result.profit == Decimal("0.05")
        assert arb.w3.eth.sent == [b"signed"]

    def test_expected_result_skips_second_static_call(self):
        calls = []

        def execute_arbitrage(*args):
            calls.append(args)
            return RAW_RESULT

        arb = contract(result=execute_arbitrage, account=self.account)
        simulated = arb.simulate(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT, Decimal("0.01"))
        result = arb.execute(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT, Decimal("0.01"),
                             expected=simulated)
        # one for the static call, one to build the transaction
        assert len(calls) == 2
        assert result.profit == simulated.profit
        assert result.tx_hash == "abcd"

    def test_failed_receipt(self):
        arb = contract(status=0, account=self.account)
        with pytest.raises(TransactionFailed) as info:
            arb.execute(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT, Decimal(0))
        assert info.value.receipt["status"] == 0

    def test_reverting_simulation_sends_nothing(self):
        arb = contract(result=ContractLogicError("insufficient to repay"), account=self.account)
        with pytest.raises(InsufficientToRepay):
            arb.execute(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT, Decimal(0))
        assert arb.w3.eth.sent == []

    def test_needs_account(self):
        with pytest.raises(ValueError):
            contract().execute(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT, Decimal(0))

    def test_gas_cost(self):
        assert contract().gas_cost() == Decimal("0.003")


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class TestTenderly:
    def client(self, w3):
        return TenderlySimulationClient("key", "acct", "proj", w3=w3)

    def arb(self):
        w3 = Web3()
        return FlashArbitrageContract(w3, ARBITRAGE, tenderly=self.client(w3))

    def test_bundle_result_is_decoded(self, monkeypatch):
        w3 = Web3()
        output = "0x" + w3.codec.encode([RESULT_TYPE], [RAW_RESULT]).hex()
        posted = {}

        def fake_post(url, headers, json, timeout):
            posted.update(url=url, json=json)
            return FakeResponse({"simulation_results": [{"transaction": {
                "status": True,
                "gas_used": 390_000,
                "transaction_info": {"call_trace": {"output": output}},
            }}]})

        monkeypatch.setattr(tenderly_client.requests, "post", fake_post)
        result = self.arb().simulate_bundle(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT)

        assert result.profit == Decimal("0.05")
        assert result.gas_used == 390_000
        assert posted["url"].endswith("/account/acct/project/proj/simulate-bundle")
        tx = posted["json"]["simulations"][0]
        assert tx["network_id"] == "100"
        assert tx["input"].startswith("0x")

    def test_reverted_bundle(self, monkeypatch):
        def fake_post(url, headers, json, timeout):
            return FakeResponse([{"transaction": {
                "status": False, "error_message": "execution reverted: profit below minimum"}}])

        monkeypatch.setattr(tenderly_client.requests, "post", fake_post)
        with pytest.raises(ProfitBelowMinimum):
            self.arb().simulate_bundle(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT)

    def test_api_failure(self, monkeypatch):
        def fake_post(*args, **kwargs):
            raise requests.exceptions.ConnectionError("down")

        monkeypatch.setattr(tenderly_client.requests, "post", fake_post)
        with pytest.raises(StepFailed) as info:
            self.arb().simulate_bundle(PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT)
        assert info.value.step == "tenderly"

    def test_without_client(self):
        with pytest.raises(ValueError):
            FlashArbitrageContract(Web3(), ARBITRAGE).simulate_bundle(
                PROPOSAL, GNO, Decimal(1), Direction.SPOT_SPLIT)

    def test_from_env(self):
        assert TenderlySimulationClient.from_env({}) is None
        env = {"TENDERLY_ACCESS_KEY": "k", "TENDERLY_ACCOUNT_SLUG": "a", "TENDERLY_PROJECT_SLUG": "p"}
        assert TenderlySimulationClient.from_env(env).project_slug == "p"

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            TenderlySimulationClient("", "acct", "proj")
