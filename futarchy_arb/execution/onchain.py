# futarchy_arb/execution/onchain.py
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..config.abis import FLASH_ARBITRAGE_ABI
from ..config.network import CHAIN_ID, EXPLORER_TX_URL
from ..errors import (
    ArbitrageError,
    InsufficientLiquidity,
    InsufficientToRepay,
    ProfitBelowMinimum,
    StepFailed,
    TransactionFailed,
)
from ..models.opportunity import ArbitrageOpportunity, ArbitrageResult, Direction, Leftovers
from ..services.tenderly_client import TenderlySimulationClient

logger = logging.getLogger(__name__)

WAD = Decimal(10) ** 18

RESULT_TYPE = "(bool,uint256,uint256,uint256,uint256,uint256,uint256,uint256)"


def classify_revert(exc: Exception) -> ArbitrageError:
    """Map a revert reason from the arbitrage contract onto the error taxonomy."""
    message = str(getattr(exc, "message", None) or exc)
    lowered = message.lower()
    if "insufficient to repay" in lowered:
        return InsufficientToRepay(message)
    if "profit below" in lowered:
        return ProfitBelowMinimum(message)
    if "liquidity" in lowered:
        return InsufficientLiquidity(message)
    return StepFailed("executeArbitrage", message)


def _raw_transaction(signed_tx):
    # web3 v7 renamed rawTransaction
    raw = getattr(signed_tx, "raw_transaction", None)
    return raw if raw is not None else signed_tx.rawTransaction


class FlashArbitrageContract:
    """Thin wrapper around the deployed flash-arbitrage executor contract."""

    def __init__(self, w3: Web3, address: str, account=None, gas_limit: int = 3_000_000,
                 tenderly: Optional[TenderlySimulationClient] = None, chain_id: int = CHAIN_ID):
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)
        self.account = account
        self.gas_limit = gas_limit
        self.tenderly = tenderly
        self.chain_id = chain_id
        self.contract = w3.eth.contract(address=self.address, abi=FLASH_ARBITRAGE_ABI)

    @property
    def sender(self) -> Optional[str]:
        return self.account.address if self.account is not None else None

    @staticmethod
    def _args(proposal: str, borrow_token: str, amount, direction, min_profit):
        return [
            Web3.to_checksum_address(proposal),
            Web3.to_checksum_address(borrow_token),
            Web3.to_wei(Decimal(str(amount)), "ether"),
            int(Direction(direction)),
            Web3.to_wei(Decimal(str(min_profit)), "ether"),
        ]

    @staticmethod
    def _decode(raw, direction, borrow_token: str, amount) -> ArbitrageResult:
        success, profit, yes_company, no_company, yes_currency, no_currency, company, currency = raw
        return ArbitrageResult(
            success=bool(success),
            direction=Direction(direction),
            borrow_token=borrow_token,
            borrow_amount=Decimal(str(amount)),
            profit=Decimal(profit) / WAD,
            leftovers=Leftovers(
                yes_company=Decimal(yes_company) / WAD,
                no_company=Decimal(no_company) / WAD,
                yes_currency=Decimal(yes_currency) / WAD,
                no_currency=Decimal(no_currency) / WAD,
                company=Decimal(company) / WAD,
                currency=Decimal(currency) / WAD,
            ),
        )

    def simulate(self, proposal: str, borrow_token: str, amount, direction, min_profit=0) -> ArbitrageResult:
        """Static call of executeArbitrage; nothing is sent."""
        fn = self.contract.functions.executeArbitrage(
            *self._args(proposal, borrow_token, amount, direction, min_profit))
        tx = {"from": self.sender} if self.sender else {}
        try:
            raw = fn.call(tx)
        except (ContractLogicError, BadFunctionCallOutput, ValueError) as exc:
            raise classify_revert(exc) from exc
        return self._decode(raw, direction, borrow_token, amount)

    def simulate_bundle(self, proposal: str, borrow_token: str, amount, direction,
                        min_profit=0) -> ArbitrageResult:
        """Same as ``simulate`` but through Tenderly's simulate-bundle API."""
        if self.tenderly is None:
            raise ValueError("No Tenderly client configured")
        tx = self.tenderly.encode_and_build_transaction(
            network_id=str(self.chain_id),
            from_address=self.sender or self.address,
            to_address=self.address,
            abi=FLASH_ARBITRAGE_ABI,
            function_name="executeArbitrage",
            args=self._args(proposal, borrow_token, amount, direction, min_profit),
            gas=self.gas_limit,
        )
        results = self.tenderly.simulate_bundle([tx])
        if not results:
            raise StepFailed("tenderly", "simulate-bundle returned no result")

        transaction = results[0].get("transaction", {})
        if not transaction.get("status"):
            raise classify_revert(Exception(transaction.get("error_message") or "reverted"))
        output = transaction["transaction_info"]["call_trace"]["output"]
        (raw,) = self.w3.codec.decode([RESULT_TYPE], bytes.fromhex(output.removeprefix("0x")))
        result = self._decode(raw, direction, borrow_token, amount)
        return replace(result, gas_used=transaction.get("gas_used"))

    def gas_cost(self) -> Decimal:
        """Worst-case gas cost in native token: gas limit times current gas price."""
        return Decimal(self.gas_limit * self.w3.eth.gas_price) / WAD

    def execute(self, proposal: str, borrow_token: str, amount, direction, min_profit,
                expected: Optional[ArbitrageResult] = None) -> ArbitrageResult:
        """Sign and send executeArbitrage and wait for the receipt.

        The call is simulated first unless ``expected`` already holds the result
        of a static call with the same arguments.
        """
        if self.account is None:
            raise ValueError("No account configured for transactions.")
        if expected is None:
            expected = self.simulate(proposal, borrow_token, amount, direction, min_profit)

        tx_params = {
            'from': self.account.address,
            'nonce': self.w3.eth.get_transaction_count(self.account.address),
            'gas': self.gas_limit,
            'gasPrice': self.w3.eth.gas_price,
            'chainId': self.chain_id,
        }
        tx = self.contract.functions.executeArbitrage(
            *self._args(proposal, borrow_token, amount, direction, min_profit)
        ).build_transaction(tx_params)

        signed_tx = self.w3.eth.account.sign_transaction(tx, self.account.key)
        tx_hash = self.w3.eth.send_raw_transaction(_raw_transaction(signed_tx))
        logger.info("Arbitrage transaction sent: %s%s", EXPLORER_TX_URL, tx_hash.hex())

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=120)
        if receipt['status'] != 1:
            raise TransactionFailed(f"executeArbitrage reverted in {tx_hash.hex()}", receipt)
        return replace(expected, tx_hash=tx_hash.hex(), gas_used=receipt.get('gasUsed'))

    @staticmethod
    def min_profit_for(opportunity: ArbitrageOpportunity, min_profit_margin) -> Decimal:
        """``min_profit_margin`` of the expected borrow-token profit, never negative."""
        return max(opportunity.borrow_token_profit * Decimal(str(min_profit_margin)), Decimal(0))

    def simulate_opportunity(self, opportunity: ArbitrageOpportunity, min_profit_margin) -> ArbitrageResult:
        return self.simulate(
            opportunity.proposal.address,
            opportunity.borrow_token,
            opportunity.borrow_amount,
            opportunity.direction,
            self.min_profit_for(opportunity, min_profit_margin),
        )

    def execute_opportunity(self, opportunity: ArbitrageOpportunity, min_profit_margin,
                            expected: Optional[ArbitrageResult] = None) -> ArbitrageResult:
        """Execute demanding ``min_profit_margin`` of the expected borrow-token profit.

        Pass the result of ``simulate_opportunity`` as ``expected`` to skip the
        second static call.
        """
        return self.execute(
            opportunity.proposal.address,
            opportunity.borrow_token,
            opportunity.borrow_amount,
            opportunity.direction,
            self.min_profit_for(opportunity, min_profit_margin),
            expected=expected,
        )
