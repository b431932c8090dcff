# futarchy_arb/managers/proposal_loader.py
import logging
from typing import Optional, Tuple

from web3 import Web3

from ..config.abis import ALGEBRA_FACTORY_ABI, FUTARCHY_PROPOSAL_ABI
from ..config.contracts import CONTRACT_ADDRESSES, is_zero_address
from ..errors import InvalidProposal, PoolUnavailable
from ..exchanges.pool_reader import CALL_ERRORS
from ..models.proposal import PoolRefs, ProposalView

logger = logging.getLogger(__name__)

OUTCOME_SLOTS = 4


class ProposalLoader:
    """Reads a Futarchy proposal's collaterals and outcome tokens.

    Stateless: every ``load`` goes back to the chain, nothing is cached.
    """

    def __init__(self, w3: Web3, factory_address: Optional[str] = None):
        self.w3 = w3
        self.factory_address = factory_address or CONTRACT_ADDRESSES["algebraFactory"]

    def _read(self, fn, what: str, proposal_ref: str):
        try:
            return fn.call()
        except CALL_ERRORS as exc:
            raise InvalidProposal(f"{what} failed on {proposal_ref}: {exc}") from exc

    def load(self, proposal_ref: str,
             expected_collaterals: Optional[Tuple[str, str]] = None) -> ProposalView:
        """
        Resolve a proposal into its two collaterals and four outcome tokens.

        Args:
            proposal_ref: Address of the Futarchy proposal contract.
            expected_collaterals: Optional (company, currency) pair the proposal
                must be collateralized with.

        Returns:
            A fully populated ProposalView.

        Raises:
            InvalidProposal: not a proposal, fewer than four outcomes, zero or
                duplicate addresses, or a collateral mismatch.
        """
        try:
            address = Web3.to_checksum_address(proposal_ref)
        except (TypeError, ValueError) as exc:
            raise InvalidProposal(f"Not an address: {proposal_ref}") from exc
        if is_zero_address(address):
            raise InvalidProposal("Proposal reference is the zero address")

        contract = self.w3.eth.contract(address=address, abi=FUTARCHY_PROPOSAL_ABI)
        collateral_a = self._read(contract.functions.collateralToken1(), "collateralToken1", address)
        collateral_b = self._read(contract.functions.collateralToken2(), "collateralToken2", address)

        outcomes = []
        for index in range(OUTCOME_SLOTS):
            try:
                wrapped, _data = contract.functions.wrappedOutcome(index).call()
            except CALL_ERRORS as exc:
                raise InvalidProposal(
                    f"Proposal {address} exposes {index} outcome slots, {OUTCOME_SLOTS} required"
                ) from exc
            outcomes.append(wrapped)

        for label, token in (("collateralToken1", collateral_a), ("collateralToken2", collateral_b)):
            if is_zero_address(token):
                raise InvalidProposal(f"{label} of {address} is the zero address")
        for index, token in enumerate(outcomes):
            if is_zero_address(token):
                raise InvalidProposal(f"wrappedOutcome({index}) of {address} is the zero address")

        everything = [t.lower() for t in [collateral_a, collateral_b, *outcomes]]
        if len(set(everything)) != len(everything):
            raise InvalidProposal(f"Proposal {address} reuses a token across collaterals/outcomes")

        if expected_collaterals is not None:
            want = tuple(t.lower() for t in expected_collaterals)
            got = (collateral_a.lower(), collateral_b.lower())
            if want != got:
                raise InvalidProposal(
                    f"Proposal {address} is collateralized by {got}, expected {want}"
                )

        name = ""
        try:
            name = contract.functions.marketName().call()
        except CALL_ERRORS:
            logger.debug("marketName() not available on %s", address)

        view = ProposalView.build(address, collateral_a, collateral_b, outcomes, name)
        logger.info("Loaded proposal %s (%s)", address, name or "unnamed")
        return view

    def find_pool(self, token_a: str, token_b: str) -> Optional[str]:
        """Algebra factory lookup; None when no pool exists for the pair."""
        factory = self.w3.eth.contract(
            address=Web3.to_checksum_address(self.factory_address), abi=ALGEBRA_FACTORY_ABI)
        try:
            pool = factory.functions.poolByPair(
                Web3.to_checksum_address(token_a), Web3.to_checksum_address(token_b)).call()
        except CALL_ERRORS as exc:
            raise PoolUnavailable(f"poolByPair({token_a}, {token_b}) failed: {exc}") from exc
        return None if is_zero_address(pool) else pool

    def locate_pools(self, view: ProposalView) -> PoolRefs:
        yes_pool = self.find_pool(view.yes_a, view.yes_b)
        no_pool = self.find_pool(view.no_a, view.no_b)
        if yes_pool is None:
            raise PoolUnavailable(f"No YES pool for {view.yes_a}/{view.yes_b}")
        if no_pool is None:
            raise PoolUnavailable(f"No NO pool for {view.no_a}/{view.no_b}")

        prediction = {
            token.address: self.find_pool(token.address, token.collateral)
            for token in view.outcomes
        }
        return PoolRefs(yes_pool=yes_pool, no_pool=no_pool, prediction=prediction)
