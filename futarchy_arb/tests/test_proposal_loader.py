import pytest
from web3.exceptions import ContractLogicError

from futarchy_arb.config.contracts import ZERO_ADDRESS
from futarchy_arb.errors import InvalidProposal, PoolUnavailable
from futarchy_arb.managers import ProposalLoader
from futarchy_arb.models import ProposalView

from .helpers import (
    GNO,
    NO_GNO,
    NO_POOL,
    NO_SDAI,
    PRED_POOL,
    PROPOSAL,
    SDAI,
    YES_GNO,
    YES_POOL,
    YES_SDAI,
    FakeContract,
    FakeWeb3,
)

FACTORY = "0xe1e1e1e1e1e1e1e1e1e1e1e1e1e1e1e1e1e1e1e1"
OUTCOMES = (YES_GNO, NO_GNO, YES_SDAI, NO_SDAI)


def proposal_contract(collateral_a=GNO, collateral_b=SDAI, outcomes=OUTCOMES, **extra):
    def wrapped(index):
        if index >= len(outcomes):
            return ContractLogicError("execution reverted")
        return outcomes[index], b""

    responses = {
        "collateralToken1": collateral_a,
        "collateralToken2": collateral_b,
        "wrappedOutcome": wrapped,
        "marketName": "Will GNO hit 200?",
    }
    responses.update(extra)
    return FakeContract(responses)


def factory(pools):
    table = {frozenset((a.lower(), b.lower())): pool for (a, b), pool in pools.items()}
    return FakeContract({
        "poolByPair": lambda a, b: table.get(frozenset((a.lower(), b.lower())), ZERO_ADDRESS),
    })


def loader_for(contract=None, pools=None):
    contracts = {PROPOSAL: contract or proposal_contract()}
    contracts[FACTORY] = factory(pools or {})
    return ProposalLoader(FakeWeb3(contracts), factory_address=FACTORY)


class TestLoad:
    def test_loads_collaterals_and_outcomes(self):
        view = loader_for().load(PROPOSAL)
        assert view.collateral_a == GNO
        assert view.collateral_b == SDAI
        assert (view.yes_a, view.no_a, view.yes_b, view.no_b) == OUTCOMES
        assert view.name == "Will GNO hit 200?"
        assert view.outcome_pair(SDAI) == (YES_SDAI, NO_SDAI)
        assert view.collateral_of(NO_GNO) == GNO

    def test_expected_collaterals_match_ignoring_case(self):
        view = loader_for().load(PROPOSAL, expected_collaterals=(GNO.upper().replace("0X", "0x"), SDAI))
        assert view.collateral_b == SDAI

    def test_collateral_mismatch(self):
        with pytest.raises(InvalidProposal):
            loader_for().load(PROPOSAL, expected_collaterals=(SDAI, GNO))

    def test_missing_outcome_slot(self):
        with pytest.raises(InvalidProposal, match="outcome slots"):
            loader_for(proposal_contract(outcomes=OUTCOMES[:3])).load(PROPOSAL)

    def test_zero_collateral(self):
        with pytest.raises(InvalidProposal, match="zero address"):
            loader_for(proposal_contract(collateral_b=ZERO_ADDRESS)).load(PROPOSAL)

    def test_zero_outcome(self):
        outcomes = (YES_GNO, ZERO_ADDRESS, YES_SDAI, NO_SDAI)
        with pytest.raises(InvalidProposal):
            loader_for(proposal_contract(outcomes=outcomes)).load(PROPOSAL)

    def test_duplicate_tokens(self):
        outcomes = (YES_GNO, YES_GNO, YES_SDAI, NO_SDAI)
        with pytest.raises(InvalidProposal, match="reuses"):
            loader_for(proposal_contract(outcomes=outcomes)).load(PROPOSAL)

    def test_zero_reference(self):
        with pytest.raises(InvalidProposal):
            loader_for().load(ZERO_ADDRESS)

    def test_not_an_address(self):
        with pytest.raises(InvalidProposal):
            loader_for().load("not-an-address")

    def test_contract_that_is_not_a_proposal(self):
        # no collateralToken1() -> revert
        with pytest.raises(InvalidProposal):
            loader_for(FakeContract({})).load(PROPOSAL)

    def test_market_name_is_optional(self):
        contract = proposal_contract()
        del contract.functions._responses["marketName"]
        assert loader_for(contract).load(PROPOSAL).name == ""


class TestLocatePools:
    def view(self):
        return ProposalView.build(PROPOSAL, GNO, SDAI, OUTCOMES)

    def test_finds_conditional_and_prediction_pools(self):
        loader = loader_for(pools={
            (YES_GNO, YES_SDAI): YES_POOL,
            (NO_SDAI, NO_GNO): NO_POOL,
            (YES_SDAI, SDAI): PRED_POOL,
        })
        refs = loader.locate_pools(self.view())
        assert refs.yes_pool == YES_POOL
        assert refs.no_pool == NO_POOL
        assert refs.prediction[YES_SDAI] == PRED_POOL
        assert refs.prediction[NO_GNO] is None
        assert len(refs.prediction) == 4

    def test_missing_yes_pool(self):
        loader = loader_for(pools={(NO_GNO, NO_SDAI): NO_POOL})
        with pytest.raises(PoolUnavailable, match="YES"):
            loader.locate_pools(self.view())

    def test_missing_no_pool(self):
        loader = loader_for(pools={(YES_GNO, YES_SDAI): YES_POOL})
        with pytest.raises(PoolUnavailable, match="NO"):
            loader.locate_pools(self.view())

    def test_factory_revert_is_unavailable(self):
        loader = ProposalLoader(FakeWeb3({FACTORY: FakeContract({})}), factory_address=FACTORY)
        with pytest.raises(PoolUnavailable):
            loader.find_pool(YES_GNO, YES_SDAI)
