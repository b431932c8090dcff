import pytest

from futarchy_arb.config.settings import ArbitrageSettings
from futarchy_arb.models import ProposalView

from .helpers import GNO, NO_GNO, NO_SDAI, PROPOSAL, SDAI, YES_GNO, YES_SDAI


@pytest.fixture
def proposal():
    return ProposalView.build(
        PROPOSAL, GNO, SDAI, (YES_GNO, NO_GNO, YES_SDAI, NO_SDAI), name="Test proposal")


@pytest.fixture
def settings():
    return ArbitrageSettings()
