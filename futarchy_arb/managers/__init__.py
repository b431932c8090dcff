# futarchy_arb/managers/__init__.py
from .proposal_loader import ProposalLoader

__all__ = [
    "ProposalLoader"
]
