"""Immutable view of **one** futarchy proposal: its two collaterals and the four
outcome tokens they split into. Nothing here touches the chain."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from futarchy_arb.config.contracts import is_zero_address
from futarchy_arb.errors import InvalidProposal

__all__ = ["OutcomeToken", "ProposalView", "PoolRefs", "YES_A", "NO_A", "YES_B", "NO_B"]

# wrappedOutcome(i) slots, fixed by the Futarchy proposal contract
YES_A, NO_A, YES_B, NO_B = 0, 1, 2, 3


@dataclass(frozen=True, slots=True)
class OutcomeToken:
    address: str
    collateral: str    # the collateral this outcome token is redeemable for
    outcome: str       # "YES" or "NO"
    index: int


@dataclass(frozen=True, slots=True)
class ProposalView:
    address: str
    collateral_a: str  # company token (GNO)
    collateral_b: str  # currency token (sDAI)
    outcomes: Tuple[OutcomeToken, ...]
    name: str = ""

    @property
    def yes_a(self) -> str:
        return self.outcomes[YES_A].address

    @property
    def no_a(self) -> str:
        return self.outcomes[NO_A].address

    @property
    def yes_b(self) -> str:
        return self.outcomes[YES_B].address

    @property
    def no_b(self) -> str:
        return self.outcomes[NO_B].address

    def outcome_pair(self, collateral: str) -> Tuple[str, str]:
        """Return the (YES, NO) tokens a collateral splits into."""
        if collateral.lower() == self.collateral_a.lower():
            return self.yes_a, self.no_a
        if collateral.lower() == self.collateral_b.lower():
            return self.yes_b, self.no_b
        raise ValueError(f"{collateral} is not a collateral of proposal {self.address}")

    def collateral_of(self, outcome_token: str) -> str:
        for token in self.outcomes:
            if token.address.lower() == outcome_token.lower():
                return token.collateral
        raise ValueError(f"{outcome_token} is not an outcome token of proposal {self.address}")

    @classmethod
    def build(cls, address: str, collateral_a: str, collateral_b: str,
              outcome_addresses, name: str = "") -> "ProposalView":
        yes_a, no_a, yes_b, no_b = outcome_addresses
        outcomes = (
            OutcomeToken(yes_a, collateral_a, "YES", YES_A),
            OutcomeToken(no_a, collateral_a, "NO", NO_A),
            OutcomeToken(yes_b, collateral_b, "YES", YES_B),
            OutcomeToken(no_b, collateral_b, "NO", NO_B),
        )
        return cls(address, collateral_a, collateral_b, outcomes, name)

    @classmethod
    def from_config(cls, environ: Optional[Mapping[str, str]] = None) -> "ProposalView":
        """Offline view assembled from environment variables.

        Every address must be set and non-zero, otherwise InvalidProposal.
        """
        env = os.environ if environ is None else environ

        def address(name: str) -> str:
            value = env.get(name, "").strip()
            try:
                missing = is_zero_address(value)
            except ValueError as exc:
                raise InvalidProposal(f"{name} is not an address: {value!r}") from exc
            if missing:
                raise InvalidProposal(f"{name} is not configured")
            return value

        return cls.build(
            address=address("FUTARCHY_PROPOSAL_ADDRESS"),
            collateral_a=address("COMPANY_TOKEN_ADDRESS"),
            collateral_b=address("CURRENCY_TOKEN_ADDRESS"),
            outcome_addresses=(
                address("YES_COMPANY_ADDRESS"),
                address("NO_COMPANY_ADDRESS"),
                address("YES_CURRENCY_ADDRESS"),
                address("NO_CURRENCY_ADDRESS"),
            ),
            name=env.get("PROPOSAL_NAME", ""),
        )


@dataclass(frozen=True, slots=True)
class PoolRefs:
    yes_pool: str      # YES_A / YES_B
    no_pool: str       # NO_A / NO_B
    # outcome token -> pool pairing it with its own collateral (None if absent)
    prediction: Mapping[str, Optional[str]] = field(default_factory=dict)
