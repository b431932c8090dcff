"""In-memory token balances with all-or-nothing scopes."""

from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, Mapping, Optional, Tuple

from ..errors import StepFailed

ZERO = Decimal(0)

Key = Tuple[str, str]


class Ledger:
    """Balances keyed by (holder, token), both compared case-insensitively."""

    def __init__(self, balances: Optional[Mapping[Key, Decimal]] = None):
        self._balances: Dict[Key, Decimal] = {}
        for (holder, token), amount in (balances or {}).items():
            self.credit(holder, token, Decimal(amount))

    @staticmethod
    def _key(holder: str, token: str) -> Key:
        return holder.lower(), token.lower()

    def balance_of(self, holder: str, token: str) -> Decimal:
        return self._balances.get(self._key(holder, token), ZERO)

    def credit(self, holder: str, token: str, amount: Decimal) -> None:
        if amount < 0:
            raise ValueError("credit amount must not be negative")
        key = self._key(holder, token)
        self._balances[key] = self._balances.get(key, ZERO) + amount

    def debit(self, holder: str, token: str, amount: Decimal) -> None:
        if amount < 0:
            raise ValueError("debit amount must not be negative")
        available = self.balance_of(holder, token)
        if available < amount:
            raise StepFailed("transfer", f"{holder} holds {available} of {token}, needs {amount}")
        self._balances[self._key(holder, token)] = available - amount

    def transfer(self, token: str, sender: str, recipient: str, amount: Decimal) -> None:
        self.debit(sender, token, amount)
        self.credit(recipient, token, amount)

    def snapshot(self) -> Dict[Key, Decimal]:
        return dict(self._balances)

    def restore(self, snapshot: Mapping[Key, Decimal]) -> None:
        self._balances = dict(snapshot)

    @contextmanager
    def atomic(self, *participants):
        """Undo every balance change, and every participant's state, on error.

        Participants expose ``snapshot()`` and ``restore(state)``.
        """
        saved = self.snapshot()
        states = [(p, p.snapshot()) for p in participants]
        try:
            yield self
        except BaseException:
            self.restore(saved)
            for participant, state in states:
                participant.restore(state)
            raise
