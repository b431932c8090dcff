"""Error taxonomy shared by the loader, the pricing layer and the executors."""

from typing import Any, Optional


class ArbitrageError(Exception):
    """Base class for every aborted arbitrage attempt.

    ``result`` is filled in by the execution coordinator with the
    (unsuccessful, fully rolled back) ArbitrageResult of the attempt.
    """

    def __init__(self, message: str, result: Optional[Any] = None):
        super().__init__(message)
        self.result = result


class InvalidProposal(ArbitrageError):
    """Proposal reference is not a Futarchy proposal or lacks its four outcomes."""


class PoolUnavailable(ArbitrageError):
    """Pool missing, empty, reverting, or not serving the requested token."""


class InsufficientLiquidity(ArbitrageError):
    """Flash-loan provider cannot lend the requested amount."""


class InsufficientToRepay(ArbitrageError):
    """Realized balance after the cycle is below principal plus fee."""

    def __init__(self, message: str, owed=None, available=None, result=None):
        super().__init__(message, result)
        self.owed = owed
        self.available = available


class ProfitBelowMinimum(ArbitrageError):
    """Loan repaid but the leftover profit is under the caller's minimum."""

    def __init__(self, message: str, profit=None, min_profit=None, result=None):
        super().__init__(message, result)
        self.profit = profit
        self.min_profit = min_profit


class StepFailed(ArbitrageError):
    """A split, swap or merge step reverted (e.g. slippage bound hit)."""

    def __init__(self, step: str, message: str, result=None):
        super().__init__(f"{step}: {message}", result)
        self.step = step


class TransactionFailed(Exception):
    """Exception raised when an on-chain transaction is mined but reverted."""

    def __init__(self, message: str, receipt: Any = None):
        super().__init__(message)
        self.receipt = receipt
