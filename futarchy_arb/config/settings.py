"""Runtime knobs for the strategy engine and the executors.

Every value can be overridden from the environment (``.env`` is loaded by the
entry point through python-dotenv). Invalid values fail at load time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Mapping, Optional, Tuple

__all__ = ["ResidualPolicy", "ArbitrageSettings"]


class ResidualPolicy(str, Enum):
    FORWARD = "forward"        # hand unmatched outcome tokens to the caller
    LIQUIDATE = "liquidate"    # sell them into collateral inside the cycle


DEFAULT_SPLIT_AMOUNTS = ("0.001", "0.005", "0.01", "0.05", "0.1", "0.5", "1")
DEFAULT_MERGE_AMOUNTS = ("0.1", "0.5", "1", "10", "50", "100")


def _decimal(env: Mapping[str, str], name: str, default: str) -> Decimal:
    raw = env.get(name, default)
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a decimal number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def _amounts(env: Mapping[str, str], name: str, default: Tuple[str, ...]) -> Tuple[Decimal, ...]:
    raw = env.get(name)
    parts = default if raw is None else [p for p in raw.split(",") if p.strip()]
    try:
        amounts = tuple(sorted(Decimal(p.strip()) for p in parts))
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a comma separated list of amounts, got {raw!r}") from exc
    if not amounts or any(a <= 0 for a in amounts):
        raise ValueError(f"{name} needs at least one positive amount, got {raw!r}")
    return amounts


@dataclass(frozen=True, slots=True)
class ArbitrageSettings:
    flash_loan_fee: Decimal = Decimal("0.003")
    hop_fee: Decimal = Decimal("0.0005")
    slippage_tolerance: Decimal = Decimal("0.01")
    # in units of the borrowed token, for both directions
    min_profit: Decimal = Decimal("0")
    min_profit_margin: Decimal = Decimal("0.9")  # share of simulated profit demanded on-chain
    # profit after gas, borrowed-token units; gates real transactions only
    min_net_profit: Decimal = Decimal("0")
    gas_token_price: Decimal = Decimal("1")  # native gas token priced in collateral_b
    split_amounts: Tuple[Decimal, ...] = field(
        default_factory=lambda: tuple(Decimal(a) for a in DEFAULT_SPLIT_AMOUNTS))
    merge_amounts: Tuple[Decimal, ...] = field(
        default_factory=lambda: tuple(Decimal(a) for a in DEFAULT_MERGE_AMOUNTS))
    residual_policy: ResidualPolicy = ResidualPolicy.FORWARD
    scan_interval: int = 60
    gas_limit: int = 3_000_000

    def __post_init__(self):
        if self.slippage_tolerance >= 1:
            raise ValueError("slippage_tolerance must be below 1")
        if not (0 < self.min_profit_margin <= 1):
            raise ValueError("min_profit_margin must be in (0, 1]")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ArbitrageSettings":
        env = os.environ if environ is None else environ
        policy = env.get("RESIDUAL_POLICY", ResidualPolicy.FORWARD.value).strip().lower()
        try:
            residual_policy = ResidualPolicy(policy)
        except ValueError as exc:
            valid = [p.value for p in ResidualPolicy]
            raise ValueError(f"RESIDUAL_POLICY must be one of {valid}, got {policy!r}") from exc

        return cls(
            flash_loan_fee=_decimal(env, "FLASH_LOAN_FEE", "0.003"),
            hop_fee=_decimal(env, "HOP_FEE", "0.0005"),
            slippage_tolerance=_decimal(env, "SLIPPAGE_TOLERANCE", "0.01"),
            min_profit=_decimal(env, "MIN_PROFIT", "0"),
            min_profit_margin=_decimal(env, "MIN_PROFIT_MARGIN", "0.9"),
            min_net_profit=_decimal(env, "MIN_NET_PROFIT", "0"),
            gas_token_price=_decimal(env, "GAS_TOKEN_PRICE", "1"),
            split_amounts=_amounts(env, "SPLIT_AMOUNTS", DEFAULT_SPLIT_AMOUNTS),
            merge_amounts=_amounts(env, "MERGE_AMOUNTS", DEFAULT_MERGE_AMOUNTS),
            residual_policy=residual_policy,
            scan_interval=int(env.get("SCAN_INTERVAL", "60")),
            gas_limit=int(env.get("GAS_LIMIT", "3000000")),
        )
