# futarchy_arb/exchanges/pool_reader.py
"""Loads pool snapshots from chain for the pricing layer."""

import logging
from decimal import Decimal
from typing import Dict, Mapping, Optional, Sequence, Tuple

from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..config.abis import (
    ALGEBRA_POOL_ABI,
    BALANCER_V3_WEIGHTED_POOL_ABI,
    ERC20_ABI,
    RATE_PROVIDER_ABI,
    UNISWAP_V3_POOL_ABI,
)
from ..config.contracts import UNDERLYING_TOKENS, is_zero_address
from ..errors import PoolUnavailable
from ..models.opportunity import MarketSnapshot
from ..models.pools import Pool, SpotRoute, TickPool, WeightedPool
from ..models.proposal import PoolRefs, ProposalView

logger = logging.getLogger(__name__)

# Anything a reverting or missing contract can raise from ``.call()``
CALL_ERRORS = (ContractLogicError, BadFunctionCallOutput, ValueError)

WAD = Decimal(10) ** 18

POOL_TYPES = ("algebra", "uniswap_v3", "balancer_v3")


class PoolReader:
    """Reads Algebra, Uniswap V3 and Balancer V3 pools into immutable snapshots."""

    def __init__(self, w3: Web3, underlying: Optional[Mapping[str, str]] = None):
        self.w3 = w3
        source = UNDERLYING_TOKENS if underlying is None else underlying
        self.underlying = {k.lower(): v for k, v in source.items()}
        self._decimals: Dict[str, int] = {}

    def _contract(self, address: str, abi):
        if is_zero_address(address):
            raise PoolUnavailable(f"No contract deployed at {address}")
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    @staticmethod
    def _call(fn, what: str, address: str):
        try:
            return fn.call()
        except CALL_ERRORS as exc:
            raise PoolUnavailable(f"{what}() failed for {address}: {exc}") from exc

    def token_decimals(self, token: str) -> int:
        key = token.lower()
        if key not in self._decimals:
            contract = self._contract(token, ERC20_ABI)
            self._decimals[key] = int(self._call(contract.functions.decimals(), "decimals", token))
        return self._decimals[key]

    def read_tick_pool(self, address: str, flavor: str = "algebra") -> TickPool:
        if flavor not in ("algebra", "uniswap_v3"):
            raise ValueError(f"Unknown tick pool flavor: {flavor}")
        abi = ALGEBRA_POOL_ABI if flavor == "algebra" else UNISWAP_V3_POOL_ABI
        contract = self._contract(address, abi)

        if flavor == "algebra":
            state = self._call(contract.functions.globalState(), "globalState", address)
            fee = int(state[2])
        else:
            state = self._call(contract.functions.slot0(), "slot0", address)
            fee = int(self._call(contract.functions.fee(), "fee", address))
        sqrt_price_x96 = int(state[0])
        if sqrt_price_x96 == 0:
            raise PoolUnavailable(f"Pool {address} is not initialized")

        token0 = self._call(contract.functions.token0(), "token0", address)
        token1 = self._call(contract.functions.token1(), "token1", address)
        liquidity = int(self._call(contract.functions.liquidity(), "liquidity", address))

        logger.debug("%s pool %s sqrtPriceX96=%s liquidity=%s fee=%s",
                     flavor, address, sqrt_price_x96, liquidity, fee)
        return TickPool(
            address=address,
            token0=token0,
            token1=token1,
            sqrt_price_x96=sqrt_price_x96,
            liquidity=liquidity,
            decimals0=self.token_decimals(token0),
            decimals1=self.token_decimals(token1),
            fee=fee,
            flavor=flavor,
        )

    def _rate(self, provider: str) -> Decimal:
        if is_zero_address(provider):
            return Decimal(1)
        contract = self._contract(provider, RATE_PROVIDER_ABI)
        return Decimal(self._call(contract.functions.getRate(), "getRate", provider)) / WAD

    def read_weighted_pool(self, address: str) -> WeightedPool:
        contract = self._contract(address, BALANCER_V3_WEIGHTED_POOL_ABI)
        tokens, token_info, balances_raw, _ = self._call(
            contract.functions.getTokenInfo(), "getTokenInfo", address)
        weights_raw = self._call(contract.functions.getNormalizedWeights(), "getNormalizedWeights", address)
        fee_raw = self._call(contract.functions.getStaticSwapFeePercentage(),
                             "getStaticSwapFeePercentage", address)

        balances, rates, underlying = [], [], []
        for token, info, raw in zip(tokens, token_info, balances_raw):
            balances.append(Decimal(raw) / Decimal(10) ** self.token_decimals(token))
            rates.append(self._rate(info[1]))
            underlying.append(self.underlying.get(token.lower()))

        logger.debug("balancer pool %s balances=%s rates=%s", address, balances, rates)
        return WeightedPool(
            address=address,
            tokens=tuple(tokens),
            balances=tuple(balances),
            weights=tuple(Decimal(w) / WAD for w in weights_raw),
            rates=tuple(rates),
            underlying=tuple(underlying),
            swap_fee=Decimal(fee_raw) / WAD,
        )

    def read_pool(self, address: str, pool_type: str) -> Pool:
        if pool_type == "balancer_v3":
            return self.read_weighted_pool(address)
        if pool_type in ("algebra", "uniswap_v3"):
            return self.read_tick_pool(address, flavor=pool_type)
        raise ValueError(f"Unknown pool type '{pool_type}'. Valid: {list(POOL_TYPES)}")

    def read_market(self, proposal: ProposalView, refs: PoolRefs,
                    spot_pools: Sequence[Tuple[str, str]], spot_path: Sequence[str],
                    lender_liquidity: Optional[Mapping[str, Decimal]] = None) -> MarketSnapshot:
        """Snapshot every pool the engine needs for one proposal.

        ``spot_pools`` is a list of ``(address, pool_type)`` hops from the
        company token to the currency token along ``spot_path``.
        """
        route = SpotRoute(tuple(self.read_pool(a, t) for a, t in spot_pools), tuple(spot_path))
        prediction = {
            token.lower(): self.read_tick_pool(pool)
            for token, pool in refs.prediction.items()
            if pool is not None
        }
        return MarketSnapshot(
            proposal=proposal,
            yes_pool=self.read_tick_pool(refs.yes_pool),
            no_pool=self.read_tick_pool(refs.no_pool),
            spot_route=route,
            prediction_pools=prediction,
            lender_liquidity={k.lower(): v for k, v in (lender_liquidity or {}).items()},
        )
