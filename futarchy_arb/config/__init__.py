"""
Configuration package for the Futarchy arbitrage engine.
"""

from futarchy_arb.config.network import (
    DEFAULT_RPC_URLS,
    CHAIN_ID,
    EXPLORER_TX_URL
)

from futarchy_arb.config.contracts import (
    ZERO_ADDRESS,
    CONTRACT_ADDRESSES,
    TOKEN_ADDRESSES,
    UNDERLYING_TOKENS,
    is_zero_address
)

from futarchy_arb.config.abis import (
    ERC20_ABI,
    FUTARCHY_PROPOSAL_ABI,
    ALGEBRA_FACTORY_ABI,
    ALGEBRA_POOL_ABI,
    UNISWAP_V3_POOL_ABI,
    BALANCER_V3_WEIGHTED_POOL_ABI,
    RATE_PROVIDER_ABI,
    FLASH_ARBITRAGE_ABI
)

from futarchy_arb.config.settings import (
    ArbitrageSettings,
    ResidualPolicy
)

__all__ = [
    # Network
    'DEFAULT_RPC_URLS',
    'CHAIN_ID',
    'EXPLORER_TX_URL',

    # Contracts
    'ZERO_ADDRESS',
    'CONTRACT_ADDRESSES',
    'TOKEN_ADDRESSES',
    'UNDERLYING_TOKENS',
    'is_zero_address',

    # ABIs
    'ERC20_ABI',
    'FUTARCHY_PROPOSAL_ABI',
    'ALGEBRA_FACTORY_ABI',
    'ALGEBRA_POOL_ABI',
    'UNISWAP_V3_POOL_ABI',
    'BALANCER_V3_WEIGHTED_POOL_ABI',
    'RATE_PROVIDER_ABI',
    'FLASH_ARBITRAGE_ABI',

    # Settings
    'ArbitrageSettings',
    'ResidualPolicy'
]
