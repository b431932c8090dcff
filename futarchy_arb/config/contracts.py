"""Contract and token addresses, overridable through the environment."""

import os

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

CONTRACT_ADDRESSES = {
    # Swapr (Algebra) factory used to discover outcome pools
    "algebraFactory": os.environ.get("ALGEBRA_FACTORY_ADDRESS", "0xA0864cCA6E114013AB0e27cbd5B6f4c8947da766"),
    # Deployed flash-arbitrage executor
    "arbitrageContract": os.environ.get("ARBITRAGE_CONTRACT_ADDRESS", ZERO_ADDRESS),
    # Futarchy proposal being arbitraged
    "proposal": os.environ.get("FUTARCHY_PROPOSAL_ADDRESS", ZERO_ADDRESS),
    # Balancer V3 waGNO/sDAI weighted pool used as the spot market
    "spotPool": os.environ.get("BALANCER_SPOT_POOL_ADDRESS", "0xD1D7Fa8871d84d0E77020fc28B7Cd5718C446522"),
}

TOKEN_ADDRESSES = {
    "company": os.environ.get("COMPANY_TOKEN_ADDRESS", "0x9C58BAcC331c9aa871AFD802DB6379a98e80CEdb"),   # GNO
    "currency": os.environ.get("CURRENCY_TOKEN_ADDRESS", "0xaf204776c7245bF4147c2612BF6e5972Ee483701"),  # sDAI
    "wrappedCompany": os.environ.get("WAGNO_ADDRESS", "0x7c16F0185A26Db0AE7A9377F23BC18ea7Ce5D644"),    # waGNO
}

# Wrapped pool token -> the underlying token it is quoted against
UNDERLYING_TOKENS = {
    TOKEN_ADDRESSES["wrappedCompany"].lower(): TOKEN_ADDRESSES["company"],
}


def is_zero_address(address) -> bool:
    return not address or int(str(address), 16) == 0
