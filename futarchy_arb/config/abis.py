"""Minimal ABIs for every contract the engine reads or calls."""


def _view(name, inputs=(), outputs=()):
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


ERC20_ABI = [
    _view("decimals", outputs=[("", "uint8")]),
    _view("symbol", outputs=[("", "string")]),
    _view("balanceOf", inputs=[("account", "address")], outputs=[("", "uint256")]),
]

FUTARCHY_PROPOSAL_ABI = [
    _view("collateralToken1", outputs=[("", "address")]),
    _view("collateralToken2", outputs=[("", "address")]),
    _view("wrappedOutcome", inputs=[("index", "uint256")],
          outputs=[("wrapped1155", "address"), ("data", "bytes")]),
    _view("marketName", outputs=[("", "string")]),
]

ALGEBRA_FACTORY_ABI = [
    _view("poolByPair", inputs=[("tokenA", "address"), ("tokenB", "address")],
          outputs=[("pool", "address")]),
]

ALGEBRA_POOL_ABI = [
    _view("globalState", outputs=[
        ("price", "uint160"),
        ("tick", "int24"),
        ("fee", "uint16"),
        ("timepointIndex", "uint16"),
        ("communityFeeToken0", "uint8"),
        ("communityFeeToken1", "uint8"),
        ("unlocked", "bool"),
    ]),
    _view("token0", outputs=[("", "address")]),
    _view("token1", outputs=[("", "address")]),
    _view("liquidity", outputs=[("", "uint128")]),
]

UNISWAP_V3_POOL_ABI = [
    _view("slot0", outputs=[
        ("sqrtPriceX96", "uint160"),
        ("tick", "int24"),
        ("observationIndex", "uint16"),
        ("observationCardinality", "uint16"),
        ("observationCardinalityNext", "uint16"),
        ("feeProtocol", "uint8"),
        ("unlocked", "bool"),
    ]),
    _view("token0", outputs=[("", "address")]),
    _view("token1", outputs=[("", "address")]),
    _view("liquidity", outputs=[("", "uint128")]),
    _view("fee", outputs=[("", "uint24")]),
]

BALANCER_V3_WEIGHTED_POOL_ABI = [
    {
        "name": "getTokenInfo",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "tokens", "type": "address[]"},
            {
                "name": "tokenInfo",
                "type": "tuple[]",
                "components": [
                    {"name": "tokenType", "type": "uint8"},
                    {"name": "rateProvider", "type": "address"},
                    {"name": "paysYieldFees", "type": "bool"},
                ],
            },
            {"name": "balancesRaw", "type": "uint256[]"},
            {"name": "lastBalancesLiveScaled18", "type": "uint256[]"},
        ],
    },
    _view("getNormalizedWeights", outputs=[("", "uint256[]")]),
    _view("getStaticSwapFeePercentage", outputs=[("", "uint256")]),
]

RATE_PROVIDER_ABI = [
    _view("getRate", outputs=[("", "uint256")]),
]

_ARBITRAGE_INPUTS = [
    {"name": "proposal", "type": "address"},
    {"name": "borrowToken", "type": "address"},
    {"name": "borrowAmount", "type": "uint256"},
    {"name": "direction", "type": "uint8"},
    {"name": "minProfit", "type": "uint256"},
]

FLASH_ARBITRAGE_ABI = [
    {
        "name": "executeArbitrage",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": _ARBITRAGE_INPUTS,
        "outputs": [
            {
                "name": "result",
                "type": "tuple",
                "components": [
                    {"name": "success", "type": "bool"},
                    {"name": "profit", "type": "uint256"},
                    {"name": "leftoverYesGno", "type": "uint256"},
                    {"name": "leftoverNoGno", "type": "uint256"},
                    {"name": "leftoverYesSdai", "type": "uint256"},
                    {"name": "leftoverNoSdai", "type": "uint256"},
                    {"name": "leftoverGno", "type": "uint256"},
                    {"name": "leftoverSdai", "type": "uint256"},
                ],
            }
        ],
    },
    _view("owner", outputs=[("", "address")]),
]

