"""Network configuration for Gnosis Chain."""

import os

DEFAULT_RPC_URLS = [
    os.environ.get("RPC_URL", "https://rpc.gnosischain.com"),
    "https://gnosis-mainnet.public.blastapi.io",
    "https://rpc.ankr.com/gnosis",
]

CHAIN_ID = int(os.environ.get("CHAIN_ID", "100"))

EXPLORER_TX_URL = "https://gnosisscan.io/tx/"
