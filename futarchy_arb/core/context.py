# futarchy_arb/core/context.py
import os
from typing import Optional

from eth_account import Account
from web3 import Web3

from ..config.network import DEFAULT_RPC_URLS
from ..config.settings import ArbitrageSettings


class ArbContext:
    """Holds the chain connection, the signing account and runtime settings."""

    def __init__(self, rpc_url: Optional[str] = None, verbose: bool = False,
                 settings: Optional[ArbitrageSettings] = None, w3: Optional[Web3] = None):
        self.verbose = verbose
        self.rpc_url = rpc_url or DEFAULT_RPC_URLS[0]
        self.w3 = w3 or Web3(Web3.HTTPProvider(self.rpc_url))
        self.settings = settings or ArbitrageSettings.from_env()

        private_key = os.environ.get("PRIVATE_KEY")
        self.account = Account.from_key(private_key) if private_key else None
        self.address = self.account.address if self.account else None

    def is_connected(self) -> bool:
        return self.w3.is_connected()
