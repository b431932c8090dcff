import logging
from typing import Any, Dict, List, Optional

import requests
from web3 import Web3

logger = logging.getLogger(__name__)


class TenderlySimulationClient:
    """
    A reusable client for the Tenderly simulate-bundle API endpoint.

    Transactions are simulated in order against the current chain state; the
    client only builds payloads and parses responses, it never signs.
    """

    BASE_API_URL = "https://api.tenderly.co/api/v1"

    def __init__(self, access_key: str, account_slug: str, project_slug: str, w3: Optional[Web3] = None):
        """
        Args:
            access_key: Your Tenderly API Access Key.
            account_slug: Your Tenderly account or organization slug.
            project_slug: Your Tenderly project slug.
            w3: Web3 instance used for ABI encoding. A provider-less instance is enough.
        """
        if not all([access_key, account_slug, project_slug]):
            raise ValueError("Tenderly access key, account slug, and project slug are required.")

        self.access_key = access_key
        self.account_slug = account_slug
        self.project_slug = project_slug

        self.simulate_bundle_url = (
            f"{self.BASE_API_URL}/account/{self.account_slug}"
            f"/project/{self.project_slug}/simulate-bundle"
        )

        self.headers = {
            "Accept": "application/json",
            "X-Access-Key": self.access_key
        }
        self.w3 = w3 or Web3()

    @classmethod
    def from_env(cls, environ, w3: Optional[Web3] = None) -> Optional["TenderlySimulationClient"]:
        """Client from TENDERLY_* variables, or None when they are not set."""
        keys = [environ.get(k) for k in ("TENDERLY_ACCESS_KEY", "TENDERLY_ACCOUNT_SLUG", "TENDERLY_PROJECT_SLUG")]
        if not all(keys):
            return None
        return cls(*keys, w3=w3)

    def encode_input(self, abi: List[Dict[str, Any]], function_name: str, args: List[Any]) -> str:
        """ABI-encode function call data; returns the hex input ("0x...")."""
        temp_contract = self.w3.eth.contract(abi=abi)
        func_obj = temp_contract.get_function_by_name(function_name)
        return func_obj(*args)._encode_transaction_data()

    def build_transaction(self, network_id: str, from_address: str, to_address: str,
                          gas: int, value: str = "0", input_data: str = "0x",
                          save: bool = False, save_if_fails: bool = False,
                          simulation_type: str = "full") -> Dict[str, Any]:
        """
        Constructs a dictionary representing a single transaction for the simulation bundle.

        Args:
            network_id: The target network ID (e.g., "100" for Gnosis).
            from_address: The sender address.
            to_address: The recipient address (contract or EOA).
            gas: The gas limit for the transaction.
            value: The native currency amount in Wei (string). Defaults to "0".
            input_data: The hex-encoded transaction data. Defaults to "0x".
            save: Whether to save the simulation to the Tenderly dashboard.
            save_if_fails: Save even if reverted (requires save=True).
            simulation_type: Simulation detail ("full", "quick", "abi").
        """
        tx = {
            "network_id": str(network_id),
            "from": from_address,
            "to": to_address,
            "input": input_data,
            "gas": int(gas),
            "value": value,
            "save": save,
            "simulation_type": simulation_type,
        }
        if save and save_if_fails:
            tx["save_if_fails"] = save_if_fails
        return tx

    def encode_and_build_transaction(self, network_id: str, from_address: str, to_address: str,
                                     abi: List[Dict[str, Any]], function_name: str, args: List[Any],
                                     gas: int = 8000000, **kwargs) -> Dict[str, Any]:
        """Encode a function call and wrap it into a bundle transaction in one step."""
        input_data = self.encode_input(abi, function_name, args)
        return self.build_transaction(network_id, from_address, to_address, gas,
                                      input_data=input_data, **kwargs)

    def simulate_bundle(self, transactions: List[Dict[str, Any]], timeout: int = 60) -> Optional[List[Dict[str, Any]]]:
        """
        Sends a bundle of transactions to the Tenderly API for simulation.

        Returns:
            One parsed result per simulated transaction, in input order, or
            None when the API request fails or the response is not understood.
        """
        if not transactions:
            return None

        try:
            response = requests.post(
                self.simulate_bundle_url,
                headers=self.headers,
                json={"simulations": transactions},
                timeout=timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error("Tenderly simulate-bundle request failed: %s", e)
            return None

        simulation_results = response.json()
        if isinstance(simulation_results, dict) and 'simulation_results' in simulation_results:
            return simulation_results['simulation_results']
        if isinstance(simulation_results, list):
            return simulation_results
        logger.error("Unexpected Tenderly response shape: %s", type(simulation_results).__name__)
        return None
