from .tenderly_client import TenderlySimulationClient

__all__ = ["TenderlySimulationClient"]
