from .ledger import Ledger
from .simulated import SimulatedFlashLender, SimulatedPositionRouter, SimulatedVenue, VenueSet
from .coordinator import ExecutionCoordinator
from .onchain import FlashArbitrageContract, classify_revert

__all__ = [
    "Ledger",
    "SimulatedFlashLender",
    "SimulatedPositionRouter",
    "SimulatedVenue",
    "VenueSet",
    "ExecutionCoordinator",
    "FlashArbitrageContract",
    "classify_revert",
]
