from .arbitrage_controller import ArbitrageController

__all__ = ["ArbitrageController"]
