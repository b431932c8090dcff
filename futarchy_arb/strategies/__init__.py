from .engine import StrategyEngine, MarketPrices
from .routes import RouteSimulation, simulate
from .accounting import ProfitAccumulator, TradeRecord

__all__ = [
    "StrategyEngine",
    "MarketPrices",
    "RouteSimulation",
    "simulate",
    "ProfitAccumulator",
    "TradeRecord",
]
