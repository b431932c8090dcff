from .price_oracle import price_of, quote_exact_in, route_price, quote_route, Quote, RouteQuote
from .pool_reader import PoolReader

__all__ = [
    "price_of",
    "quote_exact_in",
    "route_price",
    "quote_route",
    "Quote",
    "RouteQuote",
    "PoolReader",
]
