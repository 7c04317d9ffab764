"""Exchange adapters implementing the market data capability."""
from .base import MarketDataSource, RestMarketDataSource
from .binance import BinanceClient
from .bitstamp import BitstampClient
from .static import StaticBookSource
from .registry import ExchangeRegistry, get_source

__all__ = [
    "MarketDataSource",
    "RestMarketDataSource",
    "BinanceClient",
    "BitstampClient",
    "StaticBookSource",
    "ExchangeRegistry",
    "get_source",
]
