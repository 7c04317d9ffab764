"""Core modules: exceptions shared by the search and the exchange adapters."""
from .exceptions import (
    AggregationException,
    ExchangeAPIError,
    BinanceAPIError,
    BitstampAPIError,
    RateLimitError,
    DataFetchError,
    UnknownExchangeError,
    ThinBookError,
)

__all__ = [
    "AggregationException",
    "ExchangeAPIError",
    "BinanceAPIError",
    "BitstampAPIError",
    "RateLimitError",
    "DataFetchError",
    "UnknownExchangeError",
    "ThinBookError",
]
