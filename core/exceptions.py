"""Custom exceptions for the liquidity aggregation search."""


class AggregationException(Exception):
    """Base exception for all aggregation errors."""
    pass


class ExchangeAPIError(AggregationException):
    """Raised when a market data call (ticker, 24h stats, book) fails."""
    pass


class BinanceAPIError(ExchangeAPIError):
    """Raised when a Binance API call fails."""
    pass


class BitstampAPIError(ExchangeAPIError):
    """Raised when a Bitstamp API call fails."""
    pass


class RateLimitError(ExchangeAPIError):
    """Raised when an API rate limit is exceeded."""
    pass


class DataFetchError(ExchangeAPIError):
    """Raised when market data cannot be fetched or parsed."""
    pass


class UnknownExchangeError(AggregationException):
    """Raised when no adapter is registered under the requested name."""
    pass


class ThinBookError(AggregationException):
    """
    Raised when no granularity/tolerance combination yields enough supports.

    Not a systemic fault: callers usually skip the market.
    """

    DEFAULT_MESSAGE = (
        "Cannot find any supports. Please update your settings. "
        "Or reconsider this market because it might be illiquid."
    )

    def __init__(self, message: str = None, market: str = None, dip: float = None, pip: float = None):
        super().__init__(message or self.DEFAULT_MESSAGE)
        self.market = market
        self.dip = dip
        self.pip = pip
