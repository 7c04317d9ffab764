"""Market data capability consumed by the aggregation search."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

import aiohttp

from config import EXCHANGE_TIMEOUT
from core.exceptions import DataFetchError, ExchangeAPIError, RateLimitError
from models.book import BookLevel, RawSnapshot
from aggregation.quantizer import round_precision, round_to_multiple

logger = logging.getLogger(__name__)


class MarketDataSource(ABC):
    """
    Abstract source of tickers, 24h averages and bid books for one exchange.

    Network calls are coroutines; bucketing is a pure computation over a
    snapshot that was already fetched.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this exchange."""
        pass

    @abstractmethod
    async def ticker(self, market: str) -> float:
        """Last trade price."""
        pass

    @abstractmethod
    async def average24h(self, market: str) -> float:
        """Average of the 24h high and low, rounded to the price precision."""
        pass

    @abstractmethod
    async def raw_bids(self, market: str) -> RawSnapshot:
        """Bid side of the order book, best bid first."""
        pass

    async def raw_asks(self, market: str) -> RawSnapshot:
        """Ask side of the order book, best ask first."""
        raise ExchangeAPIError(f"{self.name} does not provide asks")

    def bucket(self, snapshot: RawSnapshot, market: str, granularity: float) -> List[BookLevel]:
        """
        Merge snapshot levels into buckets of `granularity` quote units.

        Prices are rounded to the nearest multiple of the granularity, then to
        the market's price precision. Sizes at equal prices are summed and the
        order of first appearance is kept.
        """
        if granularity <= 0:
            raise DataFetchError(f"Invalid granularity {granularity} for {market}")
        if snapshot.market != market:
            raise DataFetchError(f"Snapshot of {snapshot.market} cannot be bucketed as {market}")

        merged: Dict[float, float] = {}
        for level in snapshot.levels:
            price = round_precision(round_to_multiple(level.price, granularity), snapshot.price_precision)
            merged[price] = merged.get(price, 0.0) + level.size

        return [BookLevel(price=price, size=size) for price, size in merged.items()]

    async def __aenter__(self) -> "MarketDataSource":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


class RestMarketDataSource(MarketDataSource):
    """Market data source backed by a public REST API over aiohttp."""

    error_class: Type[ExchangeAPIError] = ExchangeAPIError

    def __init__(self, base_url: str, headers: Optional[Dict[str, str]] = None):
        self.base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None
        self._timeout = aiohttp.ClientTimeout(total=EXCHANGE_TIMEOUT)
        self._headers = headers or {}
        self._precision: Dict[str, int] = {}

    async def __aenter__(self) -> "RestMarketDataSource":
        """Create session on context entry."""
        self._session = aiohttp.ClientSession(timeout=self._timeout, headers=self._headers)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close session on context exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _request(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        """
        Make a single GET request.

        Args:
            endpoint: Path relative to the base URL (e.g., 'ticker/24hr')
            params: Query parameters

        Returns:
            JSON response data

        Raises:
            RateLimitError: If rate limit is exceeded
            ExchangeAPIError: If the request fails (exchange specific subclass)
        """
        if not self._session:
            raise self.error_class("Client session not initialized. Use 'async with' context manager.")

        url = f"{self.base_url}/{endpoint}"

        try:
            async with self._session.get(url, params=params) as response:
                if response.status == 200:
                    return await response.json()

                if response.status == 429:
                    retry_after = response.headers.get("Retry-After", "60")
                    raise RateLimitError(
                        f"{self.name} rate limit exceeded. Retry after {retry_after}s"
                    )

                error_text = await response.text()
                if response.status >= 500:
                    raise self.error_class(f"Server error {response.status}: {error_text}")
                raise self.error_class(f"API error {response.status}: {error_text}")

        except asyncio.TimeoutError:
            logger.warning(f"{self.name} request timeout: {endpoint}")
            raise self.error_class(f"Request timed out after {EXCHANGE_TIMEOUT}s")

        except aiohttp.ClientError as e:
            logger.warning(f"{self.name} connection error: {e}")
            raise self.error_class(f"Connection error: {e}")

    @abstractmethod
    async def _fetch_price_precision(self, market: str) -> int:
        """Look up the number of price decimals for a market."""
        pass

    async def price_precision(self, market: str) -> int:
        """Price decimals for a market, cached per client instance."""
        if market not in self._precision:
            self._precision[market] = await self._fetch_price_precision(market)
        return self._precision[market]

    def _parse_levels(self, rows: List) -> List[BookLevel]:
        """Parse [[price, size], ...] rows into book levels."""
        levels = []
        for row in rows:
            try:
                levels.append(BookLevel(price=float(row[0]), size=float(row[1])))
            except (IndexError, TypeError, ValueError) as e:
                raise DataFetchError(f"Malformed {self.name} book entry {row!r}: {e}")
        return levels
