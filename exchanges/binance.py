"""Binance spot public API adapter."""
import logging
from typing import Dict, Optional

from config import (
    BINANCE_API_URL,
    BINANCE_SANDBOX_URL,
    BINANCE_API_KEY,
    BOOK_DEPTH_LIMIT,
)
from core.exceptions import BinanceAPIError, DataFetchError
from models.book import RawSnapshot
from aggregation.quantizer import precision_from_tick, round_precision
from .base import RestMarketDataSource

logger = logging.getLogger(__name__)


class BinanceClient(RestMarketDataSource):
    """Async Binance spot client for tickers, 24h stats and depth."""

    error_class = BinanceAPIError

    def __init__(self, sandbox: bool = False, api_key: str = BINANCE_API_KEY):
        headers = {}
        if api_key:
            headers["X-MBX-APIKEY"] = api_key
        super().__init__(BINANCE_SANDBOX_URL if sandbox else BINANCE_API_URL, headers=headers)
        self.sandbox = sandbox

    @property
    def name(self) -> str:
        return "binance"

    async def fetch_24hr(self, market: str) -> Dict:
        """
        Fetch 24h ticker statistics for a symbol.

        Args:
            market: Trading pair (e.g., 'BTCUSDT')

        Returns:
            Ticker data dict
        """
        data = await self._request("ticker/24hr", {"symbol": market})
        if not isinstance(data, dict):
            raise DataFetchError(f"Unexpected 24h ticker payload for {market}")
        return data

    async def ticker(self, market: str) -> float:
        data = await self.fetch_24hr(market)
        return self._float(data, "lastPrice", market)

    async def average24h(self, market: str) -> float:
        data = await self.fetch_24hr(market)
        high = self._float(data, "highPrice", market)
        low = self._float(data, "lowPrice", market)
        prec = await self.price_precision(market)
        return round_precision((high + low) / 2, prec)

    async def raw_bids(self, market: str) -> RawSnapshot:
        return await self._fetch_side(market, "bids")

    async def raw_asks(self, market: str) -> RawSnapshot:
        return await self._fetch_side(market, "asks")

    async def _fetch_side(self, market: str, side: str) -> RawSnapshot:
        prec = await self.price_precision(market)
        data = await self._request("depth", {"symbol": market, "limit": BOOK_DEPTH_LIMIT})
        rows = data.get(side) if isinstance(data, dict) else None
        if rows is None:
            raise DataFetchError(f"No {side} in Binance depth for {market}")

        levels = self._parse_levels(rows)
        logger.debug(f"Fetched {len(levels)} {side} for {market}")
        return RawSnapshot(market=market, levels=tuple(levels), price_precision=prec)

    async def _fetch_price_precision(self, market: str) -> int:
        data = await self._request("exchangeInfo", {"symbol": market})
        symbol = self._find_symbol(data, market)
        if symbol is None:
            raise DataFetchError(f"Market {market} does not exist on Binance")

        for f in symbol.get("filters", []):
            if f.get("filterType") == "PRICE_FILTER" and f.get("tickSize"):
                return precision_from_tick(f["tickSize"])

        # Fallback to the quote asset precision
        return int(symbol.get("quotePrecision", 8))

    @staticmethod
    def _find_symbol(data: Dict, market: str) -> Optional[Dict]:
        for symbol in data.get("symbols", []) if isinstance(data, dict) else []:
            if symbol.get("symbol") == market:
                return symbol
        return None

    @staticmethod
    def _float(data: Dict, key: str, market: str) -> float:
        try:
            return float(data[key])
        except (KeyError, TypeError, ValueError):
            raise DataFetchError(f"Missing or invalid {key} in Binance ticker for {market}")
