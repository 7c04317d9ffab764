"""Bitstamp public API adapter."""
import logging
from typing import Dict

from config import BITSTAMP_API_URL
from core.exceptions import BitstampAPIError, DataFetchError
from models.book import RawSnapshot
from aggregation.quantizer import round_precision
from .base import RestMarketDataSource

logger = logging.getLogger(__name__)


class BitstampClient(RestMarketDataSource):
    """Async Bitstamp client. Markets are url symbols such as 'btcusd'."""

    error_class = BitstampAPIError

    def __init__(self, sandbox: bool = False):
        if sandbox:
            raise BitstampAPIError("Bitstamp does not offer a sandbox")
        super().__init__(BITSTAMP_API_URL)

    @property
    def name(self) -> str:
        return "bitstamp"

    async def fetch_ticker(self, market: str) -> Dict:
        data = await self._request(f"ticker/{market.lower()}/")
        if not isinstance(data, dict):
            raise DataFetchError(f"Unexpected ticker payload for {market}")
        return data

    async def ticker(self, market: str) -> float:
        data = await self.fetch_ticker(market)
        return self._float(data, "last", market)

    async def average24h(self, market: str) -> float:
        data = await self.fetch_ticker(market)
        high = self._float(data, "high", market)
        low = self._float(data, "low", market)
        prec = await self.price_precision(market)
        return round_precision((high + low) / 2, prec)

    async def raw_bids(self, market: str) -> RawSnapshot:
        return await self._fetch_side(market, "bids")

    async def raw_asks(self, market: str) -> RawSnapshot:
        return await self._fetch_side(market, "asks")

    async def _fetch_side(self, market: str, side: str) -> RawSnapshot:
        prec = await self.price_precision(market)
        data = await self._request(f"order_book/{market.lower()}/")
        rows = data.get(side) if isinstance(data, dict) else None
        if rows is None:
            raise DataFetchError(f"No {side} in Bitstamp order book for {market}")

        levels = self._parse_levels(rows)
        logger.debug(f"Fetched {len(levels)} {side} for {market}")
        return RawSnapshot(market=market, levels=tuple(levels), price_precision=prec)

    async def _fetch_price_precision(self, market: str) -> int:
        data = await self._request("trading-pairs-info/")
        for pair in data if isinstance(data, list) else []:
            if pair.get("url_symbol") == market.lower():
                return int(pair.get("counter_decimals", 2))
        raise DataFetchError(f"Market {market} does not exist on Bitstamp")

    @staticmethod
    def _float(data: Dict, key: str, market: str) -> float:
        try:
            return float(data[key])
        except (KeyError, TypeError, ValueError):
            raise DataFetchError(f"Missing or invalid {key} in Bitstamp ticker for {market}")
