"""In-memory market data source for offline runs and tests."""
import json
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from core.exceptions import DataFetchError
from models.book import RawSnapshot
from .base import MarketDataSource


class StaticBookSource(MarketDataSource):
    """
    Serves a fixed ticker, 24h average and book for a single market.

    A book file is JSON shaped like:
        {"market": "BTCUSDT", "ticker": 100.0, "average": 100.0,
         "price_precision": 2, "bids": [[100.0, 1.0], ...], "asks": [...]}
    """

    def __init__(
        self,
        market: str,
        ticker: float,
        average: float,
        bids: Iterable[Tuple[float, float]],
        asks: Optional[Iterable[Tuple[float, float]]] = None,
        price_precision: int = 8,
    ):
        self.market = market
        self._ticker = ticker
        self._average = average
        self._bids = RawSnapshot.from_pairs(market, bids, price_precision)
        self._asks = RawSnapshot.from_pairs(market, asks or [], price_precision)

    @property
    def name(self) -> str:
        return "static"

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticBookSource":
        """Load a book snapshot saved as JSON."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data: Dict = json.load(f)
            return cls(
                market=data["market"],
                ticker=float(data["ticker"]),
                average=float(data["average"]),
                bids=data.get("bids", []),
                asks=data.get("asks", []),
                price_precision=int(data.get("price_precision", 8)),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise DataFetchError(f"Cannot load book file {path}: {e}")

    def _check(self, market: str):
        if market != self.market:
            raise DataFetchError(f"Market {market} does not exist (static book holds {self.market})")

    async def ticker(self, market: str) -> float:
        self._check(market)
        return self._ticker

    async def average24h(self, market: str) -> float:
        self._check(market)
        return self._average

    async def raw_bids(self, market: str) -> RawSnapshot:
        self._check(market)
        return self._bids

    async def raw_asks(self, market: str) -> RawSnapshot:
        self._check(market)
        return self._asks
