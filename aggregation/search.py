"""
Aggregation Search Entry Points
================================
Fetches market data once, in sequence, and hands an immutable bid snapshot
to the relaxation search.
"""
import logging
from typing import List, TYPE_CHECKING

from config import DEFAULT_TOLERANCE
from core.exceptions import ExchangeAPIError
from models.book import AggregationResult, BookLevel, SearchRequest, ToleranceParams
from .relaxation import relax

if TYPE_CHECKING:
    from exchanges.base import MarketDataSource

logger = logging.getLogger(__name__)


async def get_aggregation_ex(
    source: "MarketDataSource",
    market: str,
    ticker: float,
    average: float,
    dip: float = DEFAULT_TOLERANCE.dip,
    pip: float = DEFAULT_TOLERANCE.pip,
    max_price: float = DEFAULT_TOLERANCE.max_price,
    min_price: float = DEFAULT_TOLERANCE.min_price,
    top: int = DEFAULT_TOLERANCE.top,
    strict: bool = False,
    dist: int = DEFAULT_TOLERANCE.dist,
) -> AggregationResult:
    """
    Search for a granularity given an already known ticker and 24h average.

    The bid book is fetched exactly once.
    """
    snapshot = await source.raw_bids(market)
    logger.debug(f"{market}: {len(snapshot)} raw bids, ticker={ticker:g}, avg={average:g}")

    request = SearchRequest(
        market=market,
        ticker=ticker,
        average=average,
        tolerance=ToleranceParams(dip=dip, pip=pip, max_price=max_price, min_price=min_price),
        top=top,
        strict=strict,
        dist=dist,
    )
    return relax(source, snapshot, request)


async def get_aggregation(
    source: "MarketDataSource",
    market: str,
    dip: float = DEFAULT_TOLERANCE.dip,
    pip: float = DEFAULT_TOLERANCE.pip,
    max_price: float = DEFAULT_TOLERANCE.max_price,
    min_price: float = DEFAULT_TOLERANCE.min_price,
    top: int = DEFAULT_TOLERANCE.top,
    strict: bool = False,
    dist: int = DEFAULT_TOLERANCE.dist,
) -> AggregationResult:
    """
    Find how coarsely to bucket a market's bids so enough supports survive.

    Args:
        source: Market data source (already entered with `async with`)
        market: Market identifier as the exchange names it
        dip: % below the 24h average a support must sit at
        pip: % below the ticker that bounds supports from below
        max_price: Price ceiling (0 = unset)
        min_price: Price floor overriding pip (0 = unset)
        top: Desired number of supports
        strict: Never relax dip/pip
        dist: Minimum % distance between supports (0 = off)

    Returns:
        AggregationResult with granularity, effective dip/pip and supports

    Raises:
        ThinBookError: If no granularity/tolerance yields supports
        ExchangeAPIError: If any market data call fails
    """
    ticker = await source.ticker(market)
    average = await source.average24h(market)

    return await get_aggregation_ex(
        source, market, ticker, average,
        dip=dip, pip=pip, max_price=max_price, min_price=min_price,
        top=top, strict=strict, dist=dist,
    )


async def aggregate_book(
    source: "MarketDataSource",
    market: str,
    granularity: float,
    side: str = "bids",
) -> List[BookLevel]:
    """Bucket one side of the book at a fixed granularity, largest size first."""
    if side == "asks":
        snapshot = await source.raw_asks(market)
    elif side == "bids":
        snapshot = await source.raw_bids(market)
    else:
        raise ExchangeAPIError(f"side {side} is invalid")

    levels = source.bucket(snapshot, market, granularity)
    return sorted(levels, key=lambda level: level.size, reverse=True)
