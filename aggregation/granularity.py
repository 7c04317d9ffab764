"""
Granularity Search
===================
Finds the coarsest bucket size at which a bid book, after filtering, still
shows enough distinct supports.

The bucket size starts at 500 quote units and is multiplied by a repeating
cycle of ratios so that it walks through round sizes:
500 -> 250 -> 100 -> 50 -> 25 -> 20 -> 10 -> 5 -> 2.5 -> 1 -> ...
Each value is rounded to 8 decimals, which makes the walk finite.
"""
import itertools
import logging
from typing import Iterator, List, Optional, Sequence, Tuple, TYPE_CHECKING

from config import AGGREGATION_PARAMS
from core.exceptions import ThinBookError
from models.book import BookLevel, RawSnapshot, ToleranceParams
from .filters import apply_filters, too_close
from .quantizer import round_precision

if TYPE_CHECKING:
    from exchanges.base import MarketDataSource

logger = logging.getLogger(__name__)


def iter_granularities(
    start: float = AGGREGATION_PARAMS.start_granularity,
    steps: Sequence[float] = AGGREGATION_PARAMS.steps,
    decimals: int = AGGREGATION_PARAMS.granularity_decimals,
    floor: float = AGGREGATION_PARAMS.granularity_floor,
) -> Iterator[Tuple[float, bool]]:
    """
    Yield (granularity, final) pairs.

    `final` is True for the last granularity worth testing: either it reached
    the floor, or the next step would not be strictly smaller after rounding.
    The generator returns right after a final value, and never yields zero.
    """
    ratios = itertools.cycle(steps)
    current = round_precision(start * next(ratios), decimals)

    while current > 0:
        if current <= floor:
            yield current, True
            return

        following = round_precision(current * next(ratios), decimals)
        final = following <= 0 or following >= current
        yield current, final
        if final:
            return
        current = following


def find_granularity(
    source: "MarketDataSource",
    snapshot: RawSnapshot,
    ticker: float,
    average: float,
    tolerance: ToleranceParams,
    cnt: int,
    dist: float = 0,
    granularities: Optional[Iterator[Tuple[float, bool]]] = None,
) -> Tuple[float, List[BookLevel]]:
    """
    Search for a granularity that leaves at least `cnt` supports.

    Args:
        source: Market data source used to bucket the snapshot
        snapshot: Raw bids, never re-fetched here
        ticker: Last trade price
        average: 24h average price
        tolerance: dip/pip/max/min in effect for this search
        cnt: Required number of supports (at least 2)
        dist: Minimum % distance between supports (0 = off)
        granularities: Override for the step iterator

    Returns:
        (granularity, supports)

    Raises:
        ThinBookError: If no supports survive down to the floor
        ExchangeAPIError: If bucketing fails (propagated unchanged)
    """
    if granularities is None:
        granularities = iter_granularities()

    for agg, final in granularities:
        bucketed = source.bucket(snapshot, snapshot.market, agg)
        supports = apply_filters(bucketed, ticker, average, tolerance)

        if dist > 0 and len(supports) > 1 and too_close(supports, dist):
            if final:
                raise ThinBookError(market=snapshot.market, dip=tolerance.dip, pip=tolerance.pip)
            continue

        if len(supports) >= cnt:
            logger.debug(f"{snapshot.market}: agg={agg:g} leaves {len(supports)} supports (need {cnt})")
            return agg, supports

        if final:
            if supports:
                logger.debug(f"{snapshot.market}: floor agg={agg:g} reached with {len(supports)} supports")
                return agg, supports
            break

    raise ThinBookError(market=snapshot.market, dip=tolerance.dip, pip=tolerance.pip)
