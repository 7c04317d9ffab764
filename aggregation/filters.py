"""
Support Filter Pipeline
========================
Economic predicates applied to a bucketed bid book. Every filter removes
levels and keeps the relative order of the survivors. All comparisons are
strict, so a level sitting exactly on a boundary is always kept.
"""
from typing import List, Optional

from models.book import BookLevel, ToleranceParams


def drop_above_ticker(levels: List[BookLevel], ticker: float) -> List[BookLevel]:
    """Bids above the last trade price are not valid supports."""
    return [level for level in levels if not level.price > ticker]


def effective_floor(ticker: float, tolerance: ToleranceParams) -> Optional[float]:
    """
    Lowest acceptable support price.

    An explicit min_price wins; otherwise ticker minus pip percent while
    pip < 100; otherwise there is no floor.
    """
    if tolerance.min_price > 0:
        return tolerance.min_price
    if tolerance.pip < 100:
        return ticker * (1 - tolerance.pip / 100)
    return None


def drop_below_floor(levels: List[BookLevel], floor: Optional[float]) -> List[BookLevel]:
    """Drop supports cheaper than the floor."""
    if floor is None:
        return list(levels)
    return [level for level in levels if not level.price < floor]


def dip_ceiling(average: float, dip: float) -> float:
    """24h average minus dip percent."""
    return average * (1 - dip / 100)


def drop_above_dip(levels: List[BookLevel], average: float, dip: float) -> List[BookLevel]:
    """Drop supports more expensive than the 24h average minus dip percent."""
    if dip <= 0:
        return list(levels)
    ceiling = dip_ceiling(average, dip)
    return [level for level in levels if not level.price > ceiling]


def drop_above_max(levels: List[BookLevel], max_price: float) -> List[BookLevel]:
    """Drop supports more expensive than the optional price ceiling."""
    if max_price <= 0:
        return list(levels)
    return [level for level in levels if not level.price > max_price]


def apply_filters(
    levels: List[BookLevel],
    ticker: float,
    average: float,
    tolerance: ToleranceParams,
) -> List[BookLevel]:
    """Run the four filters in their fixed order."""
    out = drop_above_ticker(levels, ticker)
    out = drop_below_floor(out, effective_floor(ticker, tolerance))
    out = drop_above_dip(out, average, tolerance.dip)
    out = drop_above_max(out, tolerance.max_price)
    return out


def too_close(levels: List[BookLevel], dist: float) -> bool:
    """True if any two supports are less than `dist` percent apart."""
    prices = sorted(level.price for level in levels)
    for lo, hi in zip(prices, prices[1:]):
        if lo <= 0:
            continue
        if (hi - lo) / lo * 100 < dist:
            return True
    return False
