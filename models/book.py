"""Order book and search data models."""
from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any, Tuple, Iterable


@dataclass(frozen=True)
class BookLevel:
    """A single price level: price and aggregated size."""
    price: float
    size: float

    def to_dict(self) -> Dict[str, float]:
        return {"price": self.price, "size": self.size}


@dataclass(frozen=True)
class RawSnapshot:
    """
    One side of a market's order book, fetched once per search.

    The snapshot is never re-fetched during a search, only re-bucketed.
    `price_precision` is the number of decimals the exchange accepts for
    prices in this market; bucketed prices are rounded to it.
    """
    market: str
    levels: Tuple[BookLevel, ...]
    price_precision: int = 8

    @classmethod
    def from_pairs(
        cls, market: str, pairs: Iterable[Tuple[float, float]], price_precision: int = 8
    ) -> "RawSnapshot":
        """Build a snapshot from (price, size) pairs."""
        return cls(
            market=market,
            levels=tuple(BookLevel(float(p), float(s)) for p, s in pairs),
            price_precision=price_precision,
        )

    def __len__(self) -> int:
        return len(self.levels)


# A snapshot bucketed at one granularity
BucketedBook = List[BookLevel]


@dataclass(frozen=True)
class ToleranceParams:
    """
    Economic tolerances applied to a bucketed book.

    dip: % below the 24h average that a support must sit at (0 = off)
    pip: % below the ticker that bounds supports from below (100 = off)
    max_price: price ceiling (0 = unset)
    min_price: explicit price floor, overrides pip (0 = unset)
    """
    dip: float = 5.0
    pip: float = 30.0
    max_price: float = 0.0
    min_price: float = 0.0

    def with_dip(self, dip: float) -> "ToleranceParams":
        return replace(self, dip=dip)

    def with_pip(self, pip: float) -> "ToleranceParams":
        return replace(self, pip=pip)


@dataclass(frozen=True)
class SearchRequest:
    """Everything one aggregation search needs besides the book itself."""
    market: str
    ticker: float
    average: float
    tolerance: ToleranceParams
    top: int = 4
    strict: bool = False
    dist: int = 0


@dataclass
class AggregationResult:
    """Outcome of a successful search."""
    granularity: float
    dip: float
    pip: float
    supports: List[BookLevel] = field(default_factory=list)
    original_dip: Optional[float] = None
    original_pip: Optional[float] = None

    @property
    def relaxed(self) -> bool:
        """True when dip or pip had to be relaxed to find supports."""
        if self.original_dip is None or self.original_pip is None:
            return False
        return self.dip != self.original_dip or self.pip != self.original_pip

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "agg": self.granularity,
            "dip": self.dip,
            "pip": self.pip,
            "relaxed": self.relaxed,
            "supports": [level.to_dict() for level in self.supports],
        }

    def __str__(self) -> str:
        return f"agg={self.granularity:g} dip={self.dip:g}% pip={self.pip:g}%"
