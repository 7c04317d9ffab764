"""
Tolerance Relaxation
=====================
Runs the granularity search over a sweep of required support counts and,
unless strict, loosens pip and dip one percent at a time:

    A. raise pip up to 50%
    B. lower dip down to 0%
    C. raise pip up to 100%

The first successful sweep wins. Exchange errors abort immediately.
"""
import logging
from typing import Iterator, List, Optional, Tuple, TYPE_CHECKING

from config import AGGREGATION_PARAMS
from core.exceptions import ThinBookError
from models.book import AggregationResult, RawSnapshot, SearchRequest, ToleranceParams
from utils.logger import get_logger
from .granularity import find_granularity
from .quantizer import round_half_up

if TYPE_CHECKING:
    from exchanges.base import MarketDataSource

logger = logging.getLogger(__name__)


def count_targets(top: int) -> List[int]:
    """Required support counts to try, most demanding first."""
    high = max(top, AGGREGATION_PARAMS.max_supports)
    low = max(top, AGGREGATION_PARAMS.min_supports)
    return list(range(high, low - 1, -1))


def relaxation_steps(dip: float, pip: float) -> Iterator[Tuple[str, float, float]]:
    """Yield (phase, dip, pip) for every relaxed tolerance, in order."""
    x = round_half_up(dip)
    y = round_half_up(pip)

    while y < AGGREGATION_PARAMS.pip_phase_limit:
        y += 1
        yield "A", x, y

    while x > AGGREGATION_PARAMS.dip_limit:
        x -= 1
        yield "B", x, y

    while y < AGGREGATION_PARAMS.pip_limit:
        y += 1
        yield "C", x, y


class ToleranceRelaxer:
    """
    Drives repeated granularity searches against one immutable snapshot.

    Keeps the most recent thin-book error so exhaustion can report it.
    """

    def __init__(self, source: "MarketDataSource", snapshot: RawSnapshot, request: SearchRequest):
        self.source = source
        self.snapshot = snapshot
        self.request = request
        self.last_error: Optional[ThinBookError] = None
        self.attempts = 0

    def sweep(self, tolerance: ToleranceParams) -> Optional[Tuple[float, list]]:
        """Try every count target once; return the first hit or None."""
        for cnt in count_targets(self.request.top):
            self.attempts += 1
            try:
                return find_granularity(
                    self.source,
                    self.snapshot,
                    self.request.ticker,
                    self.request.average,
                    tolerance,
                    cnt,
                    dist=self.request.dist,
                )
            except ThinBookError as e:
                self.last_error = e
        return None

    def run(self) -> AggregationResult:
        """
        Search with the caller's tolerance first, then relax.

        Raises:
            ThinBookError: If every attempt came up short
            ExchangeAPIError: If the data source fails
        """
        request = self.request
        original = request.tolerance
        slog = get_logger()

        found = self.sweep(original)
        if found is not None:
            return self._result(found, original.dip, original.pip)

        if request.strict:
            slog.log_thin_book(request.market, original.dip, original.pip, strict=True)
            raise self._exhausted()

        for phase, dip, pip in relaxation_steps(original.dip, original.pip):
            slog.log_relaxation(request.market, phase, dip, pip)
            found = self.sweep(original.with_dip(dip).with_pip(pip))
            if found is not None:
                return self._result(found, dip, pip)

        slog.log_thin_book(request.market, original.dip, original.pip, strict=False)
        raise self._exhausted()

    def _result(self, found: Tuple[float, list], dip: float, pip: float) -> AggregationResult:
        granularity, supports = found
        result = AggregationResult(
            granularity=granularity,
            dip=dip,
            pip=pip,
            supports=supports,
            original_dip=self.request.tolerance.dip,
            original_pip=self.request.tolerance.pip,
        )
        logger.debug(f"{self.request.market}: found after {self.attempts} searches")
        get_logger().log_aggregation(self.request.market, granularity, dip, pip, len(supports))
        return result

    def _exhausted(self) -> ThinBookError:
        if self.last_error is not None:
            return self.last_error
        return ThinBookError(
            market=self.request.market,
            dip=self.request.tolerance.dip,
            pip=self.request.tolerance.pip,
        )


def relax(source: "MarketDataSource", snapshot: RawSnapshot, request: SearchRequest) -> AggregationResult:
    """Run the full count sweep and tolerance relaxation for one snapshot."""
    return ToleranceRelaxer(source, snapshot, request).run()
