"""Liquidity aggregation search: quantizer, filters, granularity and relaxation."""
from .quantizer import round_to_multiple, round_half_up, round_precision, precision_from_tick
from .filters import (
    apply_filters,
    drop_above_ticker,
    drop_below_floor,
    drop_above_dip,
    drop_above_max,
    effective_floor,
    too_close,
)
from .granularity import iter_granularities, find_granularity
from .relaxation import ToleranceRelaxer, count_targets, relaxation_steps, relax
from .search import get_aggregation, get_aggregation_ex, aggregate_book

__all__ = [
    "round_to_multiple",
    "round_half_up",
    "round_precision",
    "precision_from_tick",
    "apply_filters",
    "drop_above_ticker",
    "drop_below_floor",
    "drop_above_dip",
    "drop_above_max",
    "effective_floor",
    "too_close",
    "iter_granularities",
    "find_granularity",
    "ToleranceRelaxer",
    "count_targets",
    "relaxation_steps",
    "relax",
    "get_aggregation",
    "get_aggregation_ex",
    "aggregate_book",
]
