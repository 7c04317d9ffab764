"""Data models."""
from .book import (
    BookLevel,
    RawSnapshot,
    BucketedBook,
    ToleranceParams,
    SearchRequest,
    AggregationResult,
)

__all__ = [
    "BookLevel",
    "RawSnapshot",
    "BucketedBook",
    "ToleranceParams",
    "SearchRequest",
    "AggregationResult",
]
