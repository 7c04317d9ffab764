"""Test doubles for the aggregation tests."""
from typing import List

from exchanges.static import StaticBookSource
from models.book import BookLevel, RawSnapshot


class IdentitySource(StaticBookSource):
    """Static source whose bucketing leaves prices untouched and records granularities."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.granularities: List[float] = []

    def bucket(self, snapshot: RawSnapshot, market: str, granularity: float) -> List[BookLevel]:
        self.granularities.append(granularity)
        return list(snapshot.levels)
