"""Shared fixtures for the aggregation tests."""
import pytest

from exchanges.static import StaticBookSource
from utils import logger as logger_module
from utils.logger import StructuredLogger


@pytest.fixture(autouse=True)
def structured_logs(tmp_path, monkeypatch):
    """Keep structured JSONL logs inside the test's temp dir."""
    slog = StructuredLogger("aggregation", log_dir=str(tmp_path / "logs"))
    monkeypatch.setattr(logger_module, "_loggers", {"aggregation": slog})
    yield slog
    for handler in list(slog.logger.handlers):
        slog.logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def four_bids():
    """Scenario book: 100, 99, 98, 97 with size 1 each."""
    return [(100.0, 1.0), (99.0, 1.0), (98.0, 1.0), (97.0, 1.0)]


@pytest.fixture
def scenario_source(four_bids):
    """Static source for the four-level book, ticker and average at 100."""
    return StaticBookSource("TEST", ticker=100.0, average=100.0, bids=four_bids, price_precision=8)
