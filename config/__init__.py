"""Configuration module."""
from .settings import (
    # Granularity search
    AGGREGATION_PARAMS,
    AggregationParams,

    # Defaults
    DEFAULT_TOLERANCE,
    DefaultTolerance,

    # Exchange settings
    BINANCE_API_URL,
    BINANCE_SANDBOX_URL,
    BITSTAMP_API_URL,
    EXCHANGE_TIMEOUT,
    BOOK_DEPTH_LIMIT,

    # API keys
    BINANCE_API_KEY,

    # Logging
    LOG_LEVEL,
    LOG_FORMAT,
    LOGS_DIR,

    # Functions
    validate_config,
    get_config_summary,
)

__all__ = [
    "AGGREGATION_PARAMS",
    "AggregationParams",
    "DEFAULT_TOLERANCE",
    "DefaultTolerance",
    "BINANCE_API_URL",
    "BINANCE_SANDBOX_URL",
    "BITSTAMP_API_URL",
    "EXCHANGE_TIMEOUT",
    "BOOK_DEPTH_LIMIT",
    "BINANCE_API_KEY",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOGS_DIR",
    "validate_config",
    "get_config_summary",
]
