"""
Configuration Settings - All Tunable Parameters
================================================
Liquidity aggregation search configuration.
All parameters in one place for easy tuning.
"""
import os
from typing import Tuple
from dataclasses import dataclass, field


# =============================================================================
# GRANULARITY SEARCH
# =============================================================================
@dataclass(frozen=True)
class AggregationParams:
    """Granularity step cycle and relaxation bounds."""
    start_granularity: float = 500.0     # quote-currency units
    # 500 -> 250 -> 100 -> 50 -> 25 -> 20 -> 10 -> 5 -> 2.5 -> 1 ...
    steps: Tuple[float, ...] = field(default=(0.5, 0.4, 0.5, 0.5, 0.8, 0.5, 0.5))
    granularity_decimals: int = 8
    granularity_floor: float = 0.00000001

    # Required support count targets
    min_supports: int = 2
    max_supports: int = 4

    # Relaxation limits (percent)
    pip_phase_limit: int = 50            # phase A raises pip up to here
    pip_limit: int = 100                 # phase C raises pip up to here
    dip_limit: int = 0                   # phase B lowers dip down to here

    def __post_init__(self):
        if self.start_granularity <= 0:
            raise ValueError(f"start_granularity must be positive, got {self.start_granularity}")
        if not self.steps or any(s <= 0 or s >= 1 for s in self.steps):
            raise ValueError(f"steps must be ratios in (0, 1), got {self.steps}")
        if self.min_supports < 2:
            raise ValueError(f"min_supports must be at least 2, got {self.min_supports}")
        if self.max_supports < self.min_supports:
            raise ValueError("max_supports must not be lower than min_supports")

AGGREGATION_PARAMS = AggregationParams()


# =============================================================================
# DEFAULT TOLERANCE
# =============================================================================
@dataclass(frozen=True)
class DefaultTolerance:
    """Caller defaults when a setting is not supplied."""
    dip: float = 5.0        # % below 24h average
    pip: float = 30.0       # % below ticker
    max_price: float = 0.0  # 0 = no ceiling
    min_price: float = 0.0  # 0 = no floor
    top: int = 4            # desired number of supports
    dist: int = 0           # min % distance between supports, 0 = off

DEFAULT_TOLERANCE = DefaultTolerance()


# =============================================================================
# EXCHANGES
# =============================================================================
BINANCE_API_URL = "https://api.binance.com/api/v3"
BINANCE_SANDBOX_URL = "https://testnet.binance.vision/api/v3"
BITSTAMP_API_URL = "https://www.bitstamp.net/api/v2"

EXCHANGE_TIMEOUT = 15  # seconds
BOOK_DEPTH_LIMIT = 1000


# =============================================================================
# API KEYS (from environment)
# =============================================================================
BINANCE_API_KEY = os.getenv("BINANCE_API_KEY", "")


# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGS_DIR = os.getenv("LOGS_DIR", "logs")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================
def validate_config() -> bool:
    """Validate all configuration parameters."""
    errors = []

    try:
        AggregationParams()
    except ValueError as e:
        errors.append(str(e))

    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append(f"LOG_LEVEL {LOG_LEVEL} is invalid")

    if EXCHANGE_TIMEOUT <= 0:
        errors.append("EXCHANGE_TIMEOUT must be positive")

    if errors:
        for error in errors:
            print(f"Config Error: {error}")
        return False

    return True


def get_config_summary() -> str:
    """Return a summary of current configuration."""
    steps = ", ".join(f"{s:g}" for s in AGGREGATION_PARAMS.steps)
    return f"""
AGGREGATION CONFIGURATION
-------------------------
Start granularity: {AGGREGATION_PARAMS.start_granularity:g}
Step cycle: {steps}
Floor: {AGGREGATION_PARAMS.granularity_floor:g}
Supports: {AGGREGATION_PARAMS.min_supports}..{AGGREGATION_PARAMS.max_supports}

Defaults:
  Dip: {DEFAULT_TOLERANCE.dip:g}%
  Pip: {DEFAULT_TOLERANCE.pip:g}%
  Top: {DEFAULT_TOLERANCE.top}

Exchange timeout: {EXCHANGE_TIMEOUT}s
Log level: {LOG_LEVEL}
"""
