"""Utility modules."""
from .logger import (
    StructuredLogger,
    get_logger,
    setup_logging,
)

__all__ = [
    "StructuredLogger",
    "get_logger",
    "setup_logging",
]
