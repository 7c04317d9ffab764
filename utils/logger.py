"""
Structured Logging System
==========================
Centralized logging with structured output for debugging and audit trails.
"""
import logging
import sys
from typing import Dict, Optional
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
import json

from config import LOG_LEVEL, LOG_FORMAT, LOGS_DIR


class StructuredLogger:
    """
    Structured logger that outputs JSON-formatted logs for easy parsing.
    Every search outcome is logged for a complete audit trail.
    """

    def __init__(self, name: str, log_dir: str = LOGS_DIR):
        self.name = name
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        # Setup Python logger
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))

        # File handler (daily file)
        log_file = self.log_dir / f"{datetime.now().strftime('%Y-%m-%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self.logger.addHandler(file_handler)

    def _emit(self, level: int, message: str, audit: bool, **fields):
        """Log through `logging` and, for audited events, append a JSONL entry."""
        self.logger.log(level, message)
        if not audit:
            return

        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "logger": self.name,
            "message": message,
            **fields,
        }
        audit_file = self.log_dir / f"{datetime.now():%Y-%m-%d}_structured.jsonl"
        with audit_file.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")

    def debug(self, message: str, **fields):
        self._emit(logging.DEBUG, message, False, **fields)

    def info(self, message: str, **fields):
        # plain info lines are not audited
        self._emit(logging.INFO, message, bool(fields), **fields)

    def warning(self, message: str, **fields):
        self._emit(logging.WARNING, message, True, **fields)

    def error(self, message: str, **fields):
        self._emit(logging.ERROR, message, True, **fields)

    # =========================================================================
    # Domain-Specific Logging Methods
    # =========================================================================

    def log_aggregation(self, market: str, granularity: float, dip: float, pip: float, supports: int):
        """Log a successful granularity search."""
        self.info(
            f"AGG: {market} agg={granularity:g} dip={dip:g}% pip={pip:g}% supports={supports}",
            event_type="aggregation_found",
            market=market,
            granularity=granularity,
            dip=dip,
            pip=pip,
            supports=supports,
        )

    def log_relaxation(self, market: str, phase: str, dip: float, pip: float):
        """Log a tolerance relaxation step."""
        self.debug(
            f"RELAX: {market} phase {phase} -> dip={dip:g}% pip={pip:g}%",
            event_type="tolerance_relaxed",
            market=market,
            phase=phase,
            dip=dip,
            pip=pip,
        )

    def log_thin_book(self, market: str, dip: float, pip: float, strict: bool):
        """Log a market whose book cannot yield supports."""
        self.warning(
            f"THIN BOOK: {market} (dip={dip:g}% pip={pip:g}% strict={strict})",
            event_type="thin_book",
            market=market,
            dip=dip,
            pip=pip,
            strict=strict,
        )

    def log_api_error(self, api: str, error: str, endpoint: Optional[str] = None):
        """Log API error."""
        self.error(
            f"API ERROR: {api} - {error}",
            event_type="api_error",
            api=api,
            error=error,
            endpoint=endpoint,
        )


# Singleton loggers
_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str = "aggregation") -> StructuredLogger:
    """Get or create a logger instance."""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def setup_logging(log_dir: str = LOGS_DIR) -> logging.Logger:
    """Configure root logging with file and console output."""
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)

    # File handler (rotating daily, keep 7 days)
    file_handler = TimedRotatingFileHandler(
        str(Path(log_dir) / "aggregation.log"),
        when="midnight",
        backupCount=7,
        encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # Console handler (stderr keeps stdout clean for command output)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return root_logger
