"""
Structured logging for related-people feed assembly.

Provides a logger with console and file outputs plus per-process metrics
for monitoring how feeds are filled (primary stream vs group fallback)
and how often they fall short.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Logger with support for console and file outputs.
    Tracks metrics for monitoring feed assembly.
    """

    def __init__(
        self,
        name: str = "relatedfeed",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = {
            "runs": 0,
            "candidates_considered": 0,
            "records_emitted": 0,
            "records_by_phase": {},
            "unrecognized_kinds": {},
            "access_denied": 0,
            "shortfalls": 0,
            "failures": 0,
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"relatedfeed_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str, sort_keys=True)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_run(self):
        """Increment assembly run counter."""
        self.metrics["runs"] += 1

    def record_candidate(self):
        self.metrics["candidates_considered"] += 1

    def record_emitted(self, phase: str):
        """Record a rendered record for a phase (primary or fallback)."""
        self.metrics["records_emitted"] += 1
        by_phase = self.metrics["records_by_phase"]
        by_phase[phase] = by_phase.get(phase, 0) + 1

    def record_unrecognized(self, resource_type: Optional[str]):
        key = resource_type or "<none>"
        kinds = self.metrics["unrecognized_kinds"]
        kinds[key] = kinds.get(key, 0) + 1

    def record_access_denied(self):
        self.metrics["access_denied"] += 1

    def record_shortfall(self):
        self.metrics["shortfalls"] += 1

    def record_failure(self):
        self.metrics["failures"] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = dict(self.metrics)
        metrics_copy["records_by_phase"] = dict(self.metrics["records_by_phase"])
        metrics_copy["unrecognized_kinds"] = dict(self.metrics["unrecognized_kinds"])
        runs = metrics_copy["runs"]
        if runs > 0:
            metrics_copy["shortfall_rate"] = round(metrics_copy["shortfalls"] / runs, 3)
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Feed Assembly Metrics ===")
        self.info(f"Runs: {metrics['runs']} (failures: {metrics['failures']})")
        self.info(
            f"Records: {metrics['records_emitted']} emitted from "
            f"{metrics['candidates_considered']} candidates"
        )

        if metrics["records_by_phase"]:
            self.info("Records by phase:")
            for phase, count in metrics["records_by_phase"].items():
                self.info(f"  {phase}: {count}")

        if metrics["runs"]:
            rate = metrics.get("shortfall_rate", 0) * 100
            self.info(f"Shortfalls: {metrics['shortfalls']}/{metrics['runs']} ({rate:.1f}%)")

        if metrics["access_denied"]:
            self.info(f"Access denied: {metrics['access_denied']}")

        if metrics["unrecognized_kinds"]:
            self.info("Unrecognized kinds:")
            for kind, count in metrics["unrecognized_kinds"].items():
                self.info(f"  {kind}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "relatedfeed",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the process-wide logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the process-wide logger (useful for testing)."""
    global _global_logger
    _global_logger = None
