"""Shared utilities."""

from .logger import setup_logger, get_logger
from .timeutils import utcnow, calculate_next_funding_time, seconds_until

__all__ = [
    "setup_logger",
    "get_logger",
    "utcnow",
    "calculate_next_funding_time",
    "seconds_until",
]
