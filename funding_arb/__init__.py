"""Cross-exchange funding rate arbitrage detection engine."""

__version__ = "0.1.0"
