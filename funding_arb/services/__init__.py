"""Services for funding rate arbitrage detection."""

from .merger import normalize_symbol, merge_funding_rates
from .opportunity_detector import OpportunityDetector, DetectorConfig
from .aggregator import apply_cost, filter_by_exchanges, calculate_stats, apply_view
from .refresh import run_refresh_cycle, RefreshScheduler

__all__ = [
    "normalize_symbol",
    "merge_funding_rates",
    "OpportunityDetector",
    "DetectorConfig",
    "apply_cost",
    "filter_by_exchanges",
    "calculate_stats",
    "apply_view",
    "run_refresh_cycle",
    "RefreshScheduler",
]
