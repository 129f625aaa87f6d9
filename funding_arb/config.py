"""
Centralized configuration for the funding arbitrage engine.

All constants, thresholds, and settings are defined here.
Values can be overridden via environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.getenv(key, str(default)).lower()
    return val in ("true", "1", "yes", "on")


def _env_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_list(key: str, default: Optional[List[str]] = None) -> List[str]:
    """Get comma-separated list from environment variable."""
    val = os.getenv(key, "")
    if not val:
        return default or []
    return [item.strip() for item in val.split(",") if item.strip()]


@dataclass
class FundingConfig:
    """Funding data fetching configuration."""
    # Used when a venue reports no (or a non-positive) funding interval
    default_interval_hours: int = field(default_factory=lambda: _env_int("FUNDING_DEFAULT_INTERVAL_HOURS", 8))

    # Per-request timeout, also applied to each adapter as a whole
    fetch_timeout: float = field(default_factory=lambda: _env_float("FUNDING_FETCH_TIMEOUT", 10.0))
    request_retries: int = field(default_factory=lambda: _env_int("FUNDING_REQUEST_RETRIES", 2))

    # Only instruments settled in this currency are kept
    settlement_currency: str = field(default_factory=lambda: os.getenv("FUNDING_SETTLEMENT_CURRENCY", "USDT"))

    # Refresh cadence in seconds
    poll_interval: int = field(default_factory=lambda: _env_int("FUNDING_POLL_INTERVAL", 30))
    min_poll_interval: int = field(default_factory=lambda: _env_int("FUNDING_MIN_POLL_INTERVAL", 15))


@dataclass
class ArbitrageConfig:
    """Opportunity classification configuration."""
    # Minimum effective spread in basis points
    min_spread_bps: float = field(default_factory=lambda: _env_float("ARB_MIN_SPREAD_BPS", 3.0))

    # Funding times closer than this are treated as simultaneous
    same_funding_tolerance_secs: int = field(default_factory=lambda: _env_int("ARB_SAME_FUNDING_TOLERANCE_SECS", 300))

    # Entry window before the sooner funding settlement
    entry_window_secs: int = field(default_factory=lambda: _env_int("ARB_ENTRY_WINDOW_SECS", 600))

    # Round-trip trading cost assumed by the default view
    default_cost_bps: int = field(default_factory=lambda: _env_int("ARB_DEFAULT_COST_BPS", 20))


@dataclass
class ExchangeConfig:
    """Exchange-specific configuration."""
    # Exchanges to enable (empty = all)
    enabled_exchanges: List[str] = field(default_factory=lambda: _env_list("ENABLED_EXCHANGES"))

    # Exchanges to disable
    disabled_exchanges: List[str] = field(default_factory=lambda: _env_list("DISABLED_EXCHANGES"))

    def is_enabled(self, name: str) -> bool:
        """Check an exchange name (case-insensitive) against the enable/disable lists."""
        name = name.lower()
        if name in (e.lower() for e in self.disabled_exchanges):
            return False
        if self.enabled_exchanges:
            return name in (e.lower() for e in self.enabled_exchanges)
        return True


@dataclass
class Config:
    """Main configuration class."""
    funding: FundingConfig = field(default_factory=FundingConfig)
    arbitrage: ArbitrageConfig = field(default_factory=ArbitrageConfig)
    exchange: ExchangeConfig = field(default_factory=ExchangeConfig)

    # Debug mode
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", False))

    # Log level
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    _config = Config()
    return _config
