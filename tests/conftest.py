"""
Pytest configuration and shared fixtures.

Provides snapshot builders and a fixed clock for all test modules.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from funding_arb.config import reload_config
from funding_arb.exchanges import ExchangeAdapter
from funding_arb.models import CombinedFundingRate, Exchange, FundingSnapshot


NOW = datetime(2024, 3, 1, 7, 55, 0, tzinfo=timezone.utc)

_ENV_KEYS = [
    "FUNDING_DEFAULT_INTERVAL_HOURS",
    "FUNDING_FETCH_TIMEOUT",
    "FUNDING_REQUEST_RETRIES",
    "FUNDING_SETTLEMENT_CURRENCY",
    "FUNDING_POLL_INTERVAL",
    "FUNDING_MIN_POLL_INTERVAL",
    "ARB_MIN_SPREAD_BPS",
    "ARB_SAME_FUNDING_TOLERANCE_SECS",
    "ARB_ENTRY_WINDOW_SECS",
    "ARB_DEFAULT_COST_BPS",
    "ENABLED_EXCHANGES",
    "DISABLED_EXCHANGES",
]


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Run every test against the built-in defaults."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield reload_config()
    reload_config()


@pytest.fixture
def now() -> datetime:
    return NOW


def make_snapshot(
    exchange: Exchange,
    rate_bps: float,
    funding_in_secs: float = 3600,
    interval_hours: float = 8,
    symbol: str = "BTCUSDT",
    now: datetime = NOW,
) -> FundingSnapshot:
    """Snapshot with a rate in bps settling ``funding_in_secs`` after ``now``."""
    return FundingSnapshot(
        symbol=symbol,
        exchange=exchange,
        funding_rate=rate_bps / 10000,
        funding_interval_hours=interval_hours,
        next_funding_time=now + timedelta(seconds=funding_in_secs),
        mark_price=65000.0,
        fetched_at=now,
    )


def make_combined(symbol: str, *snapshots: FundingSnapshot) -> CombinedFundingRate:
    return CombinedFundingRate(
        symbol=symbol,
        rates={s.exchange: s for s in snapshots},
        updated_at=NOW,
    )


class StaticAdapter(ExchangeAdapter):
    """Adapter returning canned snapshots, or raising a canned error."""

    def __init__(
        self,
        exchange: Exchange,
        snapshots: Optional[List[FundingSnapshot]] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.exchange = exchange
        super().__init__()
        self.snapshots = snapshots or []
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.snapshots)
