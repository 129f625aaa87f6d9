"""Models for detected arbitrage opportunities and their aggregates."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from funding_arb.utils.timeutils import utcnow
from .exchange import Exchange, ExchangePair
from .funding_rate import CombinedFundingRate


class OpportunityType(str, Enum):
    """How the funding payment is captured."""

    # Both venues settle at (effectively) the same instant; profit is the rate differential
    RATE_ARBITRAGE = "RateArbitrage"
    # Venues settle at different instants; profit comes from the sooner venue only
    INTERVAL_MISMATCH = "IntervalMismatch"


@dataclass(frozen=True)
class Opportunity:
    """
    Funding rate arbitrage opportunity for one symbol on one venue pair.

    Strategy: short the leg that receives positive funding (or pays the
    least), long the other. ``rate_spread_bps`` is the effective spread the
    position captures at the next settlement; ``net_profit_bps`` is that
    spread after the caller's trading cost estimate.
    """

    symbol: str
    exchange_pair: ExchangePair
    opportunity_type: OpportunityType

    # Exchange A (first venue of the canonical pair)
    exchange_a: Exchange
    exchange_a_rate: float
    exchange_a_rate_bps: float
    exchange_a_interval_hours: float
    exchange_a_next_funding: datetime

    # Exchange B (second venue of the canonical pair)
    exchange_b: Exchange
    exchange_b_rate: float
    exchange_b_rate_bps: float
    exchange_b_interval_hours: float
    exchange_b_next_funding: datetime

    # Calculated metrics
    rate_spread_bps: float
    annualized_return_pct: float
    short_exchange: Exchange
    long_exchange: Exchange
    time_to_funding_a_secs: int
    time_to_funding_b_secs: int
    is_in_entry_window: bool

    # Cost analysis (None until a cost estimate is applied)
    total_spread_cost_bps: Optional[float] = None
    net_profit_bps: Optional[float] = None

    detected_at: datetime = field(default_factory=utcnow)

    @property
    def min_time_to_funding_secs(self) -> int:
        return min(self.time_to_funding_a_secs, self.time_to_funding_b_secs)

    @property
    def is_profitable(self) -> bool:
        return self.net_profit_bps is not None and self.net_profit_bps > 0

    def with_cost(self, cost_bps: float) -> "Opportunity":
        """Copy of this opportunity with ``cost_bps`` deducted from the gross spread."""
        return replace(
            self,
            total_spread_cost_bps=cost_bps,
            net_profit_bps=self.rate_spread_bps - cost_bps,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "exchange_pair": self.exchange_pair.name,
            "opportunity_type": self.opportunity_type.value,
            "exchange_a": self.exchange_a.value,
            "exchange_a_rate": self.exchange_a_rate,
            "exchange_a_rate_bps": self.exchange_a_rate_bps,
            "exchange_a_interval_hours": self.exchange_a_interval_hours,
            "exchange_a_next_funding": self.exchange_a_next_funding.isoformat(),
            "exchange_b": self.exchange_b.value,
            "exchange_b_rate": self.exchange_b_rate,
            "exchange_b_rate_bps": self.exchange_b_rate_bps,
            "exchange_b_interval_hours": self.exchange_b_interval_hours,
            "exchange_b_next_funding": self.exchange_b_next_funding.isoformat(),
            "rate_spread_bps": self.rate_spread_bps,
            "annualized_return_pct": self.annualized_return_pct,
            "short_exchange": self.short_exchange.value,
            "long_exchange": self.long_exchange.value,
            "time_to_funding_a_secs": self.time_to_funding_a_secs,
            "time_to_funding_b_secs": self.time_to_funding_b_secs,
            "is_in_entry_window": self.is_in_entry_window,
            "total_spread_cost_bps": self.total_spread_cost_bps,
            "net_profit_bps": self.net_profit_bps,
            "detected_at": self.detected_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"Opportunity({self.symbol} {self.exchange_pair.display_name} "
            f"{self.opportunity_type.value}: Short {self.short_exchange.value}, "
            f"Long {self.long_exchange.value}, Spread={self.rate_spread_bps:.2f}bps)"
        )


@dataclass
class OpportunityStats:
    """Summary statistics over a set of opportunities."""

    total: int = 0
    rate_arb_count: int = 0
    interval_mismatch_count: int = 0
    in_entry_window: int = 0
    profitable: int = 0
    by_exchange_pair: Dict[str, int] = field(default_factory=dict)
    best_opportunity: Optional[Opportunity] = None
    best_net_profit: Optional[float] = None
    # Undefined (None) when there are no opportunities
    avg_spread_bps: Optional[float] = None
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "rate_arb_count": self.rate_arb_count,
            "interval_mismatch_count": self.interval_mismatch_count,
            "in_entry_window": self.in_entry_window,
            "profitable": self.profitable,
            "by_exchange_pair": dict(self.by_exchange_pair),
            "best_opportunity": self.best_opportunity.to_dict() if self.best_opportunity else None,
            "best_net_profit": self.best_net_profit,
            "avg_spread_bps": self.avg_spread_bps,
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class OpportunityReport:
    """Result of one refresh cycle, as handed to the presentation layer."""

    opportunities: List[Opportunity] = field(default_factory=list)
    stats: OpportunityStats = field(default_factory=OpportunityStats)
    funding_rates: List[CombinedFundingRate] = field(default_factory=list)
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "opportunities": [o.to_dict() for o in self.opportunities],
            "stats": self.stats.to_dict(),
            "fundingRates": [r.to_dict() for r in self.funding_rates],
            "timestamp": self.timestamp.isoformat(),
        }
