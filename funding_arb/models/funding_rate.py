"""Models for funding rate data."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from funding_arb.utils.timeutils import utcnow
from .exchange import ALL_EXCHANGES, Exchange


@dataclass(frozen=True)
class FundingSnapshot:
    """Funding rate data for a single instrument on a single venue."""

    symbol: str
    exchange: Exchange
    funding_rate: float  # Current funding rate as a fraction (e.g., 0.0001 = 1 bps)
    funding_interval_hours: float
    next_funding_time: datetime
    mark_price: Optional[float] = None
    fetched_at: datetime = field(default_factory=utcnow)

    @property
    def funding_rate_bps(self) -> float:
        return self.funding_rate * 10000

    @property
    def annualized_rate(self) -> float:
        """Annualized funding rate in percent, based on the venue interval."""
        fundings_per_year = (365 * 24) / self.funding_interval_hours
        return self.funding_rate * 100 * fundings_per_year

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "exchange": self.exchange.value,
            "funding_rate": self.funding_rate,
            "funding_interval_hours": self.funding_interval_hours,
            "next_funding_time": self.next_funding_time.isoformat(),
            "mark_price": self.mark_price,
            "fetched_at": self.fetched_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"FundingSnapshot(symbol={self.symbol}, exchange={self.exchange.value}, "
            f"rate={self.funding_rate_bps:.2f}bps, interval={self.funding_interval_hours}h)"
        )


@dataclass
class CombinedFundingRate:
    """
    Funding snapshots for one normalized symbol across all venues.

    Each venue owns exactly one slot; a venue that did not list the symbol
    (or failed to respond) has no entry in ``rates``.
    """

    symbol: str
    rates: Dict[Exchange, FundingSnapshot] = field(default_factory=dict)
    updated_at: datetime = field(default_factory=utcnow)

    def get(self, exchange: Exchange) -> Optional[FundingSnapshot]:
        return self.rates.get(exchange)

    def __getitem__(self, exchange: Exchange) -> Optional[FundingSnapshot]:
        return self.rates.get(exchange)

    @property
    def exchanges(self) -> List[Exchange]:
        """Venues with a filled slot, in canonical order."""
        return [e for e in ALL_EXCHANGES if e in self.rates]

    @property
    def count(self) -> int:
        return len(self.rates)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"symbol": self.symbol}
        for exchange in ALL_EXCHANGES:
            snapshot = self.rates.get(exchange)
            data[exchange.key] = snapshot.to_dict() if snapshot else None
        data["updated_at"] = self.updated_at.isoformat()
        return data
