"""
Opportunity Detector

Classifies and scores funding rate arbitrage opportunities for every
instrument on every venue pair.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from funding_arb.config import get_config
from funding_arb.models import (
    EXCHANGE_PAIRS,
    CombinedFundingRate,
    ExchangePair,
    FundingSnapshot,
    Opportunity,
    OpportunityType,
)
from funding_arb.utils import utcnow, seconds_until

logger = logging.getLogger(__name__)

HOURS_PER_YEAR = 365 * 24


def _arbitrage_default(name: str):
    return field(default_factory=lambda: getattr(get_config().arbitrage, name))


@dataclass
class DetectorConfig:
    """Classification thresholds. Defaults come from the ARB_* environment settings."""

    # Minimum effective spread in basis points
    min_spread_bps: float = _arbitrage_default("min_spread_bps")

    # Funding times closer than this (seconds) count as the same settlement
    same_funding_tolerance_secs: int = _arbitrage_default("same_funding_tolerance_secs")

    # Entry window before the sooner settlement (seconds)
    entry_window_secs: int = _arbitrage_default("entry_window_secs")

    # Substituted for non-positive funding intervals
    default_interval_hours: float = field(
        default_factory=lambda: get_config().funding.default_interval_hours
    )


class OpportunityDetector:
    """
    Finds funding rate arbitrage opportunities across venue pairs.

    Two kinds of opportunity are recognized:
    - Rate arbitrage: both venues settle at (effectively) the same instant,
      so the position earns the rate differential. Short the higher rate,
      long the lower rate.
    - Interval mismatch: the venues settle at different instants, so only
      the sooner settlement is captured. Take the receiving side of the
      sooner venue's rate and hedge on the other venue.
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        pairs: Sequence[ExchangePair] = EXCHANGE_PAIRS,
    ):
        self.config = config or DetectorConfig()
        self.pairs = tuple(pairs)

    def detect(
        self,
        funding_rates: Iterable[CombinedFundingRate],
        now: Optional[datetime] = None,
    ) -> List[Opportunity]:
        """
        Detect opportunities for all symbols and pairs.

        Args:
            funding_rates: Merged funding records
            now: Reference time (defaults to current UTC time)

        Returns:
            Qualifying opportunities sorted by net profit, best first
        """
        if now is None:
            now = utcnow()

        opportunities = []
        symbols = 0
        for rate in funding_rates:
            symbols += 1
            for pair in self.pairs:
                snapshot_a = rate.get(pair.exchange_a)
                snapshot_b = rate.get(pair.exchange_b)
                if snapshot_a is None or snapshot_b is None:
                    continue

                opportunity = self.classify(rate.symbol, pair, snapshot_a, snapshot_b, now)
                if opportunity is not None:
                    opportunities.append(opportunity)

        opportunities.sort(key=lambda o: o.net_profit_bps, reverse=True)

        logger.debug(f"Detected {len(opportunities)} opportunities across {symbols} symbols")
        return opportunities

    def classify(
        self,
        symbol: str,
        pair: ExchangePair,
        snapshot_a: FundingSnapshot,
        snapshot_b: FundingSnapshot,
        now: datetime,
    ) -> Optional[Opportunity]:
        """Score one symbol on one pair. Returns None below the spread threshold."""
        rate_a_bps = snapshot_a.funding_rate * 10000
        rate_b_bps = snapshot_b.funding_rate * 10000

        time_to_funding_a = seconds_until(snapshot_a.next_funding_time, now)
        time_to_funding_b = seconds_until(snapshot_b.next_funding_time, now)

        same_funding_time = (
            abs(time_to_funding_a - time_to_funding_b) < self.config.same_funding_tolerance_secs
        )

        if same_funding_time:
            opportunity_type = OpportunityType.RATE_ARBITRAGE
            effective_spread = abs(rate_a_bps - rate_b_bps)
            if rate_a_bps > rate_b_bps:
                short_exchange, long_exchange = pair.exchange_a, pair.exchange_b
            else:
                short_exchange, long_exchange = pair.exchange_b, pair.exchange_a
        else:
            # Only the sooner settlement is captured
            opportunity_type = OpportunityType.INTERVAL_MISMATCH
            if time_to_funding_a < time_to_funding_b:
                sooner_rate, sooner, later = rate_a_bps, pair.exchange_a, pair.exchange_b
            else:
                sooner_rate, sooner, later = rate_b_bps, pair.exchange_b, pair.exchange_a

            effective_spread = abs(sooner_rate)
            # Positive rate: shorts receive funding; negative: longs receive
            if sooner_rate > 0:
                short_exchange, long_exchange = sooner, later
            else:
                short_exchange, long_exchange = later, sooner

        if effective_spread < self.config.min_spread_bps:
            return None

        interval_a = self._interval(snapshot_a)
        interval_b = self._interval(snapshot_b)
        periods_per_year = HOURS_PER_YEAR / min(interval_a, interval_b)
        annualized_return = effective_spread * periods_per_year / 100

        min_time_to_funding = min(time_to_funding_a, time_to_funding_b)
        is_in_entry_window = 0 < min_time_to_funding <= self.config.entry_window_secs

        return Opportunity(
            symbol=symbol,
            exchange_pair=pair,
            opportunity_type=opportunity_type,
            exchange_a=pair.exchange_a,
            exchange_a_rate=snapshot_a.funding_rate,
            exchange_a_rate_bps=rate_a_bps,
            exchange_a_interval_hours=interval_a,
            exchange_a_next_funding=snapshot_a.next_funding_time,
            exchange_b=pair.exchange_b,
            exchange_b_rate=snapshot_b.funding_rate,
            exchange_b_rate_bps=rate_b_bps,
            exchange_b_interval_hours=interval_b,
            exchange_b_next_funding=snapshot_b.next_funding_time,
            rate_spread_bps=effective_spread,
            annualized_return_pct=annualized_return,
            short_exchange=short_exchange,
            long_exchange=long_exchange,
            time_to_funding_a_secs=time_to_funding_a,
            time_to_funding_b_secs=time_to_funding_b,
            is_in_entry_window=is_in_entry_window,
            total_spread_cost_bps=None,
            # Without a cost estimate, net = gross
            net_profit_bps=effective_spread,
            detected_at=now,
        )

    def _interval(self, snapshot: FundingSnapshot) -> float:
        interval = snapshot.funding_interval_hours
        if not interval or interval <= 0:
            return self.config.default_interval_hours
        return interval
