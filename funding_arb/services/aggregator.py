"""
Cost model and statistics over detected opportunities.

Everything here is pure: results can be re-derived from the last report
as often as the caller likes (different cost, different venue selection)
without fetching or classifying again.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from funding_arb.config import get_config
from funding_arb.models import (
    Exchange,
    Opportunity,
    OpportunityReport,
    OpportunityStats,
    OpportunityType,
    pairs_for_exchanges,
)
from funding_arb.utils import utcnow


def _rank(opportunities: Iterable[Opportunity]) -> List[Opportunity]:
    """Sort by net profit, best first. Opportunities without a net profit sort as 0."""
    return sorted(
        opportunities,
        key=lambda o: o.net_profit_bps if o.net_profit_bps is not None else 0.0,
        reverse=True,
    )


def apply_cost(opportunities: Iterable[Opportunity], cost_bps: float) -> List[Opportunity]:
    """
    Deduct a trading cost estimate from every opportunity.

    ``net_profit_bps = rate_spread_bps - cost_bps``; the input is never
    modified, and applying the same cost twice gives the same result.
    """
    return _rank(o.with_cost(cost_bps) for o in opportunities)


def filter_by_exchanges(
    opportunities: Iterable[Opportunity],
    exchanges: Iterable[Exchange],
) -> List[Opportunity]:
    """Keep opportunities whose venue pair lies entirely within ``exchanges``."""
    selected_pairs = set(pairs_for_exchanges(exchanges))
    return [o for o in opportunities if o.exchange_pair in selected_pairs]


def calculate_stats(
    opportunities: Sequence[Opportunity],
    now: Optional[datetime] = None,
) -> OpportunityStats:
    """
    Summarize a set of opportunities.

    Statistics are computed strictly from ``opportunities``. With no
    opportunities all counts are zero and best/average are None.
    """
    if now is None:
        now = utcnow()

    by_exchange_pair = Counter(o.exchange_pair.name for o in opportunities)

    with_profit = [o for o in opportunities if o.net_profit_bps is not None]
    best = max(with_profit, key=lambda o: o.net_profit_bps) if with_profit else None

    avg_spread = None
    if opportunities:
        avg_spread = sum(o.rate_spread_bps for o in opportunities) / len(opportunities)

    return OpportunityStats(
        total=len(opportunities),
        rate_arb_count=sum(1 for o in opportunities if o.opportunity_type == OpportunityType.RATE_ARBITRAGE),
        interval_mismatch_count=sum(
            1 for o in opportunities if o.opportunity_type == OpportunityType.INTERVAL_MISMATCH
        ),
        in_entry_window=sum(1 for o in opportunities if o.is_in_entry_window),
        profitable=sum(1 for o in opportunities if o.is_profitable),
        by_exchange_pair=dict(by_exchange_pair),
        best_opportunity=best,
        best_net_profit=best.net_profit_bps if best else None,
        avg_spread_bps=avg_spread,
        updated_at=now,
    )


def apply_view(
    report: OpportunityReport,
    exchanges: Iterable[Exchange],
    cost_bps: Optional[float] = None,
    now: Optional[datetime] = None,
) -> OpportunityReport:
    """
    Re-derive a report for a venue selection and cost estimate.

    Opportunities are restricted to pairs within ``exchanges``, costed and
    re-ranked; statistics are recomputed from that filtered set only.
    Funding rates and the cycle timestamp are carried over unchanged. The
    selection is expected to be non-empty (see ``parse_exchanges``).
    ``cost_bps`` defaults to ARB_DEFAULT_COST_BPS.
    """
    if cost_bps is None:
        cost_bps = get_config().arbitrage.default_cost_bps

    opportunities = apply_cost(filter_by_exchanges(report.opportunities, exchanges), cost_bps)
    return OpportunityReport(
        opportunities=opportunities,
        stats=calculate_stats(opportunities, now=now),
        funding_rates=report.funding_rates,
        timestamp=report.timestamp,
    )
