"""Merge per-venue funding snapshots into one record per instrument."""

import re
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from funding_arb.models import CombinedFundingRate, FundingSnapshot
from funding_arb.utils import utcnow

# Contract-type and settlement suffixes that different venues append to the same market
_SUFFIX_RE = re.compile(r"(:[A-Z]+|[-_](SWAP|PERP|PERPETUAL))$")
_SEPARATOR_RE = re.compile(r"[-_/]")


def normalize_symbol(symbol: str) -> str:
    """
    Normalize a venue symbol to a canonical key.

    BTCUSDT, BTC-USDT, BTC_USDT, BTC/USDT:USDT, BTC-USDT-SWAP and btcusdt
    all become BTCUSDT.
    """
    symbol = symbol.strip().upper()
    previous = None
    while previous != symbol:
        previous = symbol
        symbol = _SUFFIX_RE.sub("", symbol)
    return _SEPARATOR_RE.sub("", symbol)


def merge_funding_rates(
    per_exchange_results: Iterable[Sequence[FundingSnapshot]],
    now: Optional[datetime] = None,
) -> List[CombinedFundingRate]:
    """
    Join adapter outputs by normalized symbol.

    Venue lists are processed in the order given. A combined record is
    created on first sight of its symbol; each snapshot fills the slot of its
    own exchange and never touches other venues' slots.

    Args:
        per_exchange_results: One snapshot list per venue
        now: Timestamp for new records (defaults to current UTC time)

    Returns:
        Combined records in first-seen order
    """
    if now is None:
        now = utcnow()

    combined: Dict[str, CombinedFundingRate] = {}

    for snapshots in per_exchange_results:
        for snapshot in snapshots:
            symbol = normalize_symbol(snapshot.symbol)
            entry = combined.get(symbol)
            if entry is None:
                entry = CombinedFundingRate(symbol=symbol, updated_at=now)
                combined[symbol] = entry
            entry.rates[snapshot.exchange] = replace(snapshot, symbol=symbol)

    return list(combined.values())
