"""Data models for funding rate arbitrage."""

from .exchange import (
    Exchange,
    ExchangePair,
    ALL_EXCHANGES,
    EXCHANGE_PAIRS,
    pairs_for_exchanges,
    parse_exchanges,
)
from .funding_rate import FundingSnapshot, CombinedFundingRate
from .opportunity import Opportunity, OpportunityType, OpportunityStats, OpportunityReport

__all__ = [
    "Exchange",
    "ExchangePair",
    "ALL_EXCHANGES",
    "EXCHANGE_PAIRS",
    "pairs_for_exchanges",
    "parse_exchanges",
    "FundingSnapshot",
    "CombinedFundingRate",
    "Opportunity",
    "OpportunityType",
    "OpportunityStats",
    "OpportunityReport",
]
