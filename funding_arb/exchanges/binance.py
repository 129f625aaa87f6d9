"""Binance Futures funding adapter."""

import asyncio
from typing import List

from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import utcnow
from .base import ExchangeAdapter, ITEM_ERRORS


class BinanceAdapter(ExchangeAdapter):
    """
    Binance USDT-M Futures adapter.

    API Docs: https://binance-docs.github.io/apidocs/futures/en/

    Endpoints used:
    - GET /fapi/v1/premiumIndex - All mark prices, funding rates and next funding times
    - GET /fapi/v1/fundingInfo - Funding intervals (only lists non-default symbols)
    """

    exchange = Exchange.BINANCE
    base_url = "https://fapi.binance.com"

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        premium_data, funding_info = await asyncio.gather(
            self._request("GET", "/fapi/v1/premiumIndex"),
            self._request_optional("GET", "/fapi/v1/fundingInfo"),
        )
        premium_data = self._require_list(premium_data, "premium index entries")

        interval_map = self._interval_map(funding_info, "fundingIntervalHours")

        self._logger.info(
            f"[bold blue]{self.display_name}[/]: Found {len(premium_data)} perpetual markets"
        )

        fetched_at = utcnow()
        snapshots = []
        for item in premium_data:
            try:
                # Binance uses BTCUSDT format
                raw_symbol = item["symbol"]
                if not raw_symbol.endswith(self.settlement_currency):
                    continue

                snapshots.append(self._make_snapshot(
                    symbol=raw_symbol,
                    funding_rate=float(item["lastFundingRate"]),
                    interval_hours=interval_map.get(raw_symbol),
                    next_funding_time=self._parse_timestamp(item.get("nextFundingTime")),
                    mark_price=self._to_float(item.get("markPrice")),
                    fetched_at=fetched_at,
                ))
            except ITEM_ERRORS as e:
                self._logger.debug(f"Failed to parse {item!r:.80}: {e}")

        return snapshots
