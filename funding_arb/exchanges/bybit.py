"""Bybit funding adapter."""

import asyncio
from typing import Any, List

from funding_arb.exceptions import SchemaMismatch
from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import utcnow
from .base import ExchangeAdapter, ITEM_ERRORS


class BybitAdapter(ExchangeAdapter):
    """
    Bybit V5 API adapter.

    API Docs: https://bybit-exchange.github.io/docs/v5/intro

    Endpoints used:
    - GET /v5/market/tickers - All linear tickers with funding rates
    - GET /v5/market/instruments-info - Funding interval per symbol (minutes)
    """

    exchange = Exchange.BYBIT
    base_url = "https://api.bybit.com"

    def _unwrap(self, data: Any) -> List[Any]:
        """Extract ``result.list`` from a V5 response, checking ``retCode``."""
        if not isinstance(data, dict) or data.get("retCode") != 0:
            message = data.get("retMsg", "Unknown error") if isinstance(data, dict) else "No response"
            raise SchemaMismatch(self.display_name, f"API error: {message}")
        return self._require_list((data.get("result") or {}).get("list"), "tickers")

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        params = {"category": "linear"}
        tickers_data, instruments_data = await asyncio.gather(
            self._request("GET", "/v5/market/tickers", params=params),
            self._request_optional("GET", "/v5/market/instruments-info", params=params),
        )
        tickers = self._unwrap(tickers_data)

        instruments = None
        if isinstance(instruments_data, dict) and instruments_data.get("retCode") == 0:
            result = instruments_data.get("result")
            instruments = result.get("list") if isinstance(result, dict) else result
        # fundingInterval is in minutes
        interval_map = self._interval_map(instruments, "fundingInterval", divisor=60)

        self._logger.info(
            f"[bold blue]{self.display_name}[/]: Found {len(tickers)} perpetual markets"
        )

        fetched_at = utcnow()
        snapshots = []
        for item in tickers:
            try:
                raw_symbol = item["symbol"]
                if not raw_symbol.endswith(self.settlement_currency):
                    continue

                snapshots.append(self._make_snapshot(
                    symbol=raw_symbol,
                    funding_rate=float(item["fundingRate"]),
                    interval_hours=interval_map.get(raw_symbol),
                    next_funding_time=self._parse_timestamp(item.get("nextFundingTime")),
                    mark_price=self._to_float(item.get("markPrice")),
                    fetched_at=fetched_at,
                ))
            except ITEM_ERRORS as e:
                self._logger.debug(f"Failed to parse {item!r:.80}: {e}")

        return snapshots
