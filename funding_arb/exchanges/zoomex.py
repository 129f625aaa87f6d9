"""Zoomex funding adapter."""

import asyncio
from typing import List

from funding_arb.exceptions import SchemaMismatch
from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import utcnow
from .base import ExchangeAdapter, ITEM_ERRORS


class ZoomexAdapter(ExchangeAdapter):
    """
    Zoomex V3 API adapter.

    API Docs: https://zoomexglobal.github.io/docs/v3/intro

    Endpoints used:
    - GET /cloud/trade/v3/market/tickers - All linear tickers with funding rates
    - GET /cloud/trade/v3/market/instruments-info - Funding interval per symbol (minutes)

    Note: the API is geo-restricted in several regions; a blocked request
    yields an empty result like any other failure.
    """

    exchange = Exchange.ZOOMEX
    base_url = "https://openapi.zoomex.com"

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        params = {"category": "linear"}
        tickers_data, instruments_data = await asyncio.gather(
            self._request("GET", "/cloud/trade/v3/market/tickers", params=params),
            self._request_optional("GET", "/cloud/trade/v3/market/instruments-info", params=params),
        )

        if not isinstance(tickers_data, dict) or tickers_data.get("retCode") != 0:
            message = tickers_data.get("retMsg", "Unknown error") if isinstance(tickers_data, dict) else "No response"
            raise SchemaMismatch(self.display_name, f"API error: {message}")
        tickers = self._require_list((tickers_data.get("result") or {}).get("list"), "tickers")

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

                funding_rate = self._to_float(item.get("fundingRate"))
                if funding_rate is None:
                    continue

                snapshots.append(self._make_snapshot(
                    symbol=raw_symbol,
                    funding_rate=funding_rate,
                    interval_hours=interval_map.get(raw_symbol),
                    next_funding_time=self._parse_timestamp(item.get("nextFundingTime")),
                    mark_price=self._to_float(item.get("markPrice")),
                    fetched_at=fetched_at,
                ))
            except ITEM_ERRORS as e:
                self._logger.debug(f"Failed to parse {item!r:.80}: {e}")

        return snapshots
