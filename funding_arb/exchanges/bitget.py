"""Bitget funding adapter."""

import asyncio
from typing import List

from funding_arb.exceptions import SchemaMismatch
from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import utcnow
from .base import ExchangeAdapter, ITEM_ERRORS


class BitgetAdapter(ExchangeAdapter):
    """
    Bitget V2 Mix API adapter.

    API Docs: https://www.bitget.com/api-doc/

    Endpoints used:
    - GET /api/v2/mix/market/tickers - All USDT-M tickers with funding rates
    - GET /api/v2/mix/market/contracts - Contract info with funding interval (hours)

    Tickers carry no next funding time; it is derived from the UTC slot
    schedule for the contract's interval.
    """

    exchange = Exchange.BITGET
    base_url = "https://api.bitget.com"

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        params = {"productType": f"{self.settlement_currency}-FUTURES"}
        tickers_data, contracts_data = await asyncio.gather(
            self._request("GET", "/api/v2/mix/market/tickers", params=params),
            self._request_optional("GET", "/api/v2/mix/market/contracts", params=params),
        )

        if not isinstance(tickers_data, dict) or tickers_data.get("code") != "00000":
            message = tickers_data.get("msg", "Unknown") if isinstance(tickers_data, dict) else "No response"
            raise SchemaMismatch(self.display_name, f"API error: {message}")
        tickers = self._require_list(tickers_data.get("data"), "tickers")

        contracts = None
        if isinstance(contracts_data, dict) and contracts_data.get("code") == "00000":
            contracts = contracts_data.get("data")
        interval_map = self._interval_map(contracts, "fundInterval")

        self._logger.info(
            f"[bold blue]{self.display_name}[/]: Found {len(tickers)} perpetual markets"
        )

        fetched_at = utcnow()
        snapshots = []
        for ticker in tickers:
            try:
                raw_symbol = ticker["symbol"]
                if not raw_symbol.endswith(self.settlement_currency):
                    continue

                mark_price = self._to_float(ticker.get("markPrice"))
                if mark_price is None:
                    mark_price = self._to_float(ticker.get("lastPr"))

                snapshots.append(self._make_snapshot(
                    symbol=raw_symbol,
                    funding_rate=float(ticker["fundingRate"]),
                    interval_hours=interval_map.get(raw_symbol),
                    next_funding_time=None,
                    mark_price=mark_price,
                    fetched_at=fetched_at,
                ))
            except ITEM_ERRORS as e:
                self._logger.debug(f"Failed to parse {ticker!r:.80}: {e}")

        return snapshots
