"""BitMart funding adapter."""

from typing import List

from funding_arb.exceptions import SchemaMismatch
from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import utcnow
from .base import ExchangeAdapter, ITEM_ERRORS


class BitMartAdapter(ExchangeAdapter):
    """
    BitMart Futures V2 API adapter.

    API Docs: https://developer-pro.bitmart.com/en/futuresv2/

    Endpoints used:
    - GET /contract/public/details - All contracts with funding rate, interval and next funding
    """

    exchange = Exchange.BITMART
    base_url = "https://api-cloud-v2.bitmart.com"

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        data = await self._request("GET", "/contract/public/details")

        if not isinstance(data, dict) or data.get("code") != 1000:
            message = data.get("message", "Unknown") if isinstance(data, dict) else "No response"
            raise SchemaMismatch(self.display_name, f"API error: {message}")
        symbols = self._require_list((data.get("data") or {}).get("symbols"), "contracts")

        self._logger.info(
            f"[bold blue]{self.display_name}[/]: Found {len(symbols)} perpetual markets"
        )

        fetched_at = utcnow()
        snapshots = []
        for item in symbols:
            try:
                raw_symbol = item["symbol"]
                if not raw_symbol.endswith(self.settlement_currency) or item.get("status") != "Trading":
                    continue

                # Settled rate first, fall back to the expected one
                funding_rate = self._to_float(item.get("funding_rate"))
                if funding_rate is None:
                    funding_rate = self._to_float(item.get("expected_funding_rate")) or 0.0

                mark_price = self._to_float(item.get("index_price"))
                if mark_price is None:
                    mark_price = self._to_float(item.get("last_price"))

                snapshots.append(self._make_snapshot(
                    symbol=raw_symbol,
                    funding_rate=funding_rate,
                    interval_hours=self._to_float(item.get("funding_interval_hours")),
                    next_funding_time=self._parse_timestamp(item.get("funding_time")),
                    mark_price=mark_price,
                    fetched_at=fetched_at,
                ))
            except ITEM_ERRORS as e:
                self._logger.debug(f"Failed to parse {item!r:.80}: {e}")

        return snapshots
