"""BingX funding adapter."""

from typing import List

from funding_arb.exceptions import SchemaMismatch
from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import utcnow
from .base import ExchangeAdapter, ITEM_ERRORS


class BingXAdapter(ExchangeAdapter):
    """
    BingX Perpetual Swap API adapter.

    API Docs: https://bingx-api.github.io/docs/

    Endpoints used:
    - GET /openApi/swap/v2/quote/premiumIndex - Funding rates, mark prices, next funding times

    BingX does not publish funding intervals, so the default interval applies.
    """

    exchange = Exchange.BINGX
    base_url = "https://open-api.bingx.com"

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        data = await self._request("GET", "/openApi/swap/v2/quote/premiumIndex")

        if not isinstance(data, dict) or data.get("code") != 0:
            message = data.get("msg", "Unknown") if isinstance(data, dict) else "No response"
            raise SchemaMismatch(self.display_name, f"API error: {message}")
        contracts = self._require_list(data.get("data"), "contracts")

        self._logger.info(
            f"[bold blue]{self.display_name}[/]: Found {len(contracts)} perpetual markets"
        )

        suffix = f"-{self.settlement_currency}"
        fetched_at = utcnow()
        snapshots = []
        for item in contracts:
            try:
                # BingX uses BTC-USDT format
                raw_symbol = item["symbol"]
                if not raw_symbol.endswith(suffix):
                    continue

                snapshots.append(self._make_snapshot(
                    symbol=raw_symbol,
                    funding_rate=float(item["lastFundingRate"]),
                    interval_hours=None,
                    next_funding_time=self._parse_timestamp(item.get("nextFundingTime")),
                    mark_price=self._to_float(item.get("markPrice")),
                    fetched_at=fetched_at,
                ))
            except ITEM_ERRORS as e:
                self._logger.debug(f"Failed to parse {item!r:.80}: {e}")

        return snapshots
