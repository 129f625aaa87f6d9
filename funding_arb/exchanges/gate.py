"""Gate.io funding adapter."""

from typing import List

from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import utcnow
from .base import ExchangeAdapter, ITEM_ERRORS


class GateAdapter(ExchangeAdapter):
    """
    Gate.io Futures API adapter.

    API Docs: https://www.gate.io/docs/developers/apiv4/

    Endpoints used:
    - GET /api/v4/futures/usdt/contracts - All USDT contracts with funding rate and interval
    """

    exchange = Exchange.GATE
    base_url = "https://api.gateio.ws"

    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        contracts = self._require_list(
            await self._request("GET", "/api/v4/futures/usdt/contracts"),
            "contracts",
        )

        self._logger.info(
            f"[bold blue]{self.display_name}[/]: Found {len(contracts)} perpetual markets"
        )

        suffix = f"_{self.settlement_currency}"
        fetched_at = utcnow()
        snapshots = []
        for contract in contracts:
            try:
                # Gate.io uses BTC_USDT format
                name = contract["name"]
                if not name.endswith(suffix) or contract.get("in_delisting"):
                    continue

                # Funding interval in seconds
                interval_secs = self._to_float(contract.get("funding_interval"))
                interval_hours = interval_secs / 3600 if interval_secs else None

                snapshots.append(self._make_snapshot(
                    symbol=name,
                    funding_rate=float(contract["funding_rate"]),
                    interval_hours=interval_hours,
                    next_funding_time=self._parse_timestamp(contract.get("funding_next_apply")),
                    mark_price=self._to_float(contract.get("mark_price")),
                    fetched_at=fetched_at,
                ))
            except ITEM_ERRORS as e:
                self._logger.debug(f"Failed to parse {contract!r:.80}: {e}")

        return snapshots
