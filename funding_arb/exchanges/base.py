"""Base class for exchange funding data adapters."""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from funding_arb.config import get_config
from funding_arb.exceptions import ExchangeError, NetworkFailure, SchemaMismatch
from funding_arb.models import Exchange, FundingSnapshot
from funding_arb.utils import get_logger, calculate_next_funding_time

# Exceptions raised by a malformed item inside an otherwise valid response
ITEM_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


class ExchangeAdapter(ABC):
    """
    Funding data adapter for a single venue.

    Subclasses implement ``fetch_snapshots`` against the venue's public REST
    API and may raise freely. Callers use ``fetch``, which never raises: any
    failure is logged and reported as an empty snapshot list.
    """

    exchange: Exchange
    base_url: str = ""

    def __init__(
        self,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        default_interval_hours: Optional[float] = None,
        settlement_currency: Optional[str] = None,
    ):
        config = get_config().funding
        self.timeout = timeout if timeout is not None else config.fetch_timeout
        self.retries = max(1, retries if retries is not None else config.request_retries)
        self.default_interval_hours = default_interval_hours or config.default_interval_hours
        self.settlement_currency = (settlement_currency or config.settlement_currency).upper()
        self._logger = get_logger(f"exchanges.{self.name}")
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def name(self) -> str:
        return self.exchange.key

    @property
    def display_name(self) -> str:
        return self.exchange.value

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
                timeout=timeout,
            )
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make HTTP request to the venue API with retry logic.

        Raises:
            NetworkFailure: non-200 status, timeout or connection error after all retries
            SchemaMismatch: response body is not JSON
        """
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        session = await self._get_session()
        last_error = "no attempt made"

        for attempt in range(self.retries):
            try:
                async with session.request(method, url, params=params) as resp:
                    if resp.status == 200:
                        try:
                            return await resp.json(content_type=None)
                        except ValueError as e:
                            raise SchemaMismatch(self.display_name, f"invalid JSON from {url}: {e}")
                    if resp.status == 429:  # Rate limit
                        last_error = f"rate limited on {url}"
                        await asyncio.sleep(1 * (attempt + 1))
                        continue
                    raise NetworkFailure(self.display_name, f"HTTP {resp.status} for {url}")
            except asyncio.TimeoutError:
                last_error = f"timeout for {url}"
            except aiohttp.ClientError as e:
                last_error = f"request to {url} failed: {e}"

            if attempt < self.retries - 1:
                await asyncio.sleep(0.5 * (attempt + 1))

        raise NetworkFailure(self.display_name, last_error)

    async def _request_optional(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[Any]:
        """Like ``_request`` but for secondary metadata: failures are logged and yield None."""
        try:
            return await self._request(method, path, params=params)
        except ExchangeError as e:
            self._logger.warning(f"[yellow]{self.display_name}[/]: metadata unavailable - {e}")
            return None

    def _parse_timestamp(self, ts: Any) -> Optional[datetime]:
        """Parse timestamp (seconds, milliseconds or ISO string) to an aware UTC datetime."""
        if ts is None or ts == "":
            return None

        try:
            if isinstance(ts, str) and ts.strip().lstrip("-").isdigit():
                ts = int(ts)
            if isinstance(ts, (int, float)):
                if ts <= 0:
                    return None
                # Check if milliseconds or seconds
                if ts > 10000000000:
                    ts = ts / 1000
                return datetime.fromtimestamp(ts, tz=timezone.utc)
            if isinstance(ts, str):
                parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
                if parsed.tzinfo is None:
                    parsed = parsed.replace(tzinfo=timezone.utc)
                return parsed.astimezone(timezone.utc)
        except (ValueError, TypeError, OverflowError, OSError):
            pass

        return None

    @staticmethod
    def _to_float(value: Any) -> Optional[float]:
        """Convert a numeric string/number to float, None when missing or unparsable."""
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def _require_list(self, data: Any, what: str) -> List[Any]:
        """Return ``data`` if it is a list, otherwise raise SchemaMismatch."""
        if not isinstance(data, list):
            raise SchemaMismatch(
                self.display_name, f"expected a list of {what}, got {type(data).__name__}"
            )
        return data

    def _interval_map(self, items: Any, interval_key: str, divisor: float = 1.0) -> Dict[str, float]:
        """
        Build ``symbol -> interval hours`` from secondary metadata.

        A malformed payload degrades to an empty map (default interval for
        every symbol), like a failed metadata request.
        """
        interval_map: Dict[str, float] = {}
        if items is None:
            return interval_map
        if not isinstance(items, list):
            self._logger.warning(
                f"[yellow]{self.display_name}[/]: unexpected interval metadata ({type(items).__name__}), using defaults"
            )
            return interval_map

        for item in items:
            try:
                value = self._to_float(item.get(interval_key))
                if value:
                    interval_map[item["symbol"]] = value / divisor
            except ITEM_ERRORS as e:
                self._logger.debug(f"Skipping interval entry {item!r:.80}: {e}")
        return interval_map

    def _resolve_interval(self, interval_hours: Optional[float]) -> float:
        if interval_hours is None or interval_hours <= 0:
            return self.default_interval_hours
        return interval_hours

    def _make_snapshot(
        self,
        symbol: str,
        funding_rate: float,
        interval_hours: Optional[float],
        next_funding_time: Optional[datetime],
        mark_price: Optional[float],
        fetched_at: datetime,
    ) -> FundingSnapshot:
        """Build a snapshot, filling in the default interval and the UTC slot schedule."""
        interval = self._resolve_interval(interval_hours)
        if next_funding_time is None:
            next_funding_time = calculate_next_funding_time(interval, now=fetched_at)
        return FundingSnapshot(
            symbol=symbol,
            exchange=self.exchange,
            funding_rate=funding_rate,
            funding_interval_hours=interval,
            next_funding_time=next_funding_time,
            mark_price=mark_price,
            fetched_at=fetched_at,
        )

    @abstractmethod
    async def fetch_snapshots(self) -> List[FundingSnapshot]:
        """Fetch and parse the venue's funding data. May raise."""

    async def fetch(self) -> List[FundingSnapshot]:
        """Fetch funding snapshots, returning an empty list on any failure."""
        try:
            snapshots = await self.fetch_snapshots()
        except ExchangeError as e:
            self._logger.warning(f"[bold red]{self.display_name}[/]: {e}")
            return []
        except Exception as e:
            self._logger.error(
                f"[bold red]{self.display_name}[/]: Unexpected error - {e!r}", exc_info=True
            )
            return []
        finally:
            await self.close()

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched {len(snapshots)} funding rates"
        )
        return snapshots

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"
