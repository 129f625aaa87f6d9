"""Exchange registry and concurrent funding data fan-out."""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Type

from funding_arb.config import get_config
from funding_arb.models import ALL_EXCHANGES, Exchange, FundingSnapshot
from .base import ExchangeAdapter
from .binance import BinanceAdapter
from .bybit import BybitAdapter
from .bingx import BingXAdapter
from .gate import GateAdapter
from .bitget import BitgetAdapter
from .zoomex import ZoomexAdapter
from .bitmart import BitMartAdapter

logger = logging.getLogger(__name__)


class ExchangeRegistry:
    """
    Flat table of venue adapters.

    Provides adapter lookup and the concurrent "all settled" fetch used by
    every refresh cycle.
    """

    _exchanges: Dict[Exchange, Type[ExchangeAdapter]] = {
        Exchange.BINANCE: BinanceAdapter,
        Exchange.BYBIT: BybitAdapter,
        Exchange.BINGX: BingXAdapter,
        Exchange.GATE: GateAdapter,
        Exchange.BITGET: BitgetAdapter,
        Exchange.ZOOMEX: ZoomexAdapter,
        Exchange.BITMART: BitMartAdapter,
    }

    @classmethod
    def get_adapter_class(cls, exchange: Exchange) -> Optional[Type[ExchangeAdapter]]:
        """Get adapter class for an exchange."""
        return cls._exchanges.get(exchange)

    @classmethod
    def get_adapter(cls, exchange: Exchange, **kwargs) -> Optional[ExchangeAdapter]:
        """Create a new adapter instance for an exchange."""
        adapter_class = cls._exchanges.get(exchange)
        if adapter_class is None:
            return None
        return adapter_class(**kwargs)

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get slot keys of all registered exchanges, in canonical order."""
        return [e.key for e in ALL_EXCHANGES if e in cls._exchanges]

    @classmethod
    def create_adapters(cls, exchanges: Optional[Sequence[Exchange]] = None) -> List[ExchangeAdapter]:
        """
        Instantiate adapters in canonical order.

        Args:
            exchanges: Exchanges to include. Defaults to every registered
                exchange allowed by ENABLED_EXCHANGES / DISABLED_EXCHANGES.
        """
        config = get_config()
        adapters = []
        for exchange in ALL_EXCHANGES:
            if exchanges is not None:
                if exchange not in exchanges:
                    continue
            elif not config.exchange.is_enabled(exchange.key):
                logger.debug(f"[{exchange.key}] Disabled by configuration")
                continue

            adapter = cls.get_adapter(exchange)
            if adapter is not None:
                adapters.append(adapter)
        return adapters

    @classmethod
    async def fetch_all_snapshots(
        cls,
        adapters: Optional[Sequence[ExchangeAdapter]] = None,
        timeout: Optional[float] = None,
    ) -> List[List[FundingSnapshot]]:
        """
        Fetch funding snapshots from all adapters concurrently.

        Every adapter runs to completion (or timeout) before this returns; a
        failed, slow or crashing adapter contributes an empty list and never
        affects the others.

        Args:
            adapters: Adapters to fetch from (default: all enabled exchanges).
            timeout: Overall timeout per adapter in seconds.

        Returns:
            One snapshot list per adapter, in the order the adapters were given.
        """
        if adapters is None:
            adapters = cls.create_adapters()
        if timeout is None:
            # An adapter may issue several requests with retries; bound the whole fetch
            funding = get_config().funding
            timeout = funding.fetch_timeout * max(1, funding.request_retries) + 5

        if not adapters:
            logger.warning("No available exchanges to fetch funding rates from")
            return []

        logger.info(f"Fetching funding rates from {len(adapters)} exchanges: {[a.name for a in adapters]}")

        async def fetch_with_timeout(adapter: ExchangeAdapter) -> List[FundingSnapshot]:
            try:
                return await asyncio.wait_for(adapter.fetch(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(f"[{adapter.name}] Timeout after {timeout}s fetching funding rates")
                await adapter.close()
                return []

        results = await asyncio.gather(
            *(fetch_with_timeout(adapter) for adapter in adapters),
            return_exceptions=True,
        )

        snapshots: List[List[FundingSnapshot]] = []
        for adapter, result in zip(adapters, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error(f"[{adapter.name}] Unexpected exception while fetching: {result!r}")
                snapshots.append([])
            else:
                snapshots.append(result)

        total = sum(len(s) for s in snapshots)
        responded = sum(1 for s in snapshots if s)
        logger.info(f"Fetched total of {total} funding rates from {responded}/{len(adapters)} exchanges")

        return snapshots
