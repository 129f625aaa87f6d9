"""
Refresh orchestration.

One cycle = concurrent fetch from every venue, merge, classify and
summarize. Cycles share nothing; the scheduler only decides when the next
one runs.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence, Union

from funding_arb.config import get_config
from funding_arb.exceptions import RefreshCycleError
from funding_arb.exchanges import ExchangeAdapter, ExchangeRegistry
from funding_arb.models import OpportunityReport
from funding_arb.utils import utcnow
from .aggregator import calculate_stats
from .merger import merge_funding_rates
from .opportunity_detector import OpportunityDetector

logger = logging.getLogger(__name__)

ReportCallback = Callable[[OpportunityReport], Union[None, Awaitable[None]]]
ErrorCallback = Callable[[Exception], Union[None, Awaitable[None]]]


async def run_refresh_cycle(
    adapters: Optional[Sequence[ExchangeAdapter]] = None,
    detector: Optional[OpportunityDetector] = None,
    timeout: Optional[float] = None,
) -> OpportunityReport:
    """
    Run one full fetch -> merge -> classify -> summarize pass.

    Adapter failures only reduce venue coverage. Any error in the merge,
    classification or statistics step fails the whole cycle.

    Args:
        adapters: Adapters to fetch from (default: all enabled exchanges)
        detector: Opportunity detector (default: configured thresholds)
        timeout: Per-adapter timeout in seconds

    Returns:
        Report with all qualifying opportunities, no cost applied

    Raises:
        RefreshCycleError: a defect outside adapter scope
    """
    per_exchange = await ExchangeRegistry.fetch_all_snapshots(adapters, timeout=timeout)

    try:
        now = utcnow()
        funding_rates = merge_funding_rates(per_exchange, now=now)
        opportunities = (detector or OpportunityDetector()).detect(funding_rates, now=now)
        stats = calculate_stats(opportunities, now=now)
    except Exception as e:
        raise RefreshCycleError(f"Refresh cycle failed: {e}") from e

    logger.info(
        f"Cycle complete: {len(funding_rates)} symbols, {stats.total} opportunities "
        f"({stats.rate_arb_count} rate arb, {stats.interval_mismatch_count} interval mismatch)"
    )

    return OpportunityReport(
        opportunities=opportunities,
        stats=stats,
        funding_rates=funding_rates,
        timestamp=now,
    )


async def _maybe_await(result) -> None:
    if asyncio.iscoroutine(result):
        await result


class RefreshScheduler:
    """
    Runs refresh cycles on a fixed polling interval.

    Each report is handed to ``on_report``; failed cycles are logged and
    handed to ``on_error``, and polling continues on schedule. The scheduler
    keeps no results of its own.
    """

    def __init__(
        self,
        on_report: ReportCallback,
        on_error: Optional[ErrorCallback] = None,
        interval: Optional[float] = None,
        cycle: Callable[[], Awaitable[OpportunityReport]] = run_refresh_cycle,
    ):
        """
        Initialize the scheduler.

        Args:
            on_report: Called with every successful report (sync or async)
            on_error: Called with the exception of every failed cycle
            interval: Polling interval in seconds, clamped to the configured minimum
            cycle: Coroutine function producing one report
        """
        config = get_config().funding
        requested = interval if interval is not None else config.poll_interval
        if requested < config.min_poll_interval:
            logger.warning(
                f"[Refresh] Interval {requested}s below minimum, using {config.min_poll_interval}s"
            )
            requested = config.min_poll_interval

        self.interval = requested
        self._on_report = on_report
        self._on_error = on_error
        self._cycle = cycle
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._cycle_lock: Optional[asyncio.Lock] = None
        self.cycles_completed = 0
        self.cycles_failed = 0

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start polling. The first cycle runs immediately."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"[Refresh] Polling every {self.interval}s")

    async def stop(self) -> None:
        """Stop polling."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("[Refresh] Polling task ended with an error")
            self._task = None

        logger.info("[Refresh] Stopped")

    async def refresh_now(self) -> Optional[OpportunityReport]:
        """Run one cycle immediately (caller-initiated refresh)."""
        return await self._run_cycle()

    async def _run_cycle(self) -> Optional[OpportunityReport]:
        # Bound to the running loop on first use
        if self._cycle_lock is None:
            self._cycle_lock = asyncio.Lock()

        async with self._cycle_lock:
            try:
                report = await self._cycle()
                await _maybe_await(self._on_report(report))
            except Exception as e:
                self.cycles_failed += 1
                logger.error(f"[Refresh] Cycle failed: {e}")
                await self._report_error(e)
                return None

            self.cycles_completed += 1
            return report

    async def _report_error(self, error: Exception) -> None:
        if self._on_error is None:
            return
        try:
            await _maybe_await(self._on_error(error))
        except Exception:
            logger.exception("[Refresh] Error callback failed")

    async def _loop(self) -> None:
        while self._running:
            try:
                await self._run_cycle()
            except Exception:
                logger.exception("[Refresh] Unexpected error in polling loop")
            await asyncio.sleep(self.interval)
