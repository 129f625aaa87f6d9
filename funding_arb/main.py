"""
Funding Arbitrage Monitor - Main Entry Point

Command line interface running the detection engine once or on a polling
interval.

Usage:
    # One cycle across all exchanges, default 20 bps cost
    python -m funding_arb.main

    # Restrict to a venue selection with a custom cost
    python -m funding_arb.main --exchanges binance bybit gate --cost 10

    # Poll every 60 seconds
    python -m funding_arb.main --watch --interval 60

    # Machine-readable output
    python -m funding_arb.main --json
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from funding_arb.config import get_config
from funding_arb.exceptions import ConfigurationError, RefreshCycleError
from funding_arb.exchanges import ExchangeRegistry
from funding_arb.models import (
    ALL_EXCHANGES,
    Exchange,
    OpportunityReport,
    OpportunityType,
    pairs_for_exchanges,
    parse_exchanges,
)
from funding_arb.services import RefreshScheduler, apply_view, run_refresh_cycle
from funding_arb.utils import setup_logger, get_logger


console = Console()


def format_time_until(seconds: int) -> str:
    """Format seconds until funding as a short human-readable string."""
    if seconds <= 0:
        return "Settling"

    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Detect cross-exchange funding rate arbitrage opportunities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # One cycle, all exchanges
  %(prog)s -e binance bybit         # Only the Binance-Bybit pair
  %(prog)s --cost 0                 # Gross spreads, no trading cost
  %(prog)s --watch --interval 60    # Refresh every minute
  %(prog)s --json                   # Print the full report as JSON
  %(prog)s --list-exchanges         # List supported exchanges
        """
    )

    parser.add_argument(
        "-e", "--exchanges",
        nargs="+",
        metavar="EXCHANGE",
        help="Exchanges to include in the view (default: all)",
    )

    parser.add_argument(
        "--cost",
        type=int,
        default=None,
        metavar="BPS",
        help="Round-trip trading cost in basis points (default: ARB_DEFAULT_COST_BPS or 20)",
    )

    parser.add_argument(
        "--top",
        type=int,
        default=20,
        metavar="N",
        help="Number of opportunities to display (default: 20)",
    )

    parser.add_argument(
        "--watch", "-w",
        action="store_true",
        help="Keep refreshing on a polling interval",
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Polling interval for --watch (default: FUNDING_POLL_INTERVAL or 30)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON instead of tables",
    )

    parser.add_argument(
        "--list-exchanges",
        action="store_true",
        help="List supported exchanges and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output for debugging",
    )

    return parser


def list_exchanges() -> None:
    """Display supported exchanges and their configuration status."""
    config = get_config()
    table = Table(title="Supported Exchanges", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Display Name", style="green")
    table.add_column("Status", style="yellow")

    for name in ExchangeRegistry.get_all_names():
        exchange = Exchange.from_name(name)
        status = "[green]Enabled[/]" if config.exchange.is_enabled(name) else "[red]Disabled[/]"
        table.add_row(name, exchange.value, status)

    console.print(table)
    console.print(f"\n[dim]{len(ALL_EXCHANGES)} exchanges, {len(pairs_for_exchanges(ALL_EXCHANGES))} pairs[/]")


def display_report(report: OpportunityReport, top_n: int = 20) -> None:
    """Display the top opportunities and summary statistics."""
    stats = report.stats
    opportunities = report.opportunities[:top_n]

    if not opportunities:
        console.print("[yellow]No arbitrage opportunities found.[/]")
    else:
        table = Table(
            title=f"Top {len(opportunities)} Funding Arbitrage Opportunities",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Symbol", style="cyan", no_wrap=True)
        table.add_column("Pair")
        table.add_column("Type")
        table.add_column("Short", style="red")
        table.add_column("Long", style="green")
        table.add_column("Spread", justify="right")
        table.add_column("Net", justify="right")
        table.add_column("Annual", justify="right", style="yellow")
        table.add_column("Funding A/B", justify="right", style="dim")

        for opp in opportunities:
            net = opp.net_profit_bps if opp.net_profit_bps is not None else opp.rate_spread_bps
            net_color = "green" if net > 0 else "red"
            kind = "Rate" if opp.opportunity_type == OpportunityType.RATE_ARBITRAGE else "Interval"
            if opp.is_in_entry_window:
                kind = f"[bold]{kind}*[/]"

            table.add_row(
                opp.symbol,
                opp.exchange_pair.display_name,
                kind,
                opp.short_exchange.value,
                opp.long_exchange.value,
                f"{opp.rate_spread_bps:.2f}",
                f"[{net_color}]{net:+.2f}[/]",
                f"{opp.annualized_return_pct:.1f}%",
                f"{format_time_until(opp.time_to_funding_a_secs)} / "
                f"{format_time_until(opp.time_to_funding_b_secs)}",
            )

        console.print(table)
        console.print("[dim]Spread and Net in bps; * = in entry window[/]")

    avg = f"{stats.avg_spread_bps:.2f} bps" if stats.avg_spread_bps is not None else "N/A"
    best = (
        f"{stats.best_opportunity.symbol} {stats.best_opportunity.exchange_pair.display_name} "
        f"({stats.best_net_profit:+.2f} bps)"
        if stats.best_opportunity else "N/A"
    )
    console.print(
        f"\n[bold]Total:[/] {stats.total}  "
        f"[bold]Rate arb:[/] {stats.rate_arb_count}  "
        f"[bold]Interval mismatch:[/] {stats.interval_mismatch_count}  "
        f"[bold]In window:[/] {stats.in_entry_window}  "
        f"[bold]Profitable:[/] {stats.profitable}"
    )
    console.print(f"[bold]Avg spread:[/] {avg}  [bold]Best:[/] {best}")
    console.print(
        f"[dim]{len(report.funding_rates)} symbols, updated {report.timestamp:%H:%M:%S} UTC[/]"
    )


def render(report: OpportunityReport, exchanges: List[Exchange], cost_bps: int, args: argparse.Namespace) -> None:
    """Apply the caller's view settings and print the result."""
    view = apply_view(report, exchanges, cost_bps)
    if args.json:
        print(json.dumps(view.to_dict(), indent=2))
    else:
        display_report(view, top_n=args.top)


async def main_async(args: argparse.Namespace) -> int:
    """Async main function."""
    config = get_config()
    log_level = logging.DEBUG if args.verbose or config.debug else getattr(logging, config.log_level.upper(), logging.INFO)
    setup_logger(level=log_level, log_file=config.log_file)
    logger = get_logger()

    if args.list_exchanges:
        list_exchanges()
        return 0

    try:
        exchanges = parse_exchanges(args.exchanges) if args.exchanges else list(ALL_EXCHANGES)
        cost_bps = args.cost if args.cost is not None else config.arbitrage.default_cost_bps
        if cost_bps < 0:
            raise ConfigurationError("Cost must be a non-negative number of basis points")
    except ConfigurationError as e:
        logger.error(f"[red]{e}[/]")
        return 2

    if not args.watch:
        try:
            report = await run_refresh_cycle()
        except RefreshCycleError as e:
            logger.error(f"[bold red]{e}[/]")
            return 1
        render(report, exchanges, cost_bps, args)
        return 0

    scheduler = RefreshScheduler(
        on_report=lambda report: render(report, exchanges, cost_bps, args),
        interval=args.interval,
    )
    await scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()
    return 0


def main() -> int:
    """Main entry point."""
    load_dotenv()
    parser = create_parser()
    args = parser.parse_args()

    try:
        return asyncio.run(main_async(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
