"""
Tests for the command line interface.
"""

import json

import pytest

from funding_arb import main as cli
from funding_arb.exceptions import RefreshCycleError
from funding_arb.exchanges import ExchangeRegistry
from funding_arb.models import Exchange
from funding_arb.services import run_refresh_cycle
from funding_arb.utils import utcnow

from conftest import StaticAdapter, make_snapshot


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "Settling"), (-10, "Settling"), (45, "45s"), (600, "10m"), (3 * 3600 + 120, "3h 2m")],
)
def test_format_time_until(seconds, expected) -> None:
    assert cli.format_time_until(seconds) == expected


def test_parser_defaults() -> None:
    args = cli.create_parser().parse_args([])

    assert args.exchanges is None
    assert args.cost is None
    assert args.top == 20
    assert not args.watch


@pytest.fixture
def fake_cycle(monkeypatch):
    now = utcnow()
    adapters = [
        StaticAdapter(Exchange.BINANCE, [make_snapshot(Exchange.BINANCE, 30, now=now)]),
        StaticAdapter(Exchange.BYBIT, [make_snapshot(Exchange.BYBIT, 2, now=now)]),
        StaticAdapter(Exchange.GATE, [make_snapshot(Exchange.GATE, -10, now=now)]),
    ]

    async def cycle():
        return await run_refresh_cycle(adapters)

    monkeypatch.setattr(cli, "run_refresh_cycle", cycle)


async def test_json_output_applies_selection_and_cost(fake_cycle, capsys) -> None:
    args = cli.create_parser().parse_args(["--json", "-e", "binance", "bybit", "--cost", "10"])

    assert await cli.main_async(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert len(data["opportunities"]) == 1
    opp = data["opportunities"][0]
    assert opp["exchange_pair"] == "BinanceBybit"
    assert opp["total_spread_cost_bps"] == 10
    assert opp["net_profit_bps"] == pytest.approx(18)
    assert data["stats"]["total"] == 1
    assert len(data["fundingRates"]) == 1


async def test_table_output(fake_cycle) -> None:
    args = cli.create_parser().parse_args(["--top", "2"])

    assert await cli.main_async(args) == 0


async def test_unknown_exchange_rejected(fake_cycle) -> None:
    args = cli.create_parser().parse_args(["-e", "kraken"])

    assert await cli.main_async(args) == 2


async def test_negative_cost_rejected(fake_cycle) -> None:
    args = cli.create_parser().parse_args(["--cost", "-5"])

    assert await cli.main_async(args) == 2


async def test_failed_cycle_exit_code(monkeypatch) -> None:
    async def cycle():
        raise RefreshCycleError("Refresh cycle failed: boom")

    monkeypatch.setattr(cli, "run_refresh_cycle", cycle)

    assert await cli.main_async(cli.create_parser().parse_args([])) == 1


async def test_list_exchanges() -> None:
    args = cli.create_parser().parse_args(["--list-exchanges"])

    assert await cli.main_async(args) == 0
    assert len(ExchangeRegistry.get_all_names()) == 7
