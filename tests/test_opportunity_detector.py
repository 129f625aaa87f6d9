"""
Tests for opportunity classification and scoring.
"""

from datetime import timedelta

import pytest

from funding_arb.models import (
    ALL_EXCHANGES,
    EXCHANGE_PAIRS,
    Exchange,
    ExchangePair,
    FundingSnapshot,
    OpportunityType,
)
from funding_arb.services import DetectorConfig, OpportunityDetector

from conftest import NOW, make_combined, make_snapshot


BINANCE_BYBIT = ExchangePair(Exchange.BINANCE, Exchange.BYBIT)


@pytest.fixture
def detector() -> OpportunityDetector:
    return OpportunityDetector()


class TestRateArbitrage:
    """Both venues settle within the same-funding tolerance."""

    def test_short_higher_long_lower(self, detector) -> None:
        rate = make_combined(
            "BTCUSDT",
            make_snapshot(Exchange.BINANCE, 10, funding_in_secs=3600),
            make_snapshot(Exchange.BYBIT, -5, funding_in_secs=3720),
        )

        opportunities = detector.detect([rate], now=NOW)

        assert len(opportunities) == 1
        opp = opportunities[0]
        assert opp.opportunity_type == OpportunityType.RATE_ARBITRAGE
        assert opp.exchange_pair == BINANCE_BYBIT
        assert opp.rate_spread_bps == pytest.approx(15)
        assert opp.short_exchange == Exchange.BINANCE
        assert opp.long_exchange == Exchange.BYBIT
        assert opp.net_profit_bps == opp.rate_spread_bps
        assert opp.total_spread_cost_bps is None

    def test_higher_rate_on_second_venue(self, detector) -> None:
        rate = make_combined(
            "ETHUSDT",
            make_snapshot(Exchange.BINANCE, -2, symbol="ETHUSDT"),
            make_snapshot(Exchange.BYBIT, 6, symbol="ETHUSDT"),
        )

        opp = detector.detect([rate], now=NOW)[0]

        assert opp.short_exchange == Exchange.BYBIT
        assert opp.long_exchange == Exchange.BINANCE
        assert opp.rate_spread_bps == pytest.approx(8)

    def test_tolerance_boundary_is_exclusive(self, detector) -> None:
        # 299s apart: same settlement
        same = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 10, funding_in_secs=3600),
            make_snapshot(Exchange.BYBIT, 1, funding_in_secs=3899),
            NOW,
        )
        # 300s apart: different settlements
        different = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 10, funding_in_secs=3600),
            make_snapshot(Exchange.BYBIT, 1, funding_in_secs=3900),
            NOW,
        )

        assert same.opportunity_type == OpportunityType.RATE_ARBITRAGE
        assert different.opportunity_type == OpportunityType.INTERVAL_MISMATCH


class TestIntervalMismatch:
    """Venues settle at different instants; only the sooner one counts."""

    def test_positive_sooner_rate_is_shorted(self, detector) -> None:
        rate = make_combined(
            "SOLUSDT",
            make_snapshot(Exchange.BINANCE, 8, funding_in_secs=120, symbol="SOLUSDT"),
            make_snapshot(
                Exchange.BYBIT, 2, funding_in_secs=5 * 3600, interval_hours=8, symbol="SOLUSDT"
            ),
        )

        opp = detector.detect([rate], now=NOW)[0]

        assert opp.opportunity_type == OpportunityType.INTERVAL_MISMATCH
        assert opp.rate_spread_bps == pytest.approx(8)
        assert opp.short_exchange == Exchange.BINANCE
        assert opp.long_exchange == Exchange.BYBIT
        assert opp.is_in_entry_window is True
        assert opp.time_to_funding_a_secs == 120

    def test_negative_sooner_rate_is_longed(self, detector) -> None:
        opp = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 1, funding_in_secs=7200),
            make_snapshot(Exchange.BYBIT, -6, funding_in_secs=1800),
            NOW,
        )

        assert opp.opportunity_type == OpportunityType.INTERVAL_MISMATCH
        assert opp.rate_spread_bps == pytest.approx(6)
        assert opp.long_exchange == Exchange.BYBIT
        assert opp.short_exchange == Exchange.BINANCE

    def test_later_rate_does_not_count(self, detector) -> None:
        # Large rate on the later venue, tiny rate on the sooner one
        opp = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 50, funding_in_secs=4 * 3600),
            make_snapshot(Exchange.BYBIT, 1, funding_in_secs=600),
            NOW,
        )

        assert opp is None


class TestThresholds:
    def test_small_spread_is_discarded(self, detector) -> None:
        rate = make_combined(
            "BTCUSDT",
            make_snapshot(Exchange.BINANCE, 3),
            make_snapshot(Exchange.BYBIT, 1),
        )

        assert detector.detect([rate], now=NOW) == []

    def test_custom_minimum_spread(self) -> None:
        detector = OpportunityDetector(DetectorConfig(min_spread_bps=20))
        rate = make_combined(
            "BTCUSDT",
            make_snapshot(Exchange.BINANCE, 15),
            make_snapshot(Exchange.BYBIT, 0),
        )

        assert detector.detect([rate], now=NOW) == []

    def test_threshold_from_environment(self, monkeypatch) -> None:
        from funding_arb.config import reload_config

        monkeypatch.setenv("ARB_MIN_SPREAD_BPS", "50")
        reload_config()

        assert OpportunityDetector().config.min_spread_bps == 50

    def test_missing_venue_produces_nothing(self, detector) -> None:
        rate = make_combined("BTCUSDT", make_snapshot(Exchange.BINANCE, 100))

        assert detector.detect([rate], now=NOW) == []


class TestAnnualizedReturn:
    def test_uses_shorter_interval(self, detector) -> None:
        opp = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 10, interval_hours=8),
            make_snapshot(Exchange.BYBIT, 0, interval_hours=1),
            NOW,
        )

        assert opp.annualized_return_pct == pytest.approx(opp.rate_spread_bps * 8760 / 100)

    @pytest.mark.parametrize("bad_interval", [0, -4])
    def test_non_positive_interval_uses_default(self, detector, bad_interval) -> None:
        opp = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 10, interval_hours=bad_interval),
            make_snapshot(Exchange.BYBIT, 0, interval_hours=bad_interval),
            NOW,
        )

        assert opp.exchange_a_interval_hours == 8
        assert opp.annualized_return_pct == pytest.approx(opp.rate_spread_bps * (8760 / 8) / 100)


class TestEntryWindow:
    @pytest.mark.parametrize(
        "funding_in_secs,expected",
        [
            (1, True),
            (300, True),
            (600, True),
            (601, False),
            (0, False),
            (-30, False),
        ],
    )
    def test_window_bounds(self, detector, funding_in_secs, expected) -> None:
        opp = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 10, funding_in_secs=funding_in_secs),
            make_snapshot(Exchange.BYBIT, 0, funding_in_secs=funding_in_secs),
            NOW,
        )

        assert opp.is_in_entry_window is expected

    def test_past_funding_times_still_classified(self, detector) -> None:
        opp = detector.classify(
            "BTCUSDT",
            BINANCE_BYBIT,
            make_snapshot(Exchange.BINANCE, 10, funding_in_secs=-30),
            make_snapshot(Exchange.BYBIT, 0, funding_in_secs=-10),
            NOW,
        )

        assert opp.opportunity_type == OpportunityType.RATE_ARBITRAGE
        assert opp.time_to_funding_a_secs == -30
        assert opp.min_time_to_funding_secs == -30

    def test_fractional_seconds_floor(self, detector) -> None:
        later = FundingSnapshot(
            symbol="BTCUSDT",
            exchange=Exchange.BINANCE,
            funding_rate=0.001,
            funding_interval_hours=8,
            next_funding_time=NOW + timedelta(seconds=90, milliseconds=700),
        )

        opp = detector.classify(
            "BTCUSDT", BINANCE_BYBIT, later, make_snapshot(Exchange.BYBIT, 0, funding_in_secs=90), NOW
        )

        assert opp.time_to_funding_a_secs == 90


class TestDetect:
    def test_every_pair_considered_once_in_canonical_orientation(self, detector) -> None:
        # Rates 0, 5, 10 ... 30 bps: every pair differs by at least 5 bps
        snapshots = [
            make_snapshot(exchange, 5 * i) for i, exchange in enumerate(ALL_EXCHANGES)
        ]
        rate = make_combined("BTCUSDT", *snapshots)

        opportunities = detector.detect([rate], now=NOW)

        assert len(opportunities) == len(EXCHANGE_PAIRS) == 21
        assert {o.exchange_pair for o in opportunities} == set(EXCHANGE_PAIRS)
        for opp in opportunities:
            assert opp.exchange_a == opp.exchange_pair.exchange_a
            assert opp.exchange_b == opp.exchange_pair.exchange_b
            assert {opp.short_exchange, opp.long_exchange} == {opp.exchange_a, opp.exchange_b}
            assert opp.short_exchange != opp.long_exchange

    def test_sorted_by_net_profit(self, detector) -> None:
        rates = [
            make_combined(
                "AUSDT",
                make_snapshot(Exchange.BINANCE, 5, symbol="AUSDT"),
                make_snapshot(Exchange.GATE, 0, symbol="AUSDT"),
            ),
            make_combined(
                "BUSDT",
                make_snapshot(Exchange.BINANCE, 40, symbol="BUSDT"),
                make_snapshot(Exchange.GATE, 0, symbol="BUSDT"),
            ),
            make_combined(
                "CUSDT",
                make_snapshot(Exchange.BINANCE, 12, symbol="CUSDT"),
                make_snapshot(Exchange.GATE, 0, symbol="CUSDT"),
            ),
        ]

        opportunities = detector.detect(rates, now=NOW)

        assert [o.symbol for o in opportunities] == ["BUSDT", "CUSDT", "AUSDT"]
        profits = [o.net_profit_bps for o in opportunities]
        assert profits == sorted(profits, reverse=True)

    def test_restricted_pair_table(self) -> None:
        detector = OpportunityDetector(pairs=[BINANCE_BYBIT])
        rate = make_combined(
            "BTCUSDT",
            make_snapshot(Exchange.BINANCE, 10),
            make_snapshot(Exchange.BYBIT, 0),
            make_snapshot(Exchange.GATE, 30),
        )

        opportunities = detector.detect([rate], now=NOW)

        assert [o.exchange_pair for o in opportunities] == [BINANCE_BYBIT]

    def test_empty_input(self, detector) -> None:
        assert detector.detect([], now=NOW) == []
