"""
Tests for UTC time helpers and timestamp parsing.
"""

from datetime import datetime, timedelta, timezone

import pytest

from funding_arb.exchanges import GateAdapter
from funding_arb.utils import calculate_next_funding_time, seconds_until


def at(hour, minute=0, second=0, day=1):
    return datetime(2024, 3, day, hour, minute, second, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "now,interval,expected",
    [
        (at(5, 30), 8, at(8)),
        (at(5, 30), 4, at(8)),
        (at(5, 30), 1, at(6)),
        (at(8), 8, at(8)),
        (at(0), 8, at(0)),
        (at(23, 10), 8, at(0, day=2)),
        (at(21), 5, at(0, day=2)),
        (at(14, 59, 59), 8, at(16)),
        (at(5, 30), 0, at(8)),
        (at(5, 30), -1, at(8)),
    ],
)
def test_calculate_next_funding_time(now, interval, expected) -> None:
    assert calculate_next_funding_time(interval, now=now) == expected


def test_next_funding_time_defaults_to_now() -> None:
    result = calculate_next_funding_time(8)

    assert result.tzinfo is not None
    assert result >= datetime.now(timezone.utc) - timedelta(seconds=1)
    assert result.hour in (0, 8, 16)


def test_seconds_until() -> None:
    now = at(8)

    assert seconds_until(at(8, 10), now) == 600
    assert seconds_until(now + timedelta(milliseconds=999), now) == 0
    assert seconds_until(now - timedelta(milliseconds=1), now) == -1


class TestParseTimestamp:
    @pytest.fixture
    def adapter(self):
        return GateAdapter()

    @pytest.mark.parametrize(
        "raw",
        [
            1709280000,
            1709280000000,
            "1709280000000",
            "2024-03-01T08:00:00Z",
            "2024-03-01T08:00:00+00:00",
            "2024-03-01T09:00:00+01:00",
        ],
    )
    def test_formats(self, adapter, raw) -> None:
        assert adapter._parse_timestamp(raw) == at(8)

    @pytest.mark.parametrize("raw", [None, "", 0, "-5", "soon", [1]])
    def test_unusable_values(self, adapter, raw) -> None:
        assert adapter._parse_timestamp(raw) is None
