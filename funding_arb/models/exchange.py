"""Venue identifiers and the canonical venue pair table."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple

from funding_arb.exceptions import ConfigurationError


class Exchange(str, Enum):
    """Supported derivatives venues. Values are display names."""

    BINANCE = "Binance"
    BYBIT = "Bybit"
    BINGX = "BingX"
    GATE = "Gate"
    BITGET = "Bitget"
    ZOOMEX = "Zoomex"
    BITMART = "BitMart"

    @property
    def key(self) -> str:
        """Lower-case slot key (e.g. ``bitmart``)."""
        return self.value.lower()

    @classmethod
    def from_name(cls, name: str) -> "Exchange":
        """Look up an exchange by display name or slot key, case-insensitively."""
        wanted = name.strip().lower()
        for exchange in cls:
            if exchange.key == wanted:
                return exchange
        raise ValueError(f"Unknown exchange: {name}")


# Fixed processing order for merging and slot layout
ALL_EXCHANGES: Tuple[Exchange, ...] = (
    Exchange.BINANCE,
    Exchange.BYBIT,
    Exchange.BINGX,
    Exchange.GATE,
    Exchange.BITGET,
    Exchange.ZOOMEX,
    Exchange.BITMART,
)


@dataclass(frozen=True)
class ExchangePair:
    """
    Unordered venue pair with a canonical orientation.

    ``exchange_a`` is always the venue listed first in ``EXCHANGE_PAIRS``;
    short/long leg selection and the ``*_a``/``*_b`` opportunity fields
    depend on this orientation.
    """

    exchange_a: Exchange
    exchange_b: Exchange

    @property
    def name(self) -> str:
        return f"{self.exchange_a.value}{self.exchange_b.value}"

    @property
    def display_name(self) -> str:
        return f"{self.exchange_a.value}-{self.exchange_b.value}"

    def within(self, exchanges: Iterable[Exchange]) -> bool:
        """True when both endpoints are in ``exchanges``."""
        selected = set(exchanges)
        return self.exchange_a in selected and self.exchange_b in selected

    def __str__(self) -> str:
        return self.name


EXCHANGE_PAIRS: Tuple[ExchangePair, ...] = (
    ExchangePair(Exchange.BINANCE, Exchange.BYBIT),
    ExchangePair(Exchange.BINANCE, Exchange.BINGX),
    ExchangePair(Exchange.BINANCE, Exchange.GATE),
    ExchangePair(Exchange.BINANCE, Exchange.BITGET),
    ExchangePair(Exchange.BINANCE, Exchange.ZOOMEX),
    ExchangePair(Exchange.BINANCE, Exchange.BITMART),
    ExchangePair(Exchange.BYBIT, Exchange.BINGX),
    ExchangePair(Exchange.BYBIT, Exchange.GATE),
    ExchangePair(Exchange.BYBIT, Exchange.BITGET),
    ExchangePair(Exchange.BYBIT, Exchange.ZOOMEX),
    ExchangePair(Exchange.BYBIT, Exchange.BITMART),
    ExchangePair(Exchange.BINGX, Exchange.GATE),
    ExchangePair(Exchange.BINGX, Exchange.BITGET),
    ExchangePair(Exchange.BINGX, Exchange.ZOOMEX),
    ExchangePair(Exchange.BINGX, Exchange.BITMART),
    ExchangePair(Exchange.GATE, Exchange.BITGET),
    ExchangePair(Exchange.GATE, Exchange.ZOOMEX),
    ExchangePair(Exchange.GATE, Exchange.BITMART),
    ExchangePair(Exchange.BITGET, Exchange.ZOOMEX),
    ExchangePair(Exchange.BITGET, Exchange.BITMART),
    ExchangePair(Exchange.ZOOMEX, Exchange.BITMART),
)


def pairs_for_exchanges(exchanges: Iterable[Exchange]) -> List[ExchangePair]:
    """Pairs whose endpoints are both in ``exchanges``, in table order."""
    selected = set(exchanges)
    return [pair for pair in EXCHANGE_PAIRS if pair.within(selected)]


def parse_exchanges(names: Iterable[str]) -> List[Exchange]:
    """
    Turn user-supplied venue names into a canonical, de-duplicated selection.

    Raises:
        ConfigurationError: a name is unknown or the selection is empty
    """
    selected = set()
    for name in names:
        try:
            selected.add(Exchange.from_name(name))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    if not selected:
        raise ConfigurationError("At least one exchange must be selected")
    return [e for e in ALL_EXCHANGES if e in selected]
