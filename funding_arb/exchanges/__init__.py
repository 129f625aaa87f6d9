"""Exchange adapters for funding rate data."""

from .base import ExchangeAdapter
from .binance import BinanceAdapter
from .bybit import BybitAdapter
from .bingx import BingXAdapter
from .gate import GateAdapter
from .bitget import BitgetAdapter
from .zoomex import ZoomexAdapter
from .bitmart import BitMartAdapter
from .registry import ExchangeRegistry

__all__ = [
    "ExchangeAdapter",
    "BinanceAdapter",
    "BybitAdapter",
    "BingXAdapter",
    "GateAdapter",
    "BitgetAdapter",
    "ZoomexAdapter",
    "BitMartAdapter",
    "ExchangeRegistry",
]
