"""Exceptions raised by the funding arbitrage engine."""


class FundingArbError(Exception):
    """Base class for all engine errors."""


class ExchangeError(FundingArbError):
    """Base class for adapter-level failures. Never leaves an adapter."""

    def __init__(self, exchange: str, message: str):
        super().__init__(f"{exchange}: {message}")
        self.exchange = exchange


class NetworkFailure(ExchangeError):
    """Raised when a venue endpoint is unreachable, times out or returns a non-200 status."""


class SchemaMismatch(ExchangeError):
    """Raised when a venue response does not have the expected shape."""


class ConfigurationError(FundingArbError):
    """Raised when caller-supplied settings are invalid (e.g. an empty exchange selection)."""


class RefreshCycleError(FundingArbError):
    """Raised when a refresh cycle fails outside adapter scope."""
