"""Logging configuration for the funding arbitrage engine."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER = "funding_arb"

# Report tables go to stdout, log records to stderr
_console = Console(stderr=True)
_configured = False

# Chatty dependencies kept at WARNING unless debugging
_NOISY_LOGGERS = ("aiohttp", "asyncio")


def setup_logger(
    name: str = ROOT_LOGGER,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the application logger.

    Safe to call more than once: handlers are replaced, so the CLI can
    raise verbosity after adapters have already fetched a logger.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional path to log file

    Returns:
        Configured logger instance
    """
    global _configured

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=_console,
        show_time=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        logger.addHandler(file_handler)

    logger.propagate = False

    third_party_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(third_party_level)

    _configured = True
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get the application logger, or a child of it (``funding_arb.<name>``).

    Configures the root application logger with defaults on first use.
    """
    if not _configured:
        setup_logger()
    if name:
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(ROOT_LOGGER)
