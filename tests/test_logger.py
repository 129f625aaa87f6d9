"""
Tests for logging setup.
"""

import logging

from rich.logging import RichHandler

from funding_arb.utils import get_logger, setup_logger


def test_setup_is_repeatable(tmp_path) -> None:
    setup_logger(level=logging.INFO)
    logger = setup_logger(level=logging.DEBUG, log_file=str(tmp_path / "arb.log"))

    rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(rich_handlers) == 1
    assert len(file_handlers) == 1
    assert logger.level == logging.DEBUG

    setup_logger(level=logging.INFO)


def test_child_loggers() -> None:
    logger = get_logger("exchanges.gate")

    assert logger.name == "funding_arb.exchanges.gate"
