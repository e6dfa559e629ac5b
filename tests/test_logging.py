"""Tests for protowrap.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from protowrap.logging import configure_logging, get_logger


def _console_format(logger: logging.Logger) -> str:
    handler = next(h for h in logger.handlers if not isinstance(h, logging.FileHandler))
    assert handler.formatter is not None
    return handler.formatter._fmt or ""


def test_get_logger_nests_under_protowrap() -> None:
    assert get_logger("scheduler").name == "protowrap.scheduler"
    assert get_logger().name == "protowrap"


def test_verbose_console_names_worker_thread() -> None:
    logger = configure_logging(verbose=True)

    assert logger.level == logging.DEBUG
    assert "%(threadName)s" in _console_format(logger)


def test_default_console_omits_thread_name() -> None:
    logger = configure_logging()

    assert logger.level == logging.INFO
    assert "%(threadName)s" not in _console_format(logger)


def test_reconfiguring_replaces_handlers(tmp_path: Path) -> None:
    configure_logging()
    logger = configure_logging(log_file=tmp_path / "protowrap.log")

    assert len(logger.handlers) == 2
    assert sum(isinstance(h, logging.FileHandler) for h in logger.handlers) == 1
    for handler in logger.handlers:
        handler.close()
