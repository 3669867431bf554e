"""Tests for structlog setup."""

from __future__ import annotations

import logging

import structlog

from cachetier.core.config import ObservabilityConfig
from cachetier.logging_config import setup_logging


def test_sets_levels() -> None:
    setup_logging(ObservabilityConfig(log_level="warning"))

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("cachetier").level == logging.WARNING


def test_single_structlog_handler() -> None:
    setup_logging(ObservabilityConfig(log_level="INFO"))
    setup_logging(ObservabilityConfig(log_level="INFO"))

    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, structlog.stdlib.ProcessorFormatter)


def test_sdk_loggers_stay_quiet_in_debug() -> None:
    setup_logging(ObservabilityConfig(log_level="DEBUG"))

    assert logging.getLogger("cachetier").level == logging.DEBUG
    assert logging.getLogger("botocore").level == logging.INFO
    assert logging.getLogger("s3transfer").level == logging.INFO


def test_sdk_loggers_follow_higher_levels() -> None:
    setup_logging(ObservabilityConfig(log_level="ERROR"))

    assert logging.getLogger("botocore").level == logging.ERROR


def test_unknown_level_falls_back_to_info() -> None:
    setup_logging(ObservabilityConfig(log_level="chatty"))

    assert logging.getLogger().level == logging.INFO
