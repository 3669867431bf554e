"""structlog setup for the CLI and for library users who want cachetier's format.

Every module logs through ``logging.getLogger(__name__)``; ``setup_logging``
installs one structlog formatter on the root logger so those records come
out as key/value console lines on a terminal and as JSON in CI logs.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from cachetier.core.config import ObservabilityConfig

# AWS SDK loggers that dump request/response detail at DEBUG
_SDK_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3")

_PRE_CHAIN = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _renderer(stream) -> structlog.types.Processor:
    if stream.isatty():
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(config: ObservabilityConfig) -> None:
    """Send cachetier (and all stdlib) logging to stderr through structlog.

    Replaces any handlers already on the root logger. SDK loggers never go
    below INFO, even when ``log_level`` is DEBUG.
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(sys.stderr),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    logging.getLogger("cachetier").setLevel(level)
    for name in _SDK_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
