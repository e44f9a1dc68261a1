"""Logging setup module using structlog."""

import logging
import sys
from typing import TextIO

import structlog
from structlog.stdlib import BoundLogger

from mcp_mattermost.config.models import LoggingConfig

# Third-party loggers that are too chatty below WARNING unless debugging
NOISY_LOGGERS = ("aiohttp.access", "aiohttp.client")

# Above CRITICAL so that nothing is emitted
SILENT_LEVEL = logging.CRITICAL + 10


def _shared_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(log_format: str) -> structlog.typing.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(config: LoggingConfig, stream: TextIO | None = None) -> None:
    """Initialize logging configuration.

    Routes both structlog and standard library records (aiohttp included)
    through a single handler so every line shares one format.

    Args:
        config: Logging configuration specifying level and format.
        stream: Output stream. Defaults to stdout.
    """
    if config.level == "SILENT":
        log_level = SILENT_LEVEL
    else:
        log_level = getattr(logging, config.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    noisy_level = log_level if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    shared_processors = _shared_processors()
    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(config.format),
            ],
        )
    )


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name, typically the module name (__name__).

    Returns:
        A bound logger instance that can be used for logging.
    """
    return structlog.stdlib.get_logger(name)
