"""Structured logging for the API and CLI.

Application code logs through ``structlog.get_logger("worksheetweb.<area>")``.
Records from third-party libraries (uvicorn, SQLAlchemy, asyncpg) go through
stdlib logging and are rendered by the same structlog formatter, so one
stream carries both.
"""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

LOG_FORMATS = ("console", "json")

# Libraries that are noisy at INFO.
_QUIET_LOGGERS = {
    "uvicorn.access": "WARNING",
    "uvicorn.error": "INFO",
    "sqlalchemy.engine": "WARNING",
    "asyncpg": "WARNING",
}


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    raise ValueError(f"unknown log format {log_format!r}; expected one of {LOG_FORMATS}")


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Arguments take precedence over ``WORKSHEETWEB_LOG_LEVEL`` (default INFO)
    and ``WORKSHEETWEB_LOG_FORMAT`` (``console`` or ``json``, default console).
    """
    level = (level or os.environ.get("WORKSHEETWEB_LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.environ.get("WORKSHEETWEB_LOG_FORMAT", "console")).lower()
    renderer = _renderer(log_format)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers = {name: {"level": lvl} for name, lvl in _QUIET_LOGGERS.items()}
    loggers["worksheetweb"] = {"level": level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": loggers,
        }
    )
