import logging
import sys

import structlog

DEFAULT_LEVEL = "WARNING"


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # Resolved per logger so a swapped sys.stderr is honoured.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = DEFAULT_LEVEL) -> None:
    """Configure structured logging for a client tool.

    Logs go to stderr so that replies printed on stdout stay machine-readable.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(tool: str | None = None, **kwargs: object) -> structlog.BoundLogger:
    """Get a structured logger, optionally bound to the invoking tool's name."""
    log = structlog.get_logger()
    if tool:
        log = log.bind(tool=tool)
    if kwargs:
        log = log.bind(**kwargs)
    return log
