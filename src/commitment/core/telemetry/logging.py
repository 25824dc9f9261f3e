from __future__ import annotations

import logging
import sys

import structlog


def _stderr_logger_factory(*_args) -> structlog.PrintLogger:
    # Resolved per call so a replaced sys.stderr (tests, redirection) is honoured.
    return structlog.PrintLogger(sys.stderr)


def configure_logging(log_level: str = "WARNING", json_logs: bool = False) -> None:
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False)

    # stdout carries the generated message; diagnostics go to stderr.
    structlog.configure(
        processors=[*shared_processors, structlog.processors.EventRenamer(to="event"), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper(), logging.WARNING)),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)
