"""Structured logging for qbot, built on structlog.

Console output is the default; ``json_output`` switches to one JSON object
per line for log shippers. Per-message context (the user key being served)
is carried through contextvars so every event emitted while handling one
inbound message is tagged with it.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from typing import Iterator

import structlog


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog processors and the minimum level."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger instance."""
    return structlog.get_logger(name)


@contextlib.contextmanager
def user_context(user_key: str) -> Iterator[None]:
    """Bind ``user_key`` to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(user_key=user_key):
        yield
