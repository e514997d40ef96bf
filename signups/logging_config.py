"""Structured JSON logging plus process-level failure hooks."""
from __future__ import annotations

import asyncio
import logging
import sys
from types import TracebackType
from typing import Any

import structlog


def setup_logging(level: str = "INFO") -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="%(message)s")


def log_uncaught_exception(
    exc_type: type[BaseException],
    exc: BaseException,
    tb: TracebackType | None,
) -> None:
    """``sys.excepthook`` replacement: log, then let the default hook end the process."""
    if not issubclass(exc_type, KeyboardInterrupt):
        logger.critical("process.uncaught_exception", exc_info=(exc_type, exc, tb))
    sys.__excepthook__(exc_type, exc, tb)


def log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    # Unretrieved task failures are logged only; the process keeps serving.
    exc = context.get("exception")
    logger.error(
        "process.unhandled_async_error",
        detail=context.get("message"),
        error=repr(exc) if exc else None,
        exc_info=exc,
    )


def install_process_hooks(loop: asyncio.AbstractEventLoop | None = None) -> None:
    sys.excepthook = log_uncaught_exception
    if loop is not None:
        loop.set_exception_handler(log_loop_exception)


logger = structlog.get_logger("signups")
