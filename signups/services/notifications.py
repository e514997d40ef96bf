"""Detached (fire-and-forget) notification dispatch."""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from fastapi import Request

from ..logging_config import logger
from .emailer import OutboundEmail

_background_tasks: set[asyncio.Task[None]] = set()

Sender = Callable[[OutboundEmail], Awaitable[Any]]


def get_notifier(request: Request) -> Any:
    return request.app.state.notifier


async def _deliver(send: Sender, message: OutboundEmail, label: str) -> None:
    try:
        await send(message)
    except Exception as exc:
        logger.warning("notification.failed", label=label, error=str(exc), exc_info=exc)


def dispatch_detached(send: Sender, message: OutboundEmail, label: str) -> asyncio.Task[None]:
    """Schedule ``send(message)`` without waiting for it.

    The caller never sees the outcome. Errors raised by ``send`` are logged
    inside the task, so nothing reaches the loop's unhandled-error channel.
    """
    task = asyncio.create_task(_deliver(send, message, label), name=f"notify:{label}")
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def pending_notifications() -> int:
    return len(_background_tasks)


async def drain_notifications(timeout: float = 5.0) -> None:
    if not _background_tasks:
        return
    _, pending = await asyncio.wait(set(_background_tasks), timeout=timeout)
    if pending:
        logger.warning("notification.drain_timeout", pending=len(pending))
