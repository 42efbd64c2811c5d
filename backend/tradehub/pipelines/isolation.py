"""Failure Isolation: run best-effort work so its errors are logged, never propagated.

Invariants:
    - run_isolated never raises an Exception subclass; CancelledError still propagates
    - fire_and_forget keeps a strong reference to every task until it finishes
    - Background task errors are logged by the done-callback, never re-raised

Design Decisions:
    - Module-level task set: asyncio only holds weak references to tasks
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

_background_tasks: set[asyncio.Task] = set()


async def run_isolated(
    label: str, work: Callable[[], Awaitable[None]], **log_extra: object,
) -> bool:
    """Await work(); log and swallow any Exception. Returns True on success."""
    try:
        await work()
        return True
    except Exception as e:
        logger.warning(
            f"{label} failed: {e}", exc_info=True, extra=log_extra,
        )
        return False


def fire_and_forget(
    label: str, work: Callable[[], Awaitable[None]], **log_extra: object,
) -> asyncio.Task:
    """Schedule work() on the running loop without awaiting it."""
    task = asyncio.create_task(run_isolated(label, work, **log_extra))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def pending_background_tasks() -> int:
    return len(_background_tasks)


async def drain_background_tasks() -> None:
    """Wait for every scheduled background task (shutdown and tests)."""
    while _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
