"""
Deadline-bounded execution of a single unit of async work.

``run_bounded`` starts the work as its own task and races it against a
timeout. The caller always gets exactly one outcome back: ``Ready`` with the
work's value, or ``Expired`` describing why no value is available.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Abandoned tasks stay referenced here until they finish, otherwise the
# event loop may garbage collect them mid-flight.
_abandoned_tasks: set[asyncio.Task[Any]] = set()


class ExpiredReason(StrEnum):
    """Why a bounded operation produced no value."""

    DEADLINE_EXCEEDED = "deadline_exceeded"
    WORKER_ERROR = "worker_error"


@dataclass(frozen=True, slots=True)
class Ready(Generic[T]):
    """The work finished before the deadline and produced a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Expired:
    """The work produced no value: it failed or ran past its deadline."""

    reason: ExpiredReason
    operation: str
    timeout: float
    detail: str | None = None

    @property
    def deadline_exceeded(self) -> bool:
        return self.reason is ExpiredReason.DEADLINE_EXCEEDED


BoundedOutcome = Union[Ready[T], Expired]


def _discard_late_result(task: asyncio.Task[Any]) -> None:
    """Consume the result of a task whose waiter has already left."""
    _abandoned_tasks.discard(task)
    if task.cancelled():
        return
    if (exc := task.exception()) is not None:
        logger.debug(f"Abandoned operation finished with error: {exc}")
    else:
        logger.debug("Abandoned operation finished late, result discarded")


async def run_bounded(
    work: Callable[[], Awaitable[T]],
    timeout: float,
    *,
    operation: str = "operation",
) -> BoundedOutcome[T]:
    """
    Run ``work`` on its own task and wait at most ``timeout`` seconds for it.

    On timeout the task is cancelled but not awaited: cancellation is
    cooperative and the task may keep running in the background until it
    reaches its next suspension point. Its late result is discarded.

    Args:
        work: Zero-argument callable returning the awaitable to run
        timeout: Deadline in seconds, must be positive
        operation: Name used in log lines and in the returned outcome

    Returns:
        Ready with the value, or Expired with the reason
    """
    if timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")

    task: asyncio.Future[T] = asyncio.ensure_future(work())
    start = time.monotonic()

    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise

    elapsed_ms = (time.monotonic() - start) * 1000

    if not done:
        task.cancel()
        _abandoned_tasks.add(task)
        task.add_done_callback(_discard_late_result)
        logger.error(
            f"Operation '{operation}' timed out after {elapsed_ms:.1f}ms "
            f"(deadline {timeout * 1000:.0f}ms)"
        )
        return Expired(ExpiredReason.DEADLINE_EXCEEDED, operation, timeout)

    if task.cancelled():
        logger.error(f"Operation '{operation}' was cancelled")
        return Expired(ExpiredReason.WORKER_ERROR, operation, timeout, "cancelled")

    if (exc := task.exception()) is not None:
        logger.error(f"Operation '{operation}' failed after {elapsed_ms:.1f}ms: {exc}")
        return Expired(ExpiredReason.WORKER_ERROR, operation, timeout, str(exc))

    logger.info(f"Operation '{operation}' completed in {elapsed_ms:.1f}ms")
    return Ready(task.result())
