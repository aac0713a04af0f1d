"""
catalog_guard.cancellation

Cancellation/deadline guard for collaborator round trips.

Responsibilities:
- Race an awaitable against an external cancel signal (`asyncio.Event`) and a timeout.
- Translate either firing into `OperationCancelled`, which public operations turn into
  a `Cancelled` outcome.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class OperationCancelled(Exception):
    """Internal signal; never escapes a public operation."""


async def guarded(
    awaitable: Awaitable[T],
    *,
    cancel: asyncio.Event | None = None,
    timeout: float | None = None,
) -> T:
    task = asyncio.ensure_future(awaitable)
    if cancel is not None and cancel.is_set():
        await _discard(task)
        raise OperationCancelled("cancelled before start")

    waiters: set[asyncio.Future] = {task}
    cancel_waiter: asyncio.Future | None = None
    if cancel is not None:
        cancel_waiter = asyncio.ensure_future(cancel.wait())
        waiters.add(cancel_waiter)

    try:
        done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        # The calling task itself was cancelled: tear down and let it propagate.
        task.cancel()
        if cancel_waiter is not None:
            cancel_waiter.cancel()
        raise

    if cancel_waiter is not None and cancel_waiter not in done:
        cancel_waiter.cancel()

    if task in done:
        return task.result()

    await _discard(task)
    if cancel_waiter is not None and cancel_waiter in done:
        raise OperationCancelled("cancel signal set")
    raise OperationCancelled(f"deadline of {timeout}s exceeded")


async def _discard(task: asyncio.Future) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        # Only the inner task's cancellation is expected here; the caller's own must propagate.
        current = asyncio.current_task()
        if current is not None and current.cancelling():
            raise


# --- Module Notes -----------------------------------------------------------
# Cancelling the *calling* task is plain asyncio cancellation and still propagates;
# only the caller-supplied signal and deadline become a `Cancelled` value.
