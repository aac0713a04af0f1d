"""
tests.test_cancellation

`guarded()`: cancel signal and deadline become `OperationCancelled`, while cancelling
the calling task stays ordinary asyncio cancellation.
"""

from __future__ import annotations

import asyncio

import pytest

from catalog_guard.cancellation import OperationCancelled, guarded


async def _value() -> int:
    await asyncio.sleep(0)
    return 7


@pytest.mark.asyncio
async def test_completed_work_returns_its_result() -> None:
    assert await guarded(_value(), cancel=asyncio.Event(), timeout=1) == 7


@pytest.mark.asyncio
async def test_deadline_raises_operation_cancelled() -> None:
    with pytest.raises(OperationCancelled):
        await guarded(asyncio.sleep(10), timeout=0.01)


@pytest.mark.asyncio
async def test_caller_cancellation_propagates() -> None:
    started = asyncio.Event()

    async def slow() -> None:
        started.set()
        await asyncio.sleep(10)

    caller = asyncio.create_task(guarded(slow(), timeout=5))
    await started.wait()
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller


@pytest.mark.asyncio
async def test_caller_cancellation_during_teardown_propagates() -> None:
    teardown_started = asyncio.Event()

    async def slow_to_stop() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            teardown_started.set()
            await asyncio.sleep(10)
            raise

    # The deadline fires first; the caller is cancelled while the work is still stopping.
    caller = asyncio.create_task(guarded(slow_to_stop(), timeout=0.01))
    await teardown_started.wait()
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller
