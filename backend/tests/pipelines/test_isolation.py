"""Failure Isolation: run_isolated / fire_and_forget semantics."""

import asyncio

import pytest

from tradehub.pipelines.isolation import (
    drain_background_tasks,
    fire_and_forget,
    pending_background_tasks,
    run_isolated,
)


async def test_run_isolated_swallows_exceptions():
    async def boom():
        raise ValueError("nope")

    assert await run_isolated("boom", boom) is False


async def test_run_isolated_reports_success():
    async def ok():
        return None

    assert await run_isolated("ok", ok) is True


async def test_run_isolated_lets_cancellation_through():
    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await run_isolated("cancelled", cancelled)


async def test_fire_and_forget_keeps_task_until_done():
    gate = asyncio.Event()
    ran = []

    async def work():
        await gate.wait()
        ran.append(True)

    fire_and_forget("work", work)
    assert pending_background_tasks() == 1
    gate.set()
    await drain_background_tasks()
    assert ran == [True]
    assert pending_background_tasks() == 0
