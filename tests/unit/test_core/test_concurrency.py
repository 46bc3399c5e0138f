"""Tests for concurrent chore helpers."""

import asyncio

import pytest

from chored.core.concurrency import gather, gather_all


async def value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def fail(message, delay=0.0):
    await asyncio.sleep(delay)
    raise RuntimeError(message)


class TestGather:
    @pytest.mark.asyncio
    async def test_results_in_submission_order(self):
        assert await gather_all(value(1, 0.02), value(2), value(3, 0.01)) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_first_failure_raised_after_all_finish(self):
        finished = []

        async def slow():
            await asyncio.sleep(0.02)
            finished.append("slow")

        with pytest.raises(RuntimeError, match="first"):
            await gather_all(fail("first", 0.01), slow(), fail("second"))
        assert finished == ["slow"]

    @pytest.mark.asyncio
    async def test_gather_collects_errors(self):
        result = await gather(value("ok"), fail("bad"))
        assert result.results == ["ok", None]
        assert not result.all_succeeded
        assert str(result.first_error()) == "bad"
