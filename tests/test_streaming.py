"""Tests for genui.streaming.StreamingQueue and pump."""

from __future__ import annotations

import asyncio

import pytest

from genui.errors import StreamError
from genui.streaming import StreamingQueue, pump


async def drain(queue: StreamingQueue) -> list:
    return [item async for item in queue]


class TestOrdering:
    async def test_values_in_push_order_then_terminal(self):
        q: StreamingQueue[int] = StreamingQueue()
        for i in range(5):
            q.push(i)
        q.finish()

        assert [await q.next() for _ in range(5)] == [0, 1, 2, 3, 4]
        with pytest.raises(StopAsyncIteration):
            await q.next()

    async def test_terminal_signal_is_repeatable(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.finish()
        for _ in range(3):
            with pytest.raises(StopAsyncIteration):
                await q.next()

    async def test_async_for(self):
        q: StreamingQueue[str] = StreamingQueue()
        q.push("a")
        q.push("b")
        q.finish()
        assert await drain(q) == ["a", "b"]

    async def test_waiters_served_fifo(self):
        q: StreamingQueue[int] = StreamingQueue()
        waiters = [asyncio.create_task(q.next()) for _ in range(3)]
        await asyncio.sleep(0)

        q.push(10)
        q.push(20)
        await asyncio.sleep(0)

        assert waiters[0].done() and waiters[0].result() == 10
        assert waiters[1].done() and waiters[1].result() == 20
        assert not waiters[2].done()

        q.finish()
        with pytest.raises(StopAsyncIteration):
            await waiters[2]

    async def test_cancelled_waiter_is_skipped(self):
        q: StreamingQueue[int] = StreamingQueue()
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(q.next(), timeout=0.01)

        q.push(1)
        assert await q.next() == 1


class TestTerminalStates:
    async def test_push_after_finish_is_dropped(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.push(1)
        q.finish()
        q.push(2)
        assert await drain(q) == [1]

    async def test_push_after_fail_is_dropped(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.fail(ValueError("boom"))
        q.push(1)
        with pytest.raises(ValueError):
            await q.next()
        with pytest.raises(StopAsyncIteration):
            await q.next()

    async def test_finish_and_fail_are_idempotent(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.finish()
        q.finish()
        q.fail(ValueError("late"))
        assert not q.failed
        with pytest.raises(StopAsyncIteration):
            await q.next()

    async def test_fail_delivered_exactly_once(self):
        q: StreamingQueue[int] = StreamingQueue()
        err = RuntimeError("boom")
        q.fail(err)
        assert q.failed

        with pytest.raises(RuntimeError) as exc_info:
            await q.next()
        assert exc_info.value is err
        assert not q.failed

        for _ in range(2):
            with pytest.raises(StopAsyncIteration):
                await q.next()

    async def test_fail_rejects_pending_waiters_once(self):
        q: StreamingQueue[int] = StreamingQueue()
        waiter = asyncio.create_task(q.next())
        await asyncio.sleep(0)

        q.fail(RuntimeError("boom"))
        with pytest.raises(RuntimeError):
            await waiter
        with pytest.raises(StopAsyncIteration):
            await q.next()

    async def test_fail_none_normalizes(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.fail(None)
        with pytest.raises(StreamError, match="^Unknown error$"):
            await q.next()

    async def test_stored_failure_precedes_buffered_values(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.push(1)
        q.fail(RuntimeError("boom"))
        with pytest.raises(RuntimeError):
            await q.next()
        assert await q.next() == 1
        with pytest.raises(StopAsyncIteration):
            await q.next()

    async def test_fail_with_string_is_wrapped(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.fail("bad thing")
        with pytest.raises(StreamError, match="bad thing"):
            await q.next()

    async def test_abort_default_message(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.abort()
        with pytest.raises(StreamError, match="^Stream aborted$"):
            await q.next()

    async def test_abort_with_error(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.abort(KeyError("k"))
        with pytest.raises(KeyError):
            await q.next()


class TestCancel:
    async def test_cancel_keeps_buffered_values(self):
        q: StreamingQueue[int] = StreamingQueue()
        q.push(1)
        q.push(2)
        q.cancel()
        assert q.closed

        q.push(3)
        assert await drain(q) == [1, 2]

    async def test_cancel_resolves_waiters_with_terminal(self):
        q: StreamingQueue[int] = StreamingQueue()
        waiter = asyncio.create_task(q.next())
        await asyncio.sleep(0)
        q.cancel()
        with pytest.raises(StopAsyncIteration):
            await waiter


async def _numbers(n: int, fail_at: int | None = None):
    for i in range(n):
        if i == fail_at:
            raise ValueError(f"failed at {i}")
        yield i
        await asyncio.sleep(0)


class TestPump:
    async def test_drains_source(self):
        q = pump(_numbers(4))
        assert await drain(q) == [0, 1, 2, 3]

    async def test_transform(self):
        q = pump(_numbers(3), lambda i: i * 10)
        assert await drain(q) == [0, 10, 20]

    async def test_source_error_fails_queue(self):
        q = pump(_numbers(5, fail_at=2))
        assert await q.next() == 0
        assert await q.next() == 1
        with pytest.raises(ValueError, match="failed at 2"):
            await q.next()
        with pytest.raises(StopAsyncIteration):
            await q.next()

    async def test_consumer_cancel_stops_producer(self):
        produced: list[int] = []

        async def source():
            for i in range(100):
                produced.append(i)
                yield i
                await asyncio.sleep(0)

        q = pump(source())
        assert await q.next() == 0
        q.cancel()
        for _ in range(5):
            await asyncio.sleep(0)
        assert len(produced) < 100

    async def test_cancel_propagates_through_chained_pumps(self):
        produced: list[int] = []

        async def source():
            for i in range(50):
                produced.append(i)
                yield i
                await asyncio.sleep(0.01)

        async def relay(inner):
            try:
                async for item in inner:
                    yield item
            finally:
                inner.cancel()

        inner = pump(source())
        outer = pump(relay(inner))
        assert await outer.next() == 0
        outer.cancel()
        await asyncio.sleep(0.1)

        assert inner.closed
        assert len(produced) <= 2

    async def test_abort_stops_producer(self):
        produced: list[int] = []

        async def source():
            for i in range(50):
                produced.append(i)
                yield i
                await asyncio.sleep(0.01)

        q = pump(source())
        assert await q.next() == 0
        q.abort()
        await asyncio.sleep(0.1)

        assert len(produced) <= 2
        with pytest.raises(StreamError, match="Stream aborted"):
            await q.next()
