"""
Push/pull streaming channel used by every streaming stage.

A :class:`StreamingQueue` is an unbounded single-writer, multi-reader channel:

  - The producer calls ``push`` / ``finish`` / ``fail``.
  - Consumers call ``await next()`` (or ``async for``), and may stop early
    with ``cancel()`` or abort with ``abort(error)``.

Values are delivered in push order to whichever consumer has been waiting
longest.  A failure is surfaced exactly once; after that the queue behaves
as finished.  ``StopAsyncIteration`` is the terminal signal and is raised
again on every later ``next()``.

Everything runs on one event loop, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import AsyncIterable, AsyncIterator, Callable, Generic, TypeVar

from genui.errors import StreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")

_END = object()


def _normalize_error(error: object, default: str) -> BaseException:
    if error is None:
        return StreamError(default)
    if isinstance(error, BaseException):
        return error
    return StreamError(str(error))


class StreamingQueue(Generic[T]):
    """Queue-backed async iterator you can push values into."""

    def __init__(self) -> None:
        self._buffer: deque[T] = deque()
        self._waiters: deque[asyncio.Future] = deque()
        self._done = False
        self._error: BaseException | None = None
        self._producer: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def push(self, value: T) -> None:
        """Deliver *value* to the oldest waiter, or buffer it.  Dropped once closed."""
        if self._done:
            return
        waiter = self._pop_waiter()
        if waiter is not None:
            waiter.set_result(value)
        else:
            self._buffer.append(value)

    def finish(self) -> None:
        """Graceful completion.  Idempotent."""
        if self._done:
            return
        self._done = True
        waiter = self._pop_waiter()
        while waiter is not None:
            waiter.set_result(_END)
            waiter = self._pop_waiter()

    def fail(self, error: object = None) -> None:
        """
        Error completion.  Idempotent.

        ``None`` becomes ``StreamError("Unknown error")`` so consumers never
        need a null-check.
        """
        if self._done:
            return
        err = _normalize_error(error, "Unknown error")
        self._done = True
        delivered = False
        waiter = self._pop_waiter()
        while waiter is not None:
            waiter.set_exception(err)
            delivered = True
            waiter = self._pop_waiter()
        if not delivered:
            self._error = err

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    async def next(self) -> T:
        """
        Return the next value, suspending until one is available.

        Raises the stored failure once, then ``StopAsyncIteration`` once the
        queue is closed and drained.
        """
        if self._error is not None:
            err, self._error = self._error, None
            raise err
        if self._buffer:
            return self._buffer.popleft()
        if self._done:
            raise StopAsyncIteration

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        value = await waiter
        if value is _END:
            raise StopAsyncIteration
        return value

    def cancel(self) -> None:
        """
        Consumer-initiated early stop; equivalent to ``finish()``.

        Already-buffered values are kept and can still be read with ``next()``.
        A producer started by :func:`pump` is cancelled so nothing upstream
        keeps running.
        """
        if self._done:
            return
        self.finish()
        self._stop_producer()

    def abort(self, error: object = None) -> None:
        """Consumer-initiated abort; equivalent to ``fail(error or "Stream aborted")``."""
        if self._done:
            return
        self.fail(_normalize_error(error, "Stream aborted"))
        self._stop_producer()

    @property
    def closed(self) -> bool:
        return self._done

    @property
    def failed(self) -> bool:
        """``True`` while a failure is stored and not yet surfaced."""
        return self._error is not None

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        return await self.next()

    async def aclose(self) -> None:
        self.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _stop_producer(self) -> None:
        task = self._producer
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _pop_waiter(self) -> asyncio.Future | None:
        # Skip waiters whose next() was cancelled by the caller.
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                return waiter
        return None


def pump(
    source: AsyncIterable[S],
    transform: Callable[[S], T] | None = None,
) -> StreamingQueue[T]:
    """
    Drain *source* into a new queue from a background task.

    Each item (optionally passed through *transform*) is pushed; the queue is
    finished when the source ends and failed if it raises.  The task stops
    as soon as the consumer cancels the queue.
    """
    queue: StreamingQueue[T] = StreamingQueue()

    async def _run() -> None:
        try:
            async for item in source:
                if queue.closed:
                    break
                queue.push(transform(item) if transform else item)  # type: ignore[arg-type]
        except asyncio.CancelledError:
            queue.abort()
            raise
        except Exception as exc:
            logger.debug("Stream producer failed: %s", exc)
            queue.fail(exc)
        else:
            queue.finish()
        finally:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()

    # Held on the queue so the task is not garbage collected mid-stream.
    queue._producer = asyncio.get_running_loop().create_task(_run())
    return queue
