"""Rate-limited single-flight scheduler for synthesis requests."""

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import ItemGenerationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS_PER_SECOND = 2.0


@dataclass
class QueueItem:
    """Pending request with the future its submitter is waiting on."""

    call: Callable[[], Awaitable[Any]]
    future: asyncio.Future
    label: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class RateLimitedScheduler:
    """Serializes calls to a quota-bound service at a bounded rate.

    Any number of coroutines may submit() concurrently. A single drain task
    executes queued requests one at a time in FIFO order and paces them so
    that request starts are at least ``1 / max_requests_per_second`` apart.
    Pacing is time-compensated: a request that already took longer than the
    interval is followed immediately by the next one.

    Example:
        scheduler = RateLimitedScheduler(max_requests_per_second=2)
        audio = await scheduler.submit(provider.synthesize, text, voice, language)
    """

    def __init__(
        self,
        max_requests_per_second: float = DEFAULT_MAX_REQUESTS_PER_SECOND,
        request_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize scheduler.

        Args:
            max_requests_per_second: Upper bound on request starts per second
            request_timeout: Seconds before a running request is abandoned
            clock: Monotonic clock in seconds (injectable for tests)
            sleep: Async sleep function (injectable for tests)

        Raises:
            ValueError: If max_requests_per_second or request_timeout is not positive
        """
        if max_requests_per_second <= 0:
            raise ValueError(
                f"max_requests_per_second must be positive, got {max_requests_per_second}"
            )
        if request_timeout is not None and request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {request_timeout}")

        self.max_requests_per_second = max_requests_per_second
        self.interval = 1.0 / max_requests_per_second
        self.request_timeout = request_timeout
        self._clock = clock
        self._sleep = sleep

        self._queue: asyncio.Queue[QueueItem] = asyncio.Queue()
        self._drain_task: asyncio.Task[None] | None = None
        self.completed = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        """Number of requests waiting to start."""
        return self._queue.qsize()

    @property
    def draining(self) -> bool:
        """True while the drain loop is active."""
        return self._drain_task is not None and not self._drain_task.done()

    def submit(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        label: str = "",
        **kwargs: Any,
    ) -> asyncio.Future:
        """Queue a request and return a future for its result.

        Args:
            func: Coroutine function performing the external call
            *args: Positional arguments for func
            label: Human-readable name used in log messages
            **kwargs: Keyword arguments for func

        Returns:
            Future resolved with func's result or rejected with its error
        """
        loop = asyncio.get_running_loop()
        item = QueueItem(
            call=lambda: func(*args, **kwargs),
            future=loop.create_future(),
            label=label,
        )
        self._queue.put_nowait(item)
        logger.debug(f"Queued request {label or item.id} ({self.pending} pending)")

        if not self.draining:
            self._drain_task = asyncio.create_task(self._drain())

        return item.future

    async def _drain(self) -> None:
        """Process queued requests serially until the queue is empty."""
        while not self._queue.empty():
            item = self._queue.get_nowait()

            if item.future.cancelled():
                logger.debug(f"Dropping cancelled request {item.label or item.id}")
                continue

            started = self._clock()
            await self._execute(item)

            elapsed = self._clock() - started
            if elapsed < self.interval:
                await self._sleep(self.interval - elapsed)

    async def _execute(self, item: QueueItem) -> None:
        name = item.label or item.id
        try:
            if self.request_timeout is not None:
                result = await asyncio.wait_for(item.call(), self.request_timeout)
            else:
                result = await item.call()
        except TimeoutError as e:
            self.failed += 1
            logger.error(f"Request {name} timed out after {self.request_timeout}s")
            if not item.future.done():
                item.future.set_exception(
                    ItemGenerationError(
                        f"Request timed out after {self.request_timeout}s", e
                    )
                )
        except Exception as e:
            self.failed += 1
            logger.debug(f"Request {name} failed: {e}")
            if not item.future.done():
                item.future.set_exception(e)
        else:
            self.completed += 1
            if not item.future.done():
                item.future.set_result(result)

    async def join(self) -> None:
        """Wait until the drain loop has emptied the queue."""
        while self.draining:
            await asyncio.shield(self._drain_task)

    async def close(self) -> None:
        """Stop the drain loop, rejecting anything still queued."""
        if self.draining:
            self._drain_task.cancel()
            try:
                await self._drain_task
            except asyncio.CancelledError:
                pass
        self._drain_task = None

        while not self._queue.empty():
            item = self._queue.get_nowait()
            if not item.future.done():
                item.future.cancel()
