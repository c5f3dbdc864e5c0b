"""Worker loop: repeated resolve-and-GET attempts until the stop signal."""

from __future__ import annotations

import asyncio
import contextlib
import random
import time
from enum import Enum, auto
from typing import TYPE_CHECKING

from stressload._internal.errors import RequestError, ResolutionError
from stressload._internal.logging import get_logger
from stressload.engine.executor import RequestExecutor
from stressload.metrics.models import EachResult, ProgressEvent

if TYPE_CHECKING:
    from collections.abc import Callable

    from stressload._internal.config import Target
    from stressload.engine.resolver import EndpointResolver

logger = get_logger("engine.worker")


class WorkerState(Enum):
    """State machine for a worker."""

    CREATED = auto()
    RUNNING = auto()
    STOPPING = auto()
    DONE = auto()


class Worker:
    """One independent request loop.

    Owns its ``EachResult``, its random source and its executor; nothing it
    mutates is shared with other workers. The loop polls the stop event
    before every attempt, so an attempt in flight when the event is set
    always completes and is counted.

    State machine: CREATED -> RUNNING -> STOPPING -> DONE

    Attributes:
        worker_id: Ordinal of this worker, used only to seed its random source.
    """

    def __init__(
        self,
        worker_id: int,
        target: Target,
        resolver: EndpointResolver,
        stop_event: asyncio.Event,
        results: asyncio.Queue[EachResult],
        *,
        delay_seconds: float = 1.0,
        benchmark: bool = False,
        request_timeout: float = 30.0,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        started_at: float | None = None,
    ) -> None:
        """Initialize a worker.

        Args:
            worker_id: Ordinal of this worker.
            target: Parsed target URL (shared, read-only).
            resolver: Resolution strategy (shared, read-only).
            stop_event: One-shot stop signal raised by the coordinator.
            results: Queue receiving this worker's final result.
            delay_seconds: Upper bound of the randomized think time.
            benchmark: Skip think time entirely.
            request_timeout: Total per-request timeout in seconds.
            on_progress: Called with a ProgressEvent after each success.
                None disables progress reporting.
            started_at: Monotonic run start, for ``since_start`` in progress
                events. Defaults to the worker's own start.
        """
        self.worker_id = worker_id
        self._target = target
        self._resolver = resolver
        self._stop_event = stop_event
        self._results = results
        self._delay_seconds = delay_seconds
        self._benchmark = benchmark
        self._request_timeout = request_timeout
        self._on_progress = on_progress
        self._started_at = started_at

        self._state = WorkerState.CREATED
        self._rng = random.Random(time.time_ns() + worker_id)  # noqa: S311
        self._result = EachResult()

    @property
    def state(self) -> WorkerState:
        """Return the current worker state."""
        return self._state

    async def run(self) -> None:
        """Loop until the stop event is set, then hand over the result once.

        The result is put on the queue even if the loop ends with an
        unexpected exception, so the coordinator's drain always completes.
        """
        if self._started_at is None:
            self._started_at = time.monotonic()
        self._state = WorkerState.RUNNING
        logger.debug("Worker %d started", self.worker_id, extra={"worker": self.worker_id})

        try:
            async with RequestExecutor(timeout=self._request_timeout) as executor:
                while not self._stop_event.is_set():
                    await self._attempt(executor)
                    if not self._benchmark:
                        await self._think()
                self._state = WorkerState.STOPPING
        finally:
            self._state = WorkerState.DONE
            self._results.put_nowait(self._result)
            logger.debug(
                "Worker %d done: success=%d, failed=%d",
                self.worker_id,
                self._result.success_count,
                self._result.failed_count,
                extra={"worker": self.worker_id},
            )

    async def _attempt(self, executor: RequestExecutor) -> None:
        """Run one resolve, GET and bookkeeping cycle.

        Args:
            executor: This worker's request executor.
        """
        try:
            address = await self._resolver.resolve(self._target.host, self._rng)
            outcome = await executor.execute(address, self._target)
        except (ResolutionError, RequestError) as exc:
            self._result.record_failure(exc)
            logger.warning(
                "Worker %d: %s: %s",
                self.worker_id,
                type(exc).__name__,
                exc,
                extra={"worker": self.worker_id},
            )
            return

        self._result.record_success(outcome.body_length, outcome.elapsed_seconds, address)

        if self._on_progress is not None:
            self._on_progress(
                ProgressEvent(
                    protocol=outcome.protocol,
                    status_code=outcome.status_code,
                    latency=outcome.elapsed_seconds,
                    body_length=outcome.body_length,
                    path=self._target.path,
                    address=address,
                    since_start=time.monotonic() - (self._started_at or 0.0),
                    worker_id=self.worker_id,
                )
            )

    async def _think(self) -> None:
        """Sleep ``delay * U(0, 1)`` at millisecond precision.

        Wakes early when the stop event is set; no attempt is interrupted.
        """
        pause = round(self._delay_seconds * self._rng.random(), 3)
        if pause <= 0:
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=pause)
