"""Worker fan-out, stop signalling and result collection."""

from __future__ import annotations

import asyncio
import contextlib
import signal
import sys
import time
from datetime import datetime
from typing import TYPE_CHECKING

from stressload._internal.errors import EngineError
from stressload._internal.logging import get_logger
from stressload.engine.resolver import PlatformResolver
from stressload.engine.worker import Worker
from stressload.metrics.aggregator import merge_results, summarize

if TYPE_CHECKING:
    from collections.abc import Callable

    from stressload._internal.config import RunConfig
    from stressload.engine.resolver import EndpointResolver
    from stressload.metrics.models import AllResult, EachResult, ProgressEvent

logger = get_logger("engine.coordinator")


class Coordinator:
    """Runs ``concurrency`` workers for a fixed duration and merges their results.

    The stop signal is a one-shot ``asyncio.Event``. Workers finish the
    attempt they are in when it is raised, so a run may contain one extra
    in-flight attempt per worker beyond the nominal duration, and a hung
    request delays the final drain until it completes or times out.

    Attributes:
        config: Parameters of the run.
        resolver: Resolution strategy shared by all workers.
    """

    def __init__(
        self,
        config: RunConfig,
        resolver: EndpointResolver | None = None,
        *,
        request_timeout: float = 30.0,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        on_start: Callable[[datetime], None] | None = None,
        handle_signals: bool = False,
    ) -> None:
        """Initialize the coordinator.

        Args:
            config: Parameters of the run.
            resolver: Resolution strategy. Defaults to the platform resolver.
            request_timeout: Total per-request timeout in seconds.
            on_progress: Progress callback for successful attempts. Ignored
                in quiet mode.
            on_start: Called with the wall-clock start time once the target
                has been validated, just before workers are spawned.
            handle_signals: Raise the stop signal early on SIGINT/SIGTERM.
        """
        self.config = config
        self.resolver = resolver if resolver is not None else PlatformResolver()
        self._request_timeout = request_timeout
        self._on_progress = None if config.quiet else on_progress
        self._on_start = on_start
        self._handle_signals = handle_signals
        self._stop_event: asyncio.Event | None = None

    def stop(self) -> None:
        """Raise the stop signal before the duration has elapsed."""
        if self._stop_event is not None and not self._stop_event.is_set():
            logger.info("Early stop requested")
            self._stop_event.set()

    async def run(self) -> AllResult:
        """Execute the run and return the aggregate.

        Returns:
            The merged AllResult.

        Raises:
            ConfigError: If the URL is missing or invalid, or a run parameter
                is out of range. Raised before any worker starts.
            EngineError: If a worker ended with an unexpected exception.
        """
        target = self.config.validate()
        concurrency = self.config.concurrency
        duration = self.config.duration_seconds

        self._stop_event = asyncio.Event()
        results: asyncio.Queue[EachResult] = asyncio.Queue(maxsize=concurrency)

        logger.info(
            "Starting run: target=%s, concurrency=%d, duration=%.1fs, delay=%.3fs, "
            "benchmark=%s, resolver=%s",
            self.config.url,
            concurrency,
            duration,
            self.config.delay_seconds,
            self.config.benchmark,
            self.resolver.describe(),
        )

        if self._on_start is not None:
            self._on_start(datetime.now())

        started_at = time.monotonic()
        tasks = [
            asyncio.create_task(
                Worker(
                    worker_id=i,
                    target=target,
                    resolver=self.resolver,
                    stop_event=self._stop_event,
                    results=results,
                    delay_seconds=self.config.delay_seconds,
                    benchmark=self.config.benchmark,
                    request_timeout=self._request_timeout,
                    on_progress=self._on_progress,
                    started_at=started_at,
                ).run(),
                name=f"stressload-worker-{i}",
            )
            for i in range(concurrency)
        ]

        if self._handle_signals:
            self._install_signal_handlers()
        try:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=duration)
            interrupted = self._stop_event.is_set()
            elapsed = time.monotonic() - started_at
            self._stop_event.set()
            logger.debug("Stop signal raised after %.2fs", elapsed)

            collected = [await results.get() for _ in range(concurrency)]
        finally:
            if self._handle_signals:
                self._remove_signal_handlers()

        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        crashed = [exc for exc in outcomes if isinstance(exc, BaseException)]
        if crashed:
            for exc in crashed:
                logger.error("Worker crashed", exc_info=exc)
            msg = f"{len(crashed)} of {concurrency} workers crashed"
            raise EngineError(msg) from crashed[0]

        run_duration = elapsed if interrupted else duration
        summary = summarize(merge_results(collected), run_duration)

        logger.info(
            "Run completed: transactions=%d, failed=%d, availability=%.2f%%, "
            "drain=%.2fs after stop",
            summary.transactions,
            summary.failed_count,
            summary.availability_percent,
            time.monotonic() - started_at - elapsed,
        )
        return summary

    def _install_signal_handlers(self) -> None:
        """Install SIGINT and SIGTERM handlers that raise the stop signal."""
        if sys.platform == "win32":
            return
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.stop)

    def _remove_signal_handlers(self) -> None:
        """Remove the handlers installed by :meth:`_install_signal_handlers`."""
        if sys.platform == "win32":
            return
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
