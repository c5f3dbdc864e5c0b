"""Synchronous entry point for a load run."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from stressload._internal.logging import get_logger, setup_logging
from stressload.engine.coordinator import Coordinator

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from stressload._internal.config import RunConfig
    from stressload.engine.resolver import EndpointResolver
    from stressload.metrics.models import AllResult, ProgressEvent

logger = get_logger("engine.runner")


def _install_uvloop() -> None:
    """Install uvloop as the default event loop policy if available.

    Falls back to the default asyncio event loop on Windows or if uvloop
    is not installed.
    """
    if sys.platform == "win32":
        return

    try:
        import uvloop

        uvloop.install()
        logger.debug("uvloop installed as event loop policy")
    except ImportError:
        logger.debug("uvloop not available, using default asyncio event loop")


def run_load_test(
    config: RunConfig,
    resolver: EndpointResolver | None = None,
    *,
    request_timeout: float = 30.0,
    on_progress: Callable[[ProgressEvent], None] | None = None,
    on_start: Callable[[datetime], None] | None = None,
    log_level: int = logging.INFO,
) -> AllResult:
    """Run a load test to completion in the current process.

    Installs uvloop, sets up logging and drives a :class:`Coordinator`
    with SIGINT/SIGTERM wired to an early stop.

    Args:
        config: Parameters of the run.
        resolver: Resolution strategy. Defaults to the platform resolver.
        request_timeout: Total per-request timeout in seconds.
        on_progress: Progress callback for successful attempts.
        on_start: Called with the wall-clock start time.
        log_level: Logging level.

    Returns:
        The merged AllResult.

    Raises:
        ConfigError: If the run parameters or the target URL are invalid.
        EngineError: If a worker crashed.
    """
    _install_uvloop()
    setup_logging(level=log_level)

    coordinator = Coordinator(
        config,
        resolver,
        request_timeout=request_timeout,
        on_progress=on_progress,
        on_start=on_start,
        handle_signals=True,
    )
    return asyncio.run(coordinator.run())
