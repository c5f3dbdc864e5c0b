"""Integration tests for the synchronous run_load_test entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stressload import run_load_test
from stressload._internal.config import RunConfig
from stressload._internal.errors import ConfigError

if TYPE_CHECKING:
    from datetime import datetime

    from stressload.metrics.models import ProgressEvent


@pytest.mark.timeout(30)
class TestRunLoadTest:
    def test_run_to_completion(self, sync_target_server: str):
        config = RunConfig(
            url=f"{sync_target_server}/bytes?size=500",
            concurrency=3,
            duration_seconds=1.0,
            delay_seconds=0.1,
            quiet=True,
        )

        result = run_load_test(config)

        assert result.transactions > 0
        assert result.failed_count == 0
        assert result.data_bytes == result.success_count * 500
        assert result.duration_seconds == 1.0
        assert result.transactions == result.success_count + result.failed_count

    def test_callbacks(self, sync_target_server: str):
        events: list[ProgressEvent] = []
        starts: list[datetime] = []
        config = RunConfig(
            url=f"{sync_target_server}/bytes?size=10",
            concurrency=2,
            duration_seconds=1.0,
            delay_seconds=0.1,
        )

        result = run_load_test(config, on_progress=events.append, on_start=starts.append)

        assert len(starts) == 1
        assert len(events) == result.success_count

    def test_invalid_config_raises(self):
        with pytest.raises(ConfigError, match="concurrency"):
            run_load_test(RunConfig(url="http://localhost/", concurrency=0))
