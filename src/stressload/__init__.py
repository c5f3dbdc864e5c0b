"""StressLoad — concurrent HTTP stress testing."""

from __future__ import annotations

from stressload._internal.config import RunConfig, Target, parse_target
from stressload._internal.errors import (
    ConfigError,
    EngineError,
    RequestError,
    ResolutionError,
    StressLoadError,
)
from stressload.engine.coordinator import Coordinator
from stressload.engine.resolver import EndpointResolver, PlatformResolver, RoundRobinDnsResolver
from stressload.engine.runner import run_load_test
from stressload.metrics.models import AllResult, EachResult, ProgressEvent

__version__ = "0.1.0"

__all__ = [
    "AllResult",
    "ConfigError",
    "Coordinator",
    "EachResult",
    "EndpointResolver",
    "EngineError",
    "PlatformResolver",
    "ProgressEvent",
    "RequestError",
    "ResolutionError",
    "RoundRobinDnsResolver",
    "RunConfig",
    "StressLoadError",
    "Target",
    "parse_target",
    "run_load_test",
    "__version__",
]
