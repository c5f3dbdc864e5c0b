"""Result dataclasses for StressLoad."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field

from stressload.metrics.histogram import LatencyHistogram

__all__ = [
    "AllResult",
    "EachResult",
    "ProgressEvent",
]


@dataclass
class EachResult:
    """Per-worker tallies, mutated only by the worker that owns them.

    ``longest`` and ``shortest`` start at sentinels (``0.0`` and ``inf``) so
    that the first success sets both.

    Attributes:
        data_bytes: Cumulative response body bytes successfully read.
        response_time_sum: Cumulative latency of successful attempts, seconds.
        success_count: Successful attempts.
        failed_count: Failed attempts.
        longest: Slowest successful attempt, seconds.
        shortest: Fastest successful attempt, seconds.
        hits_by_address: Successful attempts per resolved address.
        errors_by_type: Failed attempts per error class name.
        latency_histogram: Distribution of successful latencies.
    """

    data_bytes: int = 0
    response_time_sum: float = 0.0
    success_count: int = 0
    failed_count: int = 0
    longest: float = 0.0
    shortest: float = math.inf
    hits_by_address: dict[str, int] = field(default_factory=dict)
    errors_by_type: dict[str, int] = field(default_factory=dict)
    latency_histogram: LatencyHistogram = field(default_factory=LatencyHistogram)

    @property
    def attempts(self) -> int:
        """Return the number of completed attempts."""
        return self.success_count + self.failed_count

    def record_success(self, body_length: int, elapsed: float, address: str) -> None:
        """Fold one successful attempt into the tallies.

        Args:
            body_length: Bytes read from the response body.
            elapsed: Round-trip latency in seconds.
            address: Address the request was sent to.
        """
        self.success_count += 1
        self.data_bytes += body_length
        self.response_time_sum += elapsed
        self.longest = max(self.longest, elapsed)
        self.shortest = min(self.shortest, elapsed)
        self.hits_by_address[address] = self.hits_by_address.get(address, 0) + 1
        self.latency_histogram.record(elapsed)

    def record_failure(self, error: BaseException) -> None:
        """Fold one failed attempt into the tallies.

        Args:
            error: The error that ended the attempt.
        """
        self.failed_count += 1
        kind = type(error).__name__
        self.errors_by_type[kind] = self.errors_by_type.get(kind, 0) + 1

    def merge(self, other: EachResult) -> EachResult:
        """Combine two results into a new one.

        Counters and sums add up; ``longest``/``shortest`` take the max/min.
        Neither operand is modified.

        Args:
            other: Result to combine with.

        Returns:
            A new EachResult.
        """
        return EachResult(
            data_bytes=self.data_bytes + other.data_bytes,
            response_time_sum=self.response_time_sum + other.response_time_sum,
            success_count=self.success_count + other.success_count,
            failed_count=self.failed_count + other.failed_count,
            longest=max(self.longest, other.longest),
            shortest=min(self.shortest, other.shortest),
            hits_by_address=dict(Counter(self.hits_by_address) + Counter(other.hits_by_address)),
            errors_by_type=dict(Counter(self.errors_by_type) + Counter(other.errors_by_type)),
            latency_histogram=self.latency_histogram.merged(other.latency_histogram),
        )


@dataclass(frozen=True)
class AllResult:
    """Run-wide aggregate, built once after every worker reported.

    Every field that would divide by zero is None (or a defined constant)
    instead of NaN.

    Attributes:
        merged: Component-wise merge of all workers' results.
        duration_seconds: Run duration used as the rate denominator.
        transactions: Successful plus failed attempts.
        availability_percent: Share of attempts that succeeded, in percent.
        transaction_rate: Transactions per second.
        throughput_bytes_per_sec: Body bytes per second.
        mean_response_time: Mean latency of successes, None without successes.
    """

    merged: EachResult
    duration_seconds: float
    transactions: int
    availability_percent: float
    transaction_rate: float
    throughput_bytes_per_sec: float
    mean_response_time: float | None

    @property
    def success_count(self) -> int:
        """Return the number of successful transactions."""
        return self.merged.success_count

    @property
    def failed_count(self) -> int:
        """Return the number of failed transactions."""
        return self.merged.failed_count

    @property
    def data_bytes(self) -> int:
        """Return the total body bytes transferred."""
        return self.merged.data_bytes

    @property
    def longest(self) -> float | None:
        """Return the slowest successful transaction, None without successes."""
        return self.merged.longest if self.merged.success_count else None

    @property
    def shortest(self) -> float | None:
        """Return the fastest successful transaction, None without successes."""
        return self.merged.shortest if self.merged.success_count else None

    def latency_percentile(self, percentile: float) -> float | None:
        """Return a latency percentile in seconds, None without successes."""
        return self.merged.latency_histogram.percentile(percentile)


@dataclass(frozen=True)
class ProgressEvent:
    """One successful attempt, reported as a progress line.

    Attributes:
        protocol: HTTP version string, e.g. ``HTTP/1.1``.
        status_code: Response status code.
        latency: Round-trip latency in seconds.
        body_length: Response body size in bytes.
        path: Request path of the target URL.
        address: Address the request was sent to.
        since_start: Seconds since the run started.
        worker_id: Ordinal of the worker that made the request.
    """

    protocol: str
    status_code: int
    latency: float
    body_length: int
    path: str
    address: str
    since_start: float
    worker_id: int = 0
