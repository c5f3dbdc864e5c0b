"""Merging of per-worker results into the run-wide aggregate.

Both functions are pure: merging is commutative and associative, so the
order in which workers report does not change the outcome.
"""

from __future__ import annotations

from functools import reduce
from typing import TYPE_CHECKING

from stressload._internal.logging import get_logger
from stressload.metrics.models import AllResult, EachResult

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger("metrics.aggregator")


def merge_results(results: Iterable[EachResult]) -> EachResult:
    """Merge any number of per-worker results.

    Args:
        results: Results handed over by the workers.

    Returns:
        The merged result. An empty input yields a fresh EachResult.
    """
    return reduce(EachResult.merge, results, EachResult())


def availability(success_count: int, failed_count: int) -> float:
    """Return the percentage of attempts that succeeded.

    ``100.0`` whenever nothing failed, including a run with no attempts.
    """
    if failed_count == 0:
        return 100.0
    transactions = success_count + failed_count
    return 100.0 - 100.0 * failed_count / transactions


def summarize(merged: EachResult, duration_seconds: float) -> AllResult:
    """Compute the derived run-wide statistics.

    Args:
        merged: Result of :func:`merge_results`.
        duration_seconds: Rate denominator. Rates are ``0.0`` if not positive.

    Returns:
        The immutable AllResult.
    """
    transactions = merged.success_count + merged.failed_count

    if duration_seconds > 0:
        transaction_rate = transactions / duration_seconds
        throughput = merged.data_bytes / duration_seconds
    else:
        transaction_rate = 0.0
        throughput = 0.0

    mean_response_time: float | None = None
    if merged.success_count > 0:
        mean_response_time = merged.response_time_sum / merged.success_count
    else:
        logger.debug("No successful transactions, mean response time is undefined")

    return AllResult(
        merged=merged,
        duration_seconds=duration_seconds,
        transactions=transactions,
        availability_percent=availability(merged.success_count, merged.failed_count),
        transaction_rate=transaction_rate,
        throughput_bytes_per_sec=throughput,
        mean_response_time=mean_response_time,
    )
