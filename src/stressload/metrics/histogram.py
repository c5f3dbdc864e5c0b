"""HDR histogram of transaction latencies.

Wraps ``hdrh.histogram.HdrHistogram`` with a seconds-based API. Values are
stored as integer microseconds because the HDR histogram only records
integers.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# Range: 1 microsecond to one hour (in microseconds)
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 3_600_000_000
_SIGNIFICANT_DIGITS = 3


class LatencyHistogram:
    """Latency distribution for one worker, or for a merged run.

    Recorded values are clamped to the trackable range. Histograms built
    with the default range can be merged with :meth:`merged`.
    """

    def __init__(self) -> None:
        """Create an empty histogram with the default range."""
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            _LOWEST_TRACKABLE_US, _HIGHEST_TRACKABLE_US, _SIGNIFICANT_DIGITS
        )

    def __len__(self) -> int:
        """Return the number of recorded samples."""
        return int(self._histogram.total_count)

    def record(self, seconds: float) -> None:
        """Record one latency sample.

        Args:
            seconds: Latency in seconds.
        """
        value_us = int(seconds * 1_000_000)
        value_us = max(_LOWEST_TRACKABLE_US, min(value_us, _HIGHEST_TRACKABLE_US))
        self._histogram.record_value(value_us)

    def percentile(self, percentile: float) -> float | None:
        """Return the latency at ``percentile`` (0-100) in seconds, or None if empty."""
        if len(self) == 0:
            return None
        return float(self._histogram.get_value_at_percentile(percentile)) / 1_000_000

    def merged(self, other: LatencyHistogram) -> LatencyHistogram:
        """Return a new histogram holding the samples of both operands."""
        result = LatencyHistogram()
        result._histogram.add(self._histogram)
        result._histogram.add(other._histogram)
        return result
