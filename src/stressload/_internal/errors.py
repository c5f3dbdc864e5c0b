"""Custom exception hierarchy for StressLoad."""

from __future__ import annotations


class StressLoadError(Exception):
    """Base exception for all StressLoad errors.

    All custom exceptions in StressLoad inherit from this class, making it
    easy to catch any tool-specific error with a single except clause.
    """


class ConfigError(StressLoadError):
    """Raised when configuration is invalid or missing.

    Fatal: raised before any worker starts.

    Examples:
        - No target URL was supplied on the command line.
        - The target URL has no host or an unsupported scheme.
        - An environment variable has an invalid value.
        - The round-robin DNS server pool is empty.
    """


class ResolutionError(StressLoadError):
    """Raised when the target host cannot be resolved for one attempt.

    Recorded as a failed transaction; the run continues.

    Examples:
        - The platform resolver returned NXDOMAIN or timed out.
        - The chosen DNS server did not answer in time.
        - The DNS reply carried no A record.
    """


class RequestError(StressLoadError):
    """Raised when a single GET attempt fails after resolution.

    Recorded as a failed transaction; the run continues.

    Examples:
        - Connection refused or connect timeout.
        - The response body could not be read in full.
    """


class EngineError(StressLoadError):
    """Raised when a worker crashed outside the per-attempt error boundary."""
