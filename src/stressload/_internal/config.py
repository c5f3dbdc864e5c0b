"""Run parameters, target parsing and environment configuration."""

from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from stressload._internal.errors import ConfigError
from stressload._internal.types import Address, ServerPool

if TYPE_CHECKING:
    from collections.abc import Iterable

_SUPPORTED_SCHEMES = ("http", "https")

# Pool queried by the round-robin DNS resolver unless overridden.
DEFAULT_DNS_SERVERS: ServerPool = (
    "192.168.11.83", "192.168.11.84", "192.168.11.85",
    "192.168.11.86", "192.168.11.87", "192.168.11.88",
    "192.168.11.89", "192.168.11.90", "192.168.11.91",
    "192.168.11.92", "192.168.11.93", "192.168.11.94",
    "192.168.11.95", "192.168.11.96", "192.168.11.97",
    "192.168.11.98", "192.168.11.99", "192.168.11.100",
    "192.168.11.160", "192.168.11.161", "192.168.11.162",
    "192.168.11.163", "192.168.11.164", "192.168.11.165",
)  # fmt: skip


@dataclass(frozen=True)
class Target:
    """Parsed target URL, shared read-only by every worker.

    Attributes:
        scheme: ``http`` or ``https``.
        host: Hostname (or literal IP) to resolve.
        port: Explicit port from the URL, or None for the scheme default.
        path: Request path, always starting with ``/``.
        query: Raw query string without the leading ``?``.
    """

    scheme: str
    host: str
    port: int | None = None
    path: str = "/"
    query: str = ""

    def url_for(self, address: Address) -> str:
        """Build the request URL with the resolved address in place of the host.

        Args:
            address: Resolved IPv4 address.

        Returns:
            ``scheme://address[:port]/path[?query]``.
        """
        netloc = address if self.port is None else f"{address}:{self.port}"
        url = f"{self.scheme}://{netloc}{self.path}"
        if self.query:
            url = f"{url}?{self.query}"
        return url


def parse_target(url: str) -> Target:
    """Parse and validate a target URL.

    Args:
        url: Absolute http(s) URL.

    Returns:
        The parsed Target.

    Raises:
        ConfigError: If the URL is empty, has an unsupported scheme, no host,
            or an invalid port.
    """
    if not url:
        msg = "Not enough arguments"
        raise ConfigError(msg)

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        msg = f"Invalid target URL {url!r}: {exc}"
        raise ConfigError(msg) from None

    scheme = parts.scheme.lower()
    if scheme not in _SUPPORTED_SCHEMES:
        msg = f"Unsupported URL scheme {parts.scheme!r} in {url!r}, expected http or https"
        raise ConfigError(msg)

    if not parts.hostname:
        msg = f"Target URL has no host: {url!r}"
        raise ConfigError(msg)

    return Target(
        scheme=scheme,
        host=parts.hostname,
        port=port,
        path=parts.path or "/",
        query=parts.query,
    )


@dataclass(frozen=True)
class RunConfig:
    """Parameters for a single load run.

    Attributes:
        url: Target URL.
        concurrency: Number of parallel workers.
        duration_seconds: Nominal run duration.
        delay_seconds: Upper bound of the randomized think time.
        benchmark: Disable think time entirely.
        quiet: Suppress per-request progress lines.
    """

    url: str
    concurrency: int = 10
    duration_seconds: float = 60.0
    delay_seconds: float = 1.0
    benchmark: bool = False
    quiet: bool = False

    def validate(self) -> Target:
        """Check run parameters and parse the target URL.

        Returns:
            The parsed Target.

        Raises:
            ConfigError: If any parameter is out of range or the URL is invalid.
        """
        if self.concurrency < 1:
            msg = f"concurrency must be >= 1, got: {self.concurrency}"
            raise ConfigError(msg)
        if self.duration_seconds <= 0:
            msg = f"duration must be positive, got: {self.duration_seconds}"
            raise ConfigError(msg)
        if self.delay_seconds < 0:
            msg = f"delay must be >= 0, got: {self.delay_seconds}"
            raise ConfigError(msg)
        return parse_target(self.url)


@dataclass(frozen=True)
class StressLoadConfig:
    """Environment-level StressLoad configuration.

    Attributes:
        request_timeout: Total timeout for one GET, in seconds.
        dns_timeout: Timeout for one DNS query, in seconds.
        dns_servers: Pool used by the round-robin DNS resolver.
    """

    request_timeout: float = 30.0
    dns_timeout: float = 2.0
    dns_servers: ServerPool = DEFAULT_DNS_SERVERS


def validate_dns_servers(servers: Iterable[str], source: str = "DNS server pool") -> ServerPool:
    """Check that every pool entry is a literal IP address.

    Args:
        servers: Candidate DNS server addresses.
        source: Name used in error messages, e.g. an environment variable.

    Returns:
        The pool as an immutable tuple.

    Raises:
        ConfigError: If the pool is empty or an entry is not an IP address.
    """
    pool = tuple(servers)
    if not pool:
        msg = f"{source} must list at least one server"
        raise ConfigError(msg)
    for server in pool:
        try:
            ipaddress.ip_address(server)
        except ValueError:
            msg = f"{source} entries must be IP addresses, got: {server!r}"
            raise ConfigError(msg) from None
    return pool


def _positive_float(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        value = float(raw)
    except ValueError:
        msg = f"{name} must be a number, got: {raw!r}"
        raise ConfigError(msg) from None
    if value <= 0:
        msg = f"{name} must be positive, got: {value}"
        raise ConfigError(msg)
    return value


def load_config() -> StressLoadConfig:
    """Load configuration from environment variables with defaults.

    Environment variables:
        STRESSLOAD_TIMEOUT: Request timeout in seconds (default: 30.0).
        STRESSLOAD_DNS_TIMEOUT: DNS query timeout in seconds (default: 2.0).
        STRESSLOAD_DNS_SERVERS: Comma-separated DNS server pool.

    Returns:
        Populated StressLoadConfig instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    request_timeout = _positive_float("STRESSLOAD_TIMEOUT", "30.0")
    dns_timeout = _positive_float("STRESSLOAD_DNS_TIMEOUT", "2.0")

    servers_str = os.environ.get("STRESSLOAD_DNS_SERVERS")
    if servers_str is None:
        dns_servers = DEFAULT_DNS_SERVERS
    else:
        dns_servers = validate_dns_servers(
            (s.strip() for s in servers_str.split(",") if s.strip()),
            "STRESSLOAD_DNS_SERVERS",
        )

    return StressLoadConfig(
        request_timeout=request_timeout,
        dns_timeout=dns_timeout,
        dns_servers=dns_servers,
    )
