"""Endpoint resolution strategies.

A resolver turns the target host into one IPv4 address per attempt. Workers
call :meth:`EndpointResolver.resolve` on every iteration, so DNS load and
endpoint variability are part of the stress test.
"""

from __future__ import annotations

import asyncio
import ipaddress
import socket
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import dns.asyncquery
import dns.exception
import dns.flags
import dns.message
import dns.rcode
import dns.rdataclass
import dns.rdatatype

from stressload._internal.config import DEFAULT_DNS_SERVERS, validate_dns_servers
from stressload._internal.errors import ResolutionError
from stressload._internal.logging import get_logger

if TYPE_CHECKING:
    import random
    from collections.abc import Iterable

    from stressload._internal.types import Address, ServerPool

logger = get_logger("engine.resolver")

DNS_PORT = 53


def _literal_ipv4(host: str) -> Address | None:
    """Return ``host`` if it is already an IPv4 literal, else None."""
    try:
        return str(ipaddress.IPv4Address(host))
    except ValueError:
        return None


class EndpointResolver(ABC):
    """Abstract base for host resolution strategies.

    Implementations hold only immutable state so a single instance can be
    shared by every worker. Randomness comes from the caller's own
    ``random.Random``.
    """

    @abstractmethod
    async def resolve(self, host: str, rng: random.Random) -> Address:
        """Resolve ``host`` to a single IPv4 address.

        Args:
            host: Hostname from the target URL.
            rng: The calling worker's random source.

        Returns:
            Dotted-quad IPv4 address.

        Raises:
            ResolutionError: If no address could be obtained for this attempt.
        """

    @abstractmethod
    def describe(self) -> str:
        """Return a short description for logs."""


class PlatformResolver(EndpointResolver):
    """Resolve through the system resolver and take the first address."""

    async def resolve(self, host: str, rng: random.Random) -> Address:
        """Resolve via ``getaddrinfo`` on the running event loop.

        Args:
            host: Hostname from the target URL.
            rng: Unused.

        Returns:
            The first IPv4 address returned by the platform.

        Raises:
            ResolutionError: On any resolver error, including a host name the
                IDNA codec rejects, or an empty answer.
        """
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(
                host, None, family=socket.AF_INET, type=socket.SOCK_STREAM
            )
        except (OSError, UnicodeError) as exc:
            msg = f"{host}: {exc}"
            raise ResolutionError(msg) from exc

        if not infos:
            msg = f"{host}: no addresses returned"
            raise ResolutionError(msg)
        return str(infos[0][4][0])

    def describe(self) -> str:
        """Return a short description for logs."""
        return "platform resolver"


class RoundRobinDnsResolver(EndpointResolver):
    """Query a randomly chosen DNS server from a fixed pool on every attempt.

    Each call picks one server uniformly at random, sends a single recursive
    ``A`` query over UDP and returns the first A record of the answer. A
    failed query fails only the current attempt: the server stays in the
    pool and no other server is tried.

    Args:
        servers: DNS server IP addresses. Must not be empty.
        timeout: Per-query timeout in seconds.
        port: UDP port of the DNS servers.

    Raises:
        ConfigError: If ``servers`` is empty or holds a non-IP entry.
    """

    def __init__(
        self,
        servers: Iterable[str] = DEFAULT_DNS_SERVERS,
        *,
        timeout: float = 2.0,
        port: int = DNS_PORT,
    ) -> None:
        self._servers: ServerPool = validate_dns_servers(servers)
        self._timeout = timeout
        self._port = port

    @property
    def servers(self) -> ServerPool:
        """Return the immutable server pool."""
        return self._servers

    def pick_server(self, rng: random.Random) -> str:
        """Pick one pool member uniformly at random.

        Args:
            rng: The calling worker's random source.

        Returns:
            A server address from the pool.
        """
        return self._servers[rng.randrange(len(self._servers))]

    async def resolve(self, host: str, rng: random.Random) -> Address:
        """Resolve ``host`` with one UDP query to a random pool member.

        IPv4 literals are returned unchanged without a query.

        Args:
            host: Hostname from the target URL.
            rng: The calling worker's random source.

        Returns:
            Address from the first A record of the answer.

        Raises:
            ResolutionError: On timeout, socket error, malformed reply,
                non-NOERROR rcode or an answer without A records.
        """
        literal = _literal_ipv4(host)
        if literal is not None:
            return literal

        server = self.pick_server(rng)
        try:
            query = dns.message.make_query(
                host, dns.rdatatype.A, dns.rdataclass.IN, flags=dns.flags.RD
            )
            response = await dns.asyncquery.udp(
                query, server, timeout=self._timeout, port=self._port
            )
        except (dns.exception.DNSException, OSError, ValueError) as exc:
            msg = f"{host} via {server}: {type(exc).__name__}: {exc}"
            raise ResolutionError(msg) from exc

        rcode = response.rcode()
        if rcode != dns.rcode.NOERROR:
            msg = f"{host} via {server}: {dns.rcode.to_text(rcode)}"
            raise ResolutionError(msg)

        for rrset in response.answer:
            if rrset.rdtype == dns.rdatatype.A:
                for rdata in rrset:
                    return str(rdata.address)

        msg = f"{host} via {server}: no A record in answer"
        raise ResolutionError(msg)

    def describe(self) -> str:
        """Return a short description for logs."""
        return f"round-robin DNS over {len(self._servers)} servers"
