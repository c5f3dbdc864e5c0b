"""Timed GET execution against a resolved address."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiohttp

from stressload._internal.errors import RequestError

if TYPE_CHECKING:
    from stressload._internal.config import Target
    from stressload._internal.types import Address


@dataclass(frozen=True)
class RequestOutcome:
    """Result of one completed GET.

    Attributes:
        status_code: HTTP response status code.
        protocol: HTTP version string, e.g. ``HTTP/1.1``.
        body_length: Number of body bytes read.
        elapsed_seconds: Time from just before send to just after the
            full body was read.
    """

    status_code: int
    protocol: str
    body_length: int
    elapsed_seconds: float


class RequestExecutor:
    """Issue timed GET requests with keep-alive disabled.

    Wraps an ``aiohttp.ClientSession`` whose connector closes the connection
    after every response, so each attempt pays the full connection setup.
    One executor belongs to one worker.

    Attributes:
        timeout: Total per-request timeout in seconds.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        """Initialize the executor.

        Args:
            timeout: Total per-request timeout in seconds.
        """
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> RequestExecutor:
        """Open the underlying aiohttp session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(force_close=True),
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def execute(self, address: Address, target: Target) -> RequestOutcome:
        """GET the target path from ``address`` and read the whole body.

        Args:
            address: Resolved IPv4 address used in place of the host.
            target: Parsed target URL.

        Returns:
            The timed outcome.

        Raises:
            RequestError: On connection failure, timeout or body read failure.
            RuntimeError: If the executor is used outside of an async
                context manager.
        """
        if self._session is None:
            msg = "RequestExecutor must be used as an async context manager"
            raise RuntimeError(msg)

        url = target.url_for(address)
        start = time.monotonic()
        try:
            async with self._session.get(url) as resp:
                body = await resp.read()
                elapsed = time.monotonic() - start
                status_code = resp.status
                version = resp.version
        except (aiohttp.ClientError, TimeoutError, OSError) as exc:
            msg = f"GET {url}: {type(exc).__name__}: {exc}"
            raise RequestError(msg) from exc

        protocol = f"HTTP/{version.major}.{version.minor}" if version else "HTTP"
        return RequestOutcome(
            status_code=status_code,
            protocol=protocol,
            body_length=len(body),
            elapsed_seconds=elapsed,
        )
