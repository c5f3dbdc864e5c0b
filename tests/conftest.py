"""Shared test fixtures for the StressLoad test suite."""

from __future__ import annotations

import asyncio
import socket
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import dns.flags
import dns.message
import dns.rcode
import dns.rrset
import pytest
from aiohttp import web

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# =============================================================================
# Target HTTP server handlers
# =============================================================================


async def _bytes_handler(request: web.Request) -> web.Response:
    """Return ``?size=N`` bytes after ``?delay=S`` seconds."""
    size = int(request.query.get("size", "1000"))
    delay = float(request.query.get("delay", "0"))
    if delay > 0:
        await asyncio.sleep(delay)
    return web.Response(body=b"x" * size, content_type="application/octet-stream")


async def _error_handler(request: web.Request) -> web.Response:
    """Return a configurable error status (query param: ?status=500)."""
    status = int(request.query.get("status", "500"))
    return web.Response(status=status, text="error")


def _create_target_app() -> web.Application:
    """Build the target app with all test routes."""
    app = web.Application()
    app.router.add_get("/bytes", _bytes_handler)
    app.router.add_get("/error", _error_handler)
    return app


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
async def target_server() -> AsyncIterator[str]:
    """Aiohttp target server fixture.

    Returns the base URL (e.g., 'http://127.0.0.1:54321').
    """
    app = _create_target_app()
    port = _get_free_port()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    yield f"http://127.0.0.1:{port}"
    await runner.cleanup()


@pytest.fixture
def closed_port_url() -> str:
    """URL of a localhost port with nothing listening on it."""
    return f"http://127.0.0.1:{_get_free_port()}/bytes"


@pytest.fixture
def sync_target_server() -> Iterator[str]:
    """Target server running in a background thread for sync tests.

    Used by CLI tests where ``asyncio.run`` blocks the main thread.
    """
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(_create_target_app())
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield f"http://127.0.0.1:{port}"

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


# =============================================================================
# Fake DNS server
# =============================================================================


@dataclass
class FakeDnsServer:
    """UDP DNS responder answering every A query with ``answer``.

    Attributes:
        port: UDP port the server listens on (127.0.0.1).
        answer: Address returned in the A record, or None to reply NXDOMAIN.
        queries: Query names received, in order.
        query_ids: Message IDs received, in order.
        recursion_desired: RD flag of each query, in order.
    """

    port: int = 0
    answer: str | None = "127.0.0.1"
    queries: list[str] = field(default_factory=list)
    query_ids: list[int] = field(default_factory=list)
    recursion_desired: list[bool] = field(default_factory=list)


class _FakeDnsProtocol(asyncio.DatagramProtocol):
    def __init__(self, server: FakeDnsServer) -> None:
        self._server = server
        self._transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        query = dns.message.from_wire(data)
        question = query.question[0]
        self._server.queries.append(question.name.to_text())
        self._server.query_ids.append(query.id)
        self._server.recursion_desired.append(bool(query.flags & dns.flags.RD))

        response = dns.message.make_response(query)
        if self._server.answer is None:
            response.set_rcode(dns.rcode.NXDOMAIN)
        else:
            response.answer.append(
                dns.rrset.from_text(question.name, 60, "IN", "A", self._server.answer)
            )
        assert self._transport is not None
        self._transport.sendto(response.to_wire(), addr)


@pytest.fixture
async def fake_dns_server() -> AsyncIterator[FakeDnsServer]:
    """Fake DNS server resolving every name to 127.0.0.1."""
    server = FakeDnsServer()
    loop = asyncio.get_running_loop()
    transport, _protocol = await loop.create_datagram_endpoint(
        lambda: _FakeDnsProtocol(server),
        local_addr=("127.0.0.1", 0),
    )
    server.port = transport.get_extra_info("sockname")[1]
    yield server
    transport.close()
