"""``stressload`` command: run a load test against one URL."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from stressload import __version__
from stressload._internal.config import RunConfig, load_config, validate_dns_servers
from stressload._internal.errors import ConfigError, StressLoadError
from stressload.cli.report import format_progress, format_timestamp, print_summary
from stressload.engine.resolver import PlatformResolver, RoundRobinDnsResolver
from stressload.engine.runner import run_load_test

if TYPE_CHECKING:
    from datetime import datetime

    from stressload._internal.config import StressLoadConfig
    from stressload.engine.resolver import EndpointResolver
    from stressload.metrics.models import ProgressEvent

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"stressload {__version__}")
        raise typer.Exit


def _build_resolver(
    use_dns: bool,
    dns_servers: list[str] | None,
    settings: StressLoadConfig,
) -> EndpointResolver:
    """Pick the resolution strategy from CLI flags.

    Args:
        use_dns: Resolve through the round-robin DNS pool.
        dns_servers: Pool override from ``--dns-server``.
        settings: Environment configuration.

    Returns:
        The resolver shared by all workers.

    Raises:
        ConfigError: If ``--dns-server`` is given without ``--dns``, or one
            of its values is not an IP address.
    """
    if not use_dns:
        if dns_servers:
            msg = "--dns-server requires --dns"
            raise ConfigError(msg)
        return PlatformResolver()
    pool = settings.dns_servers
    if dns_servers:
        pool = validate_dns_servers(dns_servers, "--dns-server")
    return RoundRobinDnsResolver(
        pool,
        timeout=settings.dns_timeout,
    )


def _print_progress(event: ProgressEvent) -> None:
    console.print(format_progress(event), markup=False, highlight=False, soft_wrap=True)


def _print_start(started: datetime) -> None:
    console.print(format_timestamp(started), highlight=False)


def run_cmd(
    url: str | None = typer.Argument(
        None,
        help="Target URL, e.g. http://example.com/index.html.",
        show_default=False,
    ),
    benchmark: bool = typer.Option(
        False,
        "--benchmark",
        "-b",
        help="Benchmark mode: no delay between requests.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Quiet mode: no per-request progress lines.",
    ),
    concurrent: int = typer.Option(
        10,
        "--concurrent",
        "-c",
        help="Number of simultaneous workers.",
        min=1,
    ),
    time_: int = typer.Option(
        60,
        "--time",
        "-t",
        help="Run duration in seconds.",
        min=1,
    ),
    delay: float = typer.Option(
        1.0,
        "--delay",
        "-d",
        help="Maximum random delay between requests, in seconds.",
        min=0.0,
    ),
    dns: bool = typer.Option(
        False,
        "--dns",
        help="Resolve the host per request via a random server of the DNS pool.",
    ),
    dns_server: list[str] | None = typer.Option(
        None,
        "--dns-server",
        help="DNS server for the --dns pool (repeatable). Overrides STRESSLOAD_DNS_SERVERS.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """HTTP stress test: hammer URL with concurrent GET requests."""
    log_level = logging.DEBUG if verbose else logging.INFO

    try:
        if url is None:
            msg = "Not enough arguments"
            raise ConfigError(msg)
        settings = load_config()
        resolver = _build_resolver(dns, dns_server, settings)
        config = RunConfig(
            url=url,
            concurrency=concurrent,
            duration_seconds=float(time_),
            delay_seconds=delay,
            benchmark=benchmark,
            quiet=quiet,
        )
        result = run_load_test(
            config,
            resolver,
            request_timeout=settings.request_timeout,
            on_progress=_print_progress,
            on_start=_print_start,
            log_level=log_level,
        )
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except StressLoadError as exc:
        err_console.print(f"[red]Load test failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    print_summary(console, result)
