"""Human-readable rendering of progress lines and the final summary."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from datetime import datetime

    from rich.console import Console

    from stressload.metrics.models import AllResult, ProgressEvent

_MB = 1024 * 1024
_NOT_AVAILABLE = "N/A"
_PERCENTILES = (50.0, 90.0, 99.0)


def format_timestamp(started: datetime) -> str:
    """Format the run start time as ``YYYY-MM-DD HH:MM:SS``."""
    return started.strftime("%Y-%m-%d %H:%M:%S")


def format_progress(event: ProgressEvent) -> str:
    """Format one successful attempt as a progress line.

    Args:
        event: The progress event.

    Returns:
        ``"<proto> <status> <latency> secs: <bytes> bytes <path> <address> <since-start>"``.
    """
    return (
        f"{event.protocol} {event.status_code} {event.latency:5.2f} secs: "
        f"{event.body_length} bytes {event.path} {event.address} {int(event.since_start)}"
    )


def _seconds(value: float | None) -> str:
    return _NOT_AVAILABLE if value is None else f"{value:.2f} secs"


def _number(value: float | None) -> str:
    return _NOT_AVAILABLE if value is None else f"{value:.2f}"


def build_summary_table(result: AllResult) -> Table:
    """Build the final summary table in fixed field order.

    Undefined values (no successful transactions) are shown as ``N/A``.

    Args:
        result: Aggregate of the run.

    Returns:
        Formatted Rich Table.
    """
    table = Table(
        title="Transactions Summary",
        show_header=True,
        header_style="bold green",
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Transactions", f"{result.transactions} hits")
    table.add_row("Availability", f"{result.availability_percent:.2f} %")
    table.add_row("Data transferred", f"{result.data_bytes / _MB:.2f} MB")
    table.add_row("Response time", _seconds(result.mean_response_time))
    table.add_row("Transaction rate", f"{result.transaction_rate:.2f} trans/sec")
    table.add_row("Throughput", f"{result.throughput_bytes_per_sec / _MB:.2f} MB/sec")
    table.add_row("Successful transactions", str(result.success_count))
    table.add_row("Failed transactions", str(result.failed_count))
    table.add_row("Longest transaction", _number(result.longest))
    table.add_row("Shortest transaction", _number(result.shortest))
    for p in _PERCENTILES:
        table.add_row(f"p{p:g} response time", _seconds(result.latency_percentile(p)))

    return table


def build_breakdown_tables(result: AllResult) -> list[Table]:
    """Build the optional failure and per-address tables.

    Args:
        result: Aggregate of the run.

    Returns:
        Zero, one or two tables, depending on which breakdowns have data.
    """
    tables: list[Table] = []

    if result.merged.errors_by_type:
        errors = Table(title="Failures by Type", show_header=True, header_style="bold red")
        errors.add_column("Error")
        errors.add_column("Count", justify="right")
        for kind, count in sorted(result.merged.errors_by_type.items()):
            errors.add_row(kind, str(count))
        tables.append(errors)

    if result.merged.hits_by_address:
        hits = Table(title="Hits by Address", show_header=True, header_style="bold cyan")
        hits.add_column("Address")
        hits.add_column("Hits", justify="right")
        for address, count in sorted(
            result.merged.hits_by_address.items(), key=lambda item: (-item[1], item[0])
        ):
            hits.add_row(address, str(count))
        tables.append(hits)

    return tables


def print_summary(console: Console, result: AllResult) -> None:
    """Print the summary table followed by any breakdown tables."""
    console.print()
    console.print(build_summary_table(result))
    for table in build_breakdown_tables(result):
        console.print(table)
