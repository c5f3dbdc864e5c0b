"""Run a short load test from Python instead of the CLI.

Equivalent to:

    stressload http://localhost:8080/ -c 5 -t 10 -d 0.5
"""

from __future__ import annotations

from rich.console import Console

from stressload import RunConfig, run_load_test
from stressload.cli.report import format_progress, print_summary


def main() -> None:
    """Hit a local server with five workers for ten seconds."""
    console = Console()
    config = RunConfig(
        url="http://localhost:8080/",
        concurrency=5,
        duration_seconds=10.0,
        delay_seconds=0.5,
    )
    result = run_load_test(
        config,
        on_progress=lambda event: console.print(format_progress(event), highlight=False),
    )
    print_summary(console, result)


if __name__ == "__main__":
    main()
