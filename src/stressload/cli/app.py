"""Main Typer application — entry point for the ``stressload`` CLI."""

from __future__ import annotations

import typer

from stressload.cli.run import run_cmd

app = typer.Typer(
    name="stressload",
    help="HTTP stress test tool.",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(help="Run concurrent GET requests against URL for a fixed time.")(run_cmd)
