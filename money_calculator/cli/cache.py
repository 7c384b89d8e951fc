"""CLI commands for inspecting and maintaining the rate cache."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from money_calculator.services.rate_cache import CACHE_EXT_KEY
from money_calculator.services.scheduler import run_sweep


@click.command("cache-stats")
@with_appcontext
def cache_stats() -> None:
    """Print the rate cache size and validity window."""

    click.echo(current_app.extensions[CACHE_EXT_KEY].stats().describe())


@click.command("sweep-cache")
@with_appcontext
def sweep_cache() -> None:
    """Remove expired entries from the rate cache."""

    removed = run_sweep(current_app._get_current_object())  # type: ignore[attr-defined]
    click.echo(f"Removed {removed or 0} expired cache entries.")
