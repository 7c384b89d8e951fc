"""CLI entry points."""

from __future__ import annotations

from flask import Flask

from .cache import cache_stats, sweep_cache
from .convert import convert


def register_cli(app: Flask) -> None:
    """Register CLI commands on the given Flask app."""

    app.cli.add_command(convert)
    app.cli.add_command(cache_stats)
    app.cli.add_command(sweep_cache)
