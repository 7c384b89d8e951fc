"""CLI for converting an amount between two currencies."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from money_calculator.providers.base import ProviderError
from money_calculator.services.fx_conversion import ExchangeService, Money
from money_calculator.services.rate_cache import CACHE_EXT_KEY


@click.command("convert")
@click.argument("amount")
@click.argument("from_code")
@click.argument("to_code")
@with_appcontext
def convert(amount: str, from_code: str, to_code: str) -> None:
    """Convert AMOUNT from FROM_CODE into TO_CODE using the rate cache."""

    cache = current_app.extensions[CACHE_EXT_KEY]
    try:
        money = Money(amount, from_code)
        result = ExchangeService(cache).exchange(money, to_code)
    except ProviderError as exc:
        raise click.ClickException(f"Unable to fetch exchange rate: {exc}") from exc
    except ValueError as exc:
        raise click.ClickException(f"Invalid input: {exc}") from exc

    click.echo(f"{result.source} = {result.converted}")
    click.echo(str(result.rate))
