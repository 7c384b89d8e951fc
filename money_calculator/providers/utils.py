"""Helper utilities for provider rate transformations."""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping


class RebaseError(ValueError):
    """Raised when rebasing rates fails due to missing data."""


def cross_rate(rates: Mapping[str, Decimal], from_code: str, to_code: str) -> Decimal:
    """Derive the `from_code` -> `to_code` rate from a table quoted against one base.

    Args:
        rates: Mapping of currency codes to Decimal rates relative to a
            canonical base (e.g., USD). The canonical base itself must be
            present with value 1.
        from_code: ISO code being sold.
        to_code: ISO code being bought.

    Raises:
        RebaseError: If either code is missing or quoted at zero.
    """

    normalized_rates = {code.upper(): Decimal(rate) for code, rate in rates.items()}
    source = from_code.strip().upper()
    target = to_code.strip().upper()

    for code in (source, target):
        if code not in normalized_rates:
            raise RebaseError(f"Missing rate for {code} when deriving cross rate.")

    source_rate = normalized_rates[source]
    if source_rate == 0:
        raise RebaseError(f"Cannot rebase using {source} with zero rate.")

    return normalized_rates[target] / source_rate
