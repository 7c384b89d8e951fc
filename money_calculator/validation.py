"""Validation helpers for request payloads."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

from money_calculator.errors import ValidationError
from money_calculator.services.currency_registry import registry
from money_calculator.services.fx_conversion import InvalidMoneyAmountError, to_decimal


def _preview_codes(codes: Sequence[str], max_items: int = 10) -> str:
    subset = list(sorted(codes))[:max_items]
    preview = ", ".join(subset)
    if len(codes) > max_items:
        preview += ", ..."
    return preview


def validate_currency_code(value: str | None, *, field: str = "currency_code") -> str:
    """Ensure the provided currency code exists in the registry."""

    if value is None or not str(value).strip():
        raise ValidationError(f"'{field}' is required.", payload={"field": field})

    normalized = str(value).strip().upper()
    if not normalized.isascii() or len(normalized) != 3 or not normalized.isalpha():
        raise ValidationError(
            f"Unsupported currency code '{normalized}'. Please use a valid ISO 4217 code.",
            payload={"field": field, "code": normalized},
        )

    if not registry.is_allowed(normalized):
        codes: Iterable[str] = registry.codes
        hint = _preview_codes(tuple(codes)) if codes else "no codes configured"
        raise ValidationError(
            f"Unsupported currency code '{normalized}'. Allowed codes: {hint}.",
            payload={"field": field, "code": normalized},
        )

    return normalized


def validate_amount(value: Any, *, field: str = "amount") -> Decimal:
    """Parse a non-negative decimal amount from user input."""

    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"'{field}' is required.", payload={"field": field})
    try:
        amount = to_decimal(value)
    except InvalidMoneyAmountError as exc:
        raise ValidationError(str(exc), payload={"field": field}) from exc
    if amount < 0:
        raise ValidationError(f"Amount cannot be negative: {amount}", payload={"field": field})
    return amount
