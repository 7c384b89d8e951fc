"""Money arithmetic and the currency exchange use case."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext, localcontext

from money_calculator.providers.base import BaseRateProvider
from money_calculator.providers.schemas import Currency, ExchangeRate

ROUNDING_PRECISION = 28
AMOUNT_SCALE = Decimal("0.01")


class InvalidMoneyAmountError(ValueError):
    """Raised when an amount is missing, non-numeric, or negative."""


def get_decimal_context():
    """Return the shared Decimal context used across FX conversions."""

    context = getcontext().copy()
    context.prec = ROUNDING_PRECISION
    context.rounding = ROUND_HALF_UP
    return context


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert input into a Decimal using the shared context."""

    if value is None or isinstance(value, bool):
        raise InvalidMoneyAmountError("Amount cannot be null")
    context = get_decimal_context()
    with localcontext(context):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidMoneyAmountError(f"Amount is not a number: {value!r}") from exc
    if not result.is_finite():
        raise InvalidMoneyAmountError(f"Amount must be finite: {value!r}")
    return result


def _quantize_amount(value: Decimal) -> Decimal:
    with localcontext(get_decimal_context()):
        return value.quantize(AMOUNT_SCALE, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """A non-negative amount held in one currency, kept to two decimal places."""

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if self.currency is None:
            raise ValueError("Currency cannot be null")
        amount = to_decimal(self.amount)
        if amount < 0:
            raise InvalidMoneyAmountError(f"Amount cannot be negative: {amount}")
        object.__setattr__(self, "amount", _quantize_amount(amount))
        object.__setattr__(self, "currency", Currency.of(self.currency))

    @classmethod
    def zero(cls, currency: Currency | str) -> Money:
        return cls(amount=Decimal("0"), currency=Currency.of(currency))

    def convert(self, exchange_rate: ExchangeRate) -> Money:
        """Convert into the rate's target currency."""

        if self.currency != exchange_rate.from_currency:
            raise ValueError(
                "Cannot convert: currency mismatch "
                f"(expected {exchange_rate.from_currency.code}, got {self.currency.code})"
            )
        with localcontext(get_decimal_context()):
            converted = self.amount * exchange_rate.rate
        return Money(amount=converted, currency=exchange_rate.to_currency)

    def add(self, other: Money) -> Money:
        self._require_same_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def subtract(self, other: Money) -> Money:
        self._require_same_currency(other, "subtract")
        result = self.amount - other.amount
        if result < 0:
            raise InvalidMoneyAmountError(f"Subtraction would result in negative amount: {result}")
        return Money(amount=result, currency=self.currency)

    def multiply(self, factor: Decimal | int | float | str) -> Money:
        factor_dec = to_decimal(factor)
        if factor_dec < 0:
            raise InvalidMoneyAmountError(f"Cannot multiply by negative factor: {factor}")
        with localcontext(get_decimal_context()):
            return Money(amount=self.amount * factor_dec, currency=self.currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    def __lt__(self, other: Money) -> bool:
        self._require_same_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._require_same_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._require_same_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._require_same_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency.code}"

    def _require_same_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {operation} different currencies: "
                f"{self.currency.code} and {other.currency.code}"
            )


@dataclass(frozen=True)
class ConversionResult:
    source: Money
    converted: Money
    rate: ExchangeRate


class ExchangeService:
    """Convert money between currencies using a rate provider (usually the rate cache)."""

    def __init__(self, rate_provider: BaseRateProvider) -> None:
        if rate_provider is None:
            raise ValueError("Rate provider cannot be null")
        self._rate_provider = rate_provider

    def exchange(self, money: Money, target: Currency | str) -> ConversionResult:
        """Convert `money` into `target`.

        Raises:
            ValueError: If an input is missing or the currencies are equal.
            ProviderError: If the rate cannot be obtained.
        """

        if money is None:
            raise ValueError("Source money cannot be null")
        if target is None:
            raise ValueError("Target currency cannot be null")
        target_currency = Currency.of(target)
        if money.currency == target_currency:
            raise ValueError("Source and target currencies must be different")

        rate = self._rate_provider.get_rate(money.currency, target_currency)
        return ConversionResult(source=money, converted=money.convert(rate), rate=rate)
