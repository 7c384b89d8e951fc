"""Mock provider implementation for testing and local development."""

from __future__ import annotations

from decimal import Decimal

from money_calculator.utils.datetime import utc_now

from .base import BaseCurrencySource, BaseRateProvider, ProviderError
from .schemas import Currency, ExchangeRate
from .utils import RebaseError, cross_rate

USD_RATES: dict[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.90"),
    "GBP": Decimal("0.78"),
    "JPY": Decimal("150.12"),
    "CHF": Decimal("0.88"),
    "CAD": Decimal("1.36"),
}

CURRENCY_NAMES: dict[str, str] = {
    "USD": "United States Dollar",
    "EUR": "Euro",
    "GBP": "Pound Sterling",
    "JPY": "Japanese Yen",
    "CHF": "Swiss Franc",
    "CAD": "Canadian Dollar",
}


class MockRateProvider(BaseRateProvider, BaseCurrencySource):
    """Deterministic provider returning synthetic FX data."""

    name = "mock"

    def get_rate(self, from_currency: Currency | str, to_currency: Currency | str) -> ExchangeRate:
        try:
            source = Currency.of(from_currency)
            target = Currency.of(to_currency)
            return ExchangeRate(
                date=utc_now().date(),
                from_currency=self._named(source),
                to_currency=self._named(target),
                rate=cross_rate(USD_RATES, source.code, target.code),
            )
        except (RebaseError, ValueError) as exc:
            raise ProviderError(str(exc)) from exc

    def list_currencies(self) -> list[Currency]:
        return [Currency(code=code, name=CURRENCY_NAMES[code]) for code in sorted(USD_RATES)]

    @staticmethod
    def _named(currency: Currency) -> Currency:
        return Currency(code=currency.code, name=CURRENCY_NAMES.get(currency.code, currency.name))
